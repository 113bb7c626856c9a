"""Unit tests for hexmaker.codegen.core.emitter.

Tests cover:
- Rendering into nested directories below the project root
- Refusing to overwrite non-empty files unless allowed
- Treating empty files as absent
- Rejecting destinations outside the project root
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from hexmaker.codegen.core.emitter import FileEmitter
from hexmaker.codegen.core.generator import DestinationExistsError, GenerationInputError
from hexmaker.codegen.core.templates import TemplateEngine, TemplateNotFoundError

pytestmark = pytest.mark.unit

DESTINATION = PurePosixPath("src/Sales/Order/Domain/Model/Order.php")


@pytest.fixture
def emitter(tmp_path: Path) -> FileEmitter:
    engine = TemplateEngine()
    engine.add_template("greeting.j2", "hello {{ name }}\n")
    return FileEmitter(tmp_path, engine)


class TestEmit:
    def test_writes_rendered_content(self, emitter: FileEmitter, tmp_path: Path):
        result = emitter.emit("greeting.j2", DESTINATION, {"name": "Order"})

        target = tmp_path / "src" / "Sales" / "Order" / "Domain" / "Model" / "Order.php"
        assert result.path == target
        assert result.template_id == "greeting.j2"
        assert result.overwritten is False
        assert target.read_text(encoding="utf-8") == "hello Order\n"

    def test_existing_file_is_protected(self, emitter: FileEmitter, tmp_path: Path):
        emitter.emit("greeting.j2", DESTINATION, {"name": "first"})

        with pytest.raises(DestinationExistsError, match="--force"):
            emitter.emit("greeting.j2", DESTINATION, {"name": "second"})
        assert (tmp_path / DESTINATION).read_text(encoding="utf-8") == "hello first\n"

    def test_overwrite_per_call(self, emitter: FileEmitter, tmp_path: Path):
        emitter.emit("greeting.j2", DESTINATION, {"name": "first"})
        result = emitter.emit("greeting.j2", DESTINATION, {"name": "second"}, overwrite=True)

        assert result.overwritten is True
        assert (tmp_path / DESTINATION).read_text(encoding="utf-8") == "hello second\n"

    def test_overwrite_default_policy(self, tmp_path: Path):
        engine = TemplateEngine()
        engine.add_template("greeting.j2", "hi")
        emitter = FileEmitter(tmp_path, engine, overwrite=True)
        emitter.emit("greeting.j2", "a.txt", {})
        assert emitter.emit("greeting.j2", "a.txt", {}).overwritten is True

    def test_empty_file_is_replaced(self, emitter: FileEmitter, tmp_path: Path):
        target = tmp_path / DESTINATION
        target.parent.mkdir(parents=True)
        target.touch()

        result = emitter.emit("greeting.j2", DESTINATION, {"name": "Order"})
        assert result.overwritten is False
        assert target.read_text(encoding="utf-8") == "hello Order\n"

    def test_unknown_template_writes_nothing(self, emitter: FileEmitter, tmp_path: Path):
        with pytest.raises(TemplateNotFoundError):
            emitter.emit("missing.j2", DESTINATION, {})
        assert not (tmp_path / DESTINATION).exists()


class TestResolve:
    @pytest.mark.parametrize("destination", ["../outside.php", "src/../../outside.php", "/etc/passwd"])
    def test_rejects_escaping_paths(self, emitter: FileEmitter, destination):
        with pytest.raises(GenerationInputError):
            emitter.resolve(destination)

    def test_resolves_relative_path(self, emitter: FileEmitter, tmp_path: Path):
        assert emitter.resolve("src/A.php") == tmp_path / "src" / "A.php"
