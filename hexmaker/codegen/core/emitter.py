"""
File emission for generated artifacts.

Renders a template through the TemplateEngine and writes the result
below the project root, refusing to clobber hand-edited files.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Union

from ...logging_config import get_logger
from .generator import DestinationExistsError, GenerationInputError
from .templates import TemplateEngine

logger = get_logger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of writing one artifact."""

    path: Path
    template_id: str
    overwritten: bool = False


class FileEmitter:
    """Renders templates into files of one project."""

    def __init__(self, project_dir: Union[str, Path], engine: TemplateEngine,
                 overwrite: bool = False):
        """
        Initialize emitter.

        Args:
            project_dir: Project root all destinations are relative to
            engine: Template store used to resolve template ids
            overwrite: Default overwrite policy for non-empty files
        """
        self.project_dir = Path(project_dir)
        self.engine = engine
        self.overwrite = overwrite

    def resolve(self, destination: Union[str, PurePosixPath]) -> Path:
        """
        Resolve a destination below the project root.

        Raises:
            GenerationInputError: If the destination escapes the project root
        """
        relative = PurePosixPath(destination)
        if relative.is_absolute() or ".." in relative.parts:
            raise GenerationInputError(f"Destination must stay inside the project: {destination}")
        return self.project_dir.joinpath(*relative.parts)

    def emit(self, template_id: str, destination: Union[str, PurePosixPath],
             variables: Dict[str, Any], overwrite: Optional[bool] = None) -> WriteResult:
        """
        Render a template and write it.

        Args:
            template_id: Template to render
            destination: Path relative to the project root
            variables: Template variables
            overwrite: Override the emitter's default overwrite policy

        Returns:
            WriteResult for the written file

        Raises:
            TemplateNotFoundError: If the template does not exist
            DestinationExistsError: If a non-empty file exists and overwrite is off
            OSError: On filesystem failures
        """
        allow_overwrite = self.overwrite if overwrite is None else overwrite
        path = self.resolve(destination)

        existed = path.exists() and path.stat().st_size > 0
        if existed and not allow_overwrite:
            raise DestinationExistsError(destination)

        content = self.engine.render_template(template_id, variables)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s from %s", path, template_id)

        return WriteResult(path=path, template_id=template_id, overwritten=existed)
