"""Shared fixtures for the hexmaker test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from hexmaker.codegen.core.config import GeneratorConfig
from hexmaker.codegen.core.layout import ModuleLayout
from hexmaker.codegen.core.naming import NamespacePath
from hexmaker.codegen.core.templates import TemplateEngine

SERVICES_YAML = """\
services:
    _defaults:
        autowire: true
        autoconfigure: true

    App\\:
        resource: '../src/'
        exclude:
            - '../src/DependencyInjection/'
            - '../src/Kernel.php'
"""

MESSENGER_YAML = """\
framework:
    messenger:
        transports:
            async: '%env(MESSENGER_TRANSPORT_DSN)%'
"""


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig(mapping_format="yml")


@pytest.fixture
def layout(config: GeneratorConfig) -> ModuleLayout:
    return ModuleLayout(NamespacePath("sales/order"), config)


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty Symfony project requiring Doctrine ORM 2."""
    composer = {
        "require": {
            "php": ">=8.2",
            "doctrine/orm": "^2.17",
        }
    }
    (tmp_path / "composer.json").write_text(json.dumps(composer), encoding="utf-8")
    return tmp_path


@pytest.fixture
def symfony_project(project_dir: Path) -> Path:
    """A project with the stock services.yaml and messenger.yaml."""
    packages = project_dir / "config" / "packages"
    packages.mkdir(parents=True)
    (project_dir / "config" / "services.yaml").write_text(SERVICES_YAML, encoding="utf-8")
    (packages / "messenger.yaml").write_text(MESSENGER_YAML, encoding="utf-8")
    return project_dir
