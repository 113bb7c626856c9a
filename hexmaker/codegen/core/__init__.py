"""
Core code generation components.

Provides the naming, property, layout, template, emission and
configuration-patching building blocks used by every maker.
"""

from .generator import (
    ArtifactKind,
    DestinationExistsError,
    GenerationAborted,
    GenerationInputError,
    GenerationRequest,
    GenerationResult,
    GeneratorError,
    Maker,
    MakerOption,
    TemplateBinding,
)
from .schema import (
    PropertyKind,
    PropertyParseError,
    PropertySpec,
    ValidationRule,
    parse_properties,
    parse_property,
    split_properties,
)
from .naming import NamespacePath, NamingCase, convert_case
from .layout import ModuleLayout
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, TemplateNotFoundError, create_template_engine
from .emitter import FileEmitter, WriteResult
from .patcher import ConfigChange, ConfigPatcher, ConfigPatchError, ConfigTarget

__all__ = [
    # Maker interface
    "ArtifactKind",
    "GenerationRequest",
    "GenerationResult",
    "Maker",
    "MakerOption",
    "TemplateBinding",
    "GeneratorError",
    "GenerationInputError",
    "DestinationExistsError",
    "GenerationAborted",
    # Property grammar
    "PropertyKind",
    "PropertyParseError",
    "PropertySpec",
    "ValidationRule",
    "parse_properties",
    "parse_property",
    "split_properties",
    # Naming utilities
    "NamespacePath",
    "NamingCase",
    "convert_case",
    "ModuleLayout",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "TemplateNotFoundError",
    "create_template_engine",
    # Output
    "FileEmitter",
    "WriteResult",
    "ConfigChange",
    "ConfigPatcher",
    "ConfigPatchError",
    "ConfigTarget",
]
