"""
hexmaker code generation module.

Generates hexagonal Symfony/Doctrine artifacts from a module path, a name
and a property list.
"""

from .registry import (
    MakerRegistry,
    RegistryError,
    get_maker,
    get_maker_info,
    get_registry,
    list_supported_kinds,
)
from .core.generator import (
    ArtifactKind,
    GenerationAborted,
    GenerationResult,
    GeneratorError,
    Maker,
)
from .core.schema import PropertySpec, PropertyParseError, parse_properties
from .core.config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .pipeline import GenerationPipeline, generate

# Version info
__version__ = "0.1.0"


def list_all_kind_info():
    """Information about every registered artifact kind, keyed by name."""
    return {kind: get_maker_info(kind) for kind in list_supported_kinds()}


# Export main interfaces
__all__ = [
    "MakerRegistry",
    "RegistryError",
    "Maker",
    "ArtifactKind",
    "GenerationPipeline",
    "GenerationResult",
    "GenerationAborted",
    "GeneratorError",
    "PropertySpec",
    "PropertyParseError",
    "parse_properties",
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    "generate",
    "get_maker",
    "get_maker_info",
    "get_registry",
    "list_all_kind_info",
    "list_supported_kinds",
]
