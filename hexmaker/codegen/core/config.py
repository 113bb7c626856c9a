"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import json
import re
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict

from .naming import DEFAULT_PATTERN_SYNONYMS


CONFIG_FILENAME = "hexmaker.json"
MAPPING_FORMATS = ("auto", "yml", "xml")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class GeneratorConfig:
    """Configuration for hexagonal code generation."""

    # Namespace and layout
    root_namespace: str = "App"
    source_dir: str = "src"
    tests_dir: str = "tests"

    # Doctrine mapping format: auto, yml, xml
    mapping_format: str = "auto"

    # Output behaviour
    overwrite: bool = False
    auto_configure: bool = True
    template_dir: Optional[str] = None

    # Verb tokens used to classify write commands
    pattern_synonyms: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PATTERN_SYNONYMS.items()}
    )

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configuration values."""
        self._defaults = {
            "root_namespace": "App",
            "source_dir": "src",
            "tests_dir": "tests",
            "mapping_format": "auto",
            "overwrite": False,
            "auto_configure": True,
        }

    def get_config(self, project_dir: Optional[Union[str, Path]] = None,
                   custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration for a project.

        Args:
            project_dir: Project root, searched for hexmaker.json
            custom_config: Custom configuration overrides
            config_file: Explicit JSON configuration file

        Returns:
            Merged configuration
        """
        base_config = dict(self._defaults)

        if config_file:
            base_config.update(self._load_config_file(config_file))
        elif project_dir and (Path(project_dir) / CONFIG_FILENAME).exists():
            base_config.update(self._load_config_file(Path(project_dir) / CONFIG_FILENAME))

        if custom_config:
            base_config.update(
                {key: value for key, value in custom_config.items() if value is not None}
            )

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in GeneratorConfig.__dataclass_fields__.values()}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get('custom', {}))
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        mapping_format = config_args.get("mapping_format", "auto")
        if mapping_format not in MAPPING_FORMATS:
            raise ConfigError(
                f"Invalid mapping_format '{mapping_format}'. "
                f"Expected one of: {', '.join(MAPPING_FORMATS)}"
            )

        if "pattern_synonyms" in config_args:
            config_args["pattern_synonyms"] = merge_pattern_synonyms(
                config_args["pattern_synonyms"]
            )

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate a configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if config.mapping_format not in MAPPING_FORMATS:
            warnings.append(f"Invalid mapping_format: {config.mapping_format}")

        for segment in config.root_namespace.split("\\"):
            if segment and not segment.isidentifier():
                warnings.append(f"Invalid root_namespace: {config.root_namespace}")
                break

        unknown_patterns = set(config.pattern_synonyms) - {"create", "update", "delete"}
        if unknown_patterns:
            warnings.append(f"Unknown patterns in pattern_synonyms: {sorted(unknown_patterns)}")

        if config.template_dir and not Path(config.template_dir).is_dir():
            warnings.append(f"Template directory not found: {config.template_dir}")

        return warnings


def detect_mapping_format(project_dir: Union[str, Path]) -> str:
    """
    Detect the Doctrine mapping format for a project.

    ORM 3 dropped YAML mappings, so projects requiring doctrine/orm ^3 or
    ^4 in composer.json get XML.

    Args:
        project_dir: Project root

    Returns:
        ``"xml"`` or ``"yml"``
    """
    composer_path = Path(project_dir) / "composer.json"
    if not composer_path.exists():
        return "yml"

    try:
        composer = json.loads(composer_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return "yml"

    constraint = str(composer.get("require", {}).get("doctrine/orm", ""))
    if re.search(r"\^[34](?!\d)", constraint):
        return "xml"
    return "yml"


def resolve_mapping_format(config: GeneratorConfig, project_dir: Union[str, Path]) -> str:
    """
    Resolve ``auto`` to a concrete mapping format.

    Raises:
        ConfigError: If the configured format is not a known one
    """
    if config.mapping_format not in MAPPING_FORMATS:
        raise ConfigError(
            f"Invalid mapping_format '{config.mapping_format}'. "
            f"Expected one of: {', '.join(MAPPING_FORMATS)}"
        )
    if config.mapping_format == "auto":
        return detect_mapping_format(project_dir)
    return config.mapping_format


def merge_pattern_synonyms(configured: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """
    Extend the built-in verb tokens with configured ones.

    Built-in tokens come first and patterns missing from ``configured``
    keep their defaults.

    Raises:
        ConfigError: If the value is not a mapping of pattern to token list
    """
    if not isinstance(configured, dict):
        raise ConfigError("pattern_synonyms must be an object of pattern to token list")

    merged = {pattern: list(tokens) for pattern, tokens in DEFAULT_PATTERN_SYNONYMS.items()}
    for pattern, tokens in configured.items():
        if not isinstance(tokens, list) or not all(isinstance(t, str) for t in tokens):
            raise ConfigError(f"pattern_synonyms.{pattern} must be a list of strings")
        existing = merged.setdefault(pattern, [])
        existing.extend(token for token in tokens if token not in existing)
    return merged


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(project_dir: Optional[Union[str, Path]] = None,
                custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        project_dir: Project root, searched for hexmaker.json
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(project_dir, custom_config, config_file)
