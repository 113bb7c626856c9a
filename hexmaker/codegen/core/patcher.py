"""
Idempotent patching of the project's YAML configuration.

Each change targets one of a fixed set of files (Doctrine mappings,
Messenger buses, services, routes). Applying a change that is already
present is a no-op; any failure while rewriting a file restores the
backup taken just before.
"""

import copy
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from ...logging_config import get_logger

logger = get_logger(__name__)

BACKUP_SUFFIX = ".backup"

COMMAND_BUS = "command.bus"
QUERY_BUS = "query.bus"
COMMAND_BUS_MIDDLEWARE = ["validation", "doctrine_transaction"]
QUERY_BUS_MIDDLEWARE = ["validation"]
DOMAIN_EXCLUSIONS = ["../src/**/Domain/Model/", "../src/**/Domain/ValueObject/"]


class ConfigPatchError(Exception):
    """Raised when a configuration file cannot be read or updated."""

    pass


class ConfigTarget(Enum):
    """Configuration files the generator may patch."""

    ORM_MAPPING = ("orm-mapping", "config/packages/doctrine.yaml", ("doctrine", "orm", "mappings"))
    MESSAGE_BUS = ("message-bus", "config/packages/messenger.yaml", ("framework", "messenger", "buses"))
    SERVICES = ("services", "config/services.yaml", ("services",))
    ROUTES = ("routes", "config/routes.yaml", ())

    def __init__(self, label: str, relative_path: str, section_path: Tuple[str, ...]):
        self.label = label
        self.relative_path = relative_path
        self.section_path = section_path


# Keys set next to a target's section when missing
TARGET_DEFAULTS = {
    ConfigTarget.MESSAGE_BUS: (("framework", "messenger"), {"default_bus": COMMAND_BUS}),
}


@dataclass(frozen=True)
class ConfigChange:
    """
    A declarative change to one configuration section.

    With ``merge`` off, the change counts as applied as soon as
    ``section_key`` exists. With ``merge`` on, the payload is merged into an
    existing section and counts as applied once the section contains it.
    """

    target: ConfigTarget
    section_key: str
    payload: Dict[str, Any] = field(default_factory=dict)
    merge: bool = False


class TaggedValue:
    """A YAML node carrying a custom tag such as ``!tagged_iterator``."""

    def __init__(self, tag: str, value: Any):
        self.tag = tag
        self.value = value

    def __eq__(self, other) -> bool:
        return isinstance(other, TaggedValue) and (self.tag, self.value) == (other.tag, other.value)

    def __repr__(self) -> str:
        return f"TaggedValue({self.tag!r}, {self.value!r})"


class _ConfigLoader(yaml.SafeLoader):
    pass


class _ConfigDumper(yaml.SafeDumper):
    pass


def _construct_tagged(loader, tag_suffix, node):
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return TaggedValue(f"!{tag_suffix}", value)


def _represent_tagged(dumper, data: TaggedValue):
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


_ConfigLoader.add_multi_constructor("!", _construct_tagged)
_ConfigDumper.add_representer(TaggedValue, _represent_tagged)


class ConfigPatcher:
    """Applies ConfigChange objects to the YAML files of one project."""

    def __init__(self, project_dir: Union[str, Path],
                 paths: Optional[Dict[ConfigTarget, Union[str, Path]]] = None):
        """
        Initialize patcher.

        Args:
            project_dir: Project root
            paths: Per-target file overrides, relative to the project root
                or absolute
        """
        self.project_dir = Path(project_dir)
        self._paths = {target: Path(p) for target, p in (paths or {}).items()}

    def path_for(self, target: ConfigTarget) -> Path:
        relative = self._paths.get(target, Path(target.relative_path))
        return relative if relative.is_absolute() else self.project_dir / relative

    def load(self, target: ConfigTarget) -> Dict[str, Any]:
        """
        Parse a target file.

        Returns:
            File content, or an empty dict when the file does not exist

        Raises:
            ConfigPatchError: On invalid YAML or a non-mapping document
        """
        path = self.path_for(target)
        if not path.exists():
            return {}

        try:
            data = yaml.load(path.read_text(encoding="utf-8"), Loader=_ConfigLoader)
        except yaml.YAMLError as e:
            raise ConfigPatchError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigPatchError(f"Expected a mapping at the top of {path}")
        return data

    def section(self, target: ConfigTarget) -> Dict[str, Any]:
        """Return the target's section (empty when missing)."""
        node = self.load(target)
        for key in target.section_path:
            if not isinstance(node, dict):
                return {}
            node = node.get(key)
        return node if isinstance(node, dict) else {}

    def exists(self, target: ConfigTarget, section_key: str) -> bool:
        """Check whether ``section_key`` is present in the target's section."""
        return section_key in self.section(target)

    def is_applied(self, change: ConfigChange) -> bool:
        if not change.merge:
            return self.exists(change.target, change.section_key)

        section = self.section(change.target)
        if change.section_key not in section:
            raise ConfigPatchError(
                f"Section '{change.section_key}' not found in {self.path_for(change.target)}"
            )
        return _contains(section[change.section_key], change.payload)

    def apply(self, change: ConfigChange) -> bool:
        """
        Apply a change unless it is already present.

        Args:
            change: Change to apply

        Returns:
            True if the file was modified, False for a no-op

        Raises:
            ConfigPatchError: If the file cannot be parsed or written; the
                file is restored to its previous content first
        """
        path = self.path_for(change.target)

        if self.is_applied(change):
            logger.debug("%s already configured in %s", change.section_key, path)
            return False

        backup = self._backup(path)
        try:
            data = self.load(change.target)
            self._merge_change(data, change)
            content = self._dump(data)
            self._write(path, content)
        except Exception as e:
            self._restore(path, backup)
            logger.error("Failed to update %s, restored previous content", path, exc_info=True)
            if isinstance(e, ConfigPatchError):
                raise
            raise ConfigPatchError(f"Failed to update {path}: {e}") from e

        self._discard(backup)
        logger.info("Configured %s in %s", change.section_key, path)
        return True

    def _merge_change(self, data: Dict[str, Any], change: ConfigChange):
        section = _ensure_path(data, change.target.section_path)

        if change.target in TARGET_DEFAULTS:
            defaults_path, defaults = TARGET_DEFAULTS[change.target]
            parent = _ensure_path(data, defaults_path)
            for key, value in defaults.items():
                parent.setdefault(key, value)

        existing = section.get(change.section_key)
        if change.merge or isinstance(existing, dict):
            if existing is None:
                existing = {}
                section[change.section_key] = existing
            if not isinstance(existing, dict):
                raise ConfigPatchError(f"Section '{change.section_key}' is not a mapping")
            _deep_merge(existing, change.payload)
        else:
            section[change.section_key] = copy.deepcopy(change.payload)

    def _dump(self, data: Dict[str, Any]) -> str:
        return yaml.dump(
            data,
            Dumper=_ConfigDumper,
            indent=4,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=4096,
        )

    def _write(self, path: Path, content: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def _backup(self, path: Path) -> Optional[Path]:
        if not path.exists():
            return None
        backup = path.with_name(path.name + BACKUP_SUFFIX)
        shutil.copy2(path, backup)
        return backup

    def _restore(self, path: Path, backup: Optional[Path]):
        if backup is None:
            if path.exists():
                path.unlink()
            return
        shutil.copy2(backup, path)
        backup.unlink()

    def _discard(self, backup: Optional[Path]):
        if backup is not None and backup.exists():
            backup.unlink()


def _ensure_path(data: Dict[str, Any], keys: Tuple[str, ...]) -> Dict[str, Any]:
    node = data
    for key in keys:
        child = node.get(key)
        if child is None:
            child = {}
            node[key] = child
        elif not isinstance(child, dict):
            raise ConfigPatchError(f"Expected a mapping at '{key}'")
        node = child
    return node


def _deep_merge(target: Dict[str, Any], payload: Dict[str, Any]):
    for key, value in payload.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            current.extend(item for item in value if item not in current)
        elif isinstance(current, str) and isinstance(value, list):
            target[key] = [current] + [item for item in value if item != current]
        else:
            target[key] = copy.deepcopy(value)


def _contains(existing: Any, payload: Any) -> bool:
    if isinstance(payload, dict):
        return isinstance(existing, dict) and all(
            key in existing and _contains(existing[key], value) for key, value in payload.items()
        )
    if isinstance(payload, list):
        if isinstance(existing, str):
            existing = [existing]
        return isinstance(existing, list) and all(item in existing for item in payload)
    return existing == payload


# Change builders shared by the makers and the init command

def orm_mapping_change(layout, mapping_format: str) -> ConfigChange:
    """Register the module's mapping directory with Doctrine."""
    mapping_dir = layout.source_dir("Infrastructure", "Persistence", "Doctrine", "Orm", "Mapping")
    return ConfigChange(
        ConfigTarget.ORM_MAPPING,
        layout.module_alias,
        {
            "type": mapping_format,
            "is_bundle": False,
            "dir": f"%kernel.project_dir%/{mapping_dir}",
            "prefix": layout.namespace("Domain", "Model"),
            "alias": layout.module_alias,
        },
    )


def service_binding_change(interface_fqcn: str, implementation_fqcn: str) -> ConfigChange:
    return ConfigChange(ConfigTarget.SERVICES, interface_fqcn, {"class": implementation_fqcn})


def command_bus_change() -> ConfigChange:
    return ConfigChange(ConfigTarget.MESSAGE_BUS, COMMAND_BUS, {"middleware": list(COMMAND_BUS_MIDDLEWARE)})


def query_bus_change() -> ConfigChange:
    return ConfigChange(ConfigTarget.MESSAGE_BUS, QUERY_BUS, {"middleware": list(QUERY_BUS_MIDDLEWARE)})


def route_change(layout) -> ConfigChange:
    """Register the module's controllers for attribute routing."""
    controller_dir = layout.source_dir("UI", "Http", "Web", "Controller")
    return ConfigChange(
        ConfigTarget.ROUTES,
        f"{layout.module_key}_controllers",
        {
            "resource": {
                "path": f"../{controller_dir}/",
                "namespace": layout.namespace("UI", "Http", "Web", "Controller"),
            },
            "type": "attribute",
        },
    )


def domain_exclusions_change(root_namespace: str = "App",
                             source_dir: str = "src") -> ConfigChange:
    """Exclude domain models and value objects from service autowiring."""
    exclusions = [item.replace("../src/", f"../{source_dir}/", 1) for item in DOMAIN_EXCLUSIONS]
    return ConfigChange(
        ConfigTarget.SERVICES,
        f"{root_namespace}\\",
        {"exclude": exclusions},
        merge=True,
    )


def bus_changes() -> List[ConfigChange]:
    return [command_bus_change(), query_bus_change()]
