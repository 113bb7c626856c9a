"""
Naming utilities for hexagonal code generation.

Handles namespace path normalization, case conversions and the
name derivations shared by every generated artifact (repository
names, entity extraction, route paths, write-pattern detection).
"""

import re
from typing import Dict, List, Optional, Sequence
from enum import Enum


# Storage technology prefix of repository adapters (DoctrineOrderRepository)
ADAPTER_PREFIX = "Doctrine"
ADAPTER_SUFFIX = "Repository"
REPOSITORY_INTERFACE_SUFFIX = "RepositoryInterface"

ACTION_PREFIXES = ("Create", "Update", "Delete", "Show", "List", "Search", "Find", "Get")

DEFAULT_PATTERN_SYNONYMS: Dict[str, List[str]] = {
    "create": ["create", "creer"],
    "update": ["update", "modifier", "mettre"],
    "delete": ["delete", "supprimer", "remove"],
}


class NamingCase(Enum):
    """Different naming case styles."""
    SNAKE_CASE = "snake"      # user_name
    CAMEL_CASE = "camel"      # userName
    PASCAL_CASE = "pascal"    # UserName
    KEBAB_CASE = "kebab"      # user-name


class NamespacePath:
    """
    Normalized module path such as ``Sales/Order``.

    The raw value is slash/dash separated (``user-account/profile``); each
    ``/`` delimits a namespace level and dashes are folded into PascalCase.
    """

    def __init__(self, raw_path: str, root_namespace: str = "App"):
        """
        Initialize namespace path.

        Args:
            raw_path: User supplied path fragment
            root_namespace: Root PHP namespace, empty to omit it
        """
        self.raw_path = raw_path
        self.root_namespace = root_namespace
        self._value = self.normalize(raw_path)

    @staticmethod
    def normalize(raw: str) -> str:
        """
        Normalize a path fragment.

        The first character and every character following ``/`` or ``-``
        is upper-cased, other characters keep their case, then dashes are
        removed. Leading and trailing slashes are trimmed.

        Args:
            raw: Path fragment, e.g. ``user-account/profile-settings``

        Returns:
            Normalized path, e.g. ``UserAccount/ProfileSettings``
        """
        trimmed = raw.strip("/")
        chars = []
        capitalize_next = True
        for char in trimmed:
            chars.append(char.upper() if capitalize_next else char)
            capitalize_next = char in "/-"
        return "".join(chars).replace("-", "").strip("/")

    @property
    def value(self) -> str:
        return self._value

    @property
    def segments(self) -> List[str]:
        return [segment for segment in self._value.split("/") if segment]

    def has_namespace(self) -> bool:
        return bool(self._value)

    def to_namespace(self, suffix: str = "") -> str:
        """
        Build a PHP namespace from the root namespace and the path.

        Args:
            suffix: Appended verbatim, e.g. ``\\Domain\\Model``

        Returns:
            Namespace such as ``App\\Sales\\Order\\Domain\\Model``
        """
        parts = []
        if self.root_namespace:
            parts.append(self.root_namespace)
        if self._value:
            parts.append(self._value.replace("/", "\\"))
        return "\\".join(parts) + suffix

    def to_path(self) -> str:
        return self._value

    def to_short_name(self) -> str:
        return self._value.rsplit("/", 1)[-1]

    def __eq__(self, other) -> bool:
        if not isinstance(other, NamespacePath):
            return NotImplemented
        return (self._value, self.root_namespace) == (other._value, other.root_namespace)

    def __hash__(self) -> int:
        return hash((self._value, self.root_namespace))

    def __repr__(self) -> str:
        return f"NamespacePath({self._value!r}, root_namespace={self.root_namespace!r})"

    def __str__(self) -> str:
        return self._value


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert a PascalCase or camelCase name to the target case style."""
    if target_case == NamingCase.SNAKE_CASE:
        return _to_snake_case(name)
    elif target_case == NamingCase.KEBAB_CASE:
        return _to_kebab_case(name)
    elif target_case == NamingCase.CAMEL_CASE:
        return lcfirst(_to_pascal_case(name))
    elif target_case == NamingCase.PASCAL_CASE:
        return _to_pascal_case(name)
    else:
        return name


def _to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name.replace('-', '_'))
    return re.sub(r'_+', '_', name.lower()).strip('_')


def _to_kebab_case(name: str) -> str:
    """Convert to kebab-case, splitting only where a lowercase letter meets an uppercase one."""
    return re.sub(r'([a-z])([A-Z])', r'\1-\2', name).lower()


def _to_pascal_case(name: str) -> str:
    parts = re.split(r'[_\-\s]+', name)
    return ''.join(ucfirst(part) for part in parts if part)


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def lcfirst(value: str) -> str:
    return value[:1].lower() + value[1:]


def humanize(name: str) -> str:
    """Split a PascalCase name into words: ``CreateUser`` -> ``Create User``."""
    return re.sub(r'([a-z])([A-Z])', r'\1 \2', name)


def repository_interface_name(entity_name: str) -> str:
    return f"{entity_name}{REPOSITORY_INTERFACE_SUFFIX}"


def repository_adapter_name(entity_name: str) -> str:
    return f"{ADAPTER_PREFIX}{entity_name}{ADAPTER_SUFFIX}"


def strip_action_prefix(name: str, prefixes: Sequence[str] = ACTION_PREFIXES) -> str:
    """
    Extract the entity noun from an imperative artifact name.

    Exactly one prefix is removed, choosing the longest match. Names that
    match no prefix, or that consist only of a prefix, are returned unchanged.

    Args:
        name: Artifact name such as ``ListInvoiceItems``
        prefixes: Recognized verb prefixes

    Returns:
        Entity name such as ``InvoiceItems``
    """
    matches = [prefix for prefix in prefixes if name.startswith(prefix) and len(name) > len(prefix)]
    if not matches:
        return name
    longest = max(matches, key=len)
    return name[len(longest):]


def derive_route(name: str) -> str:
    """Derive a route path from an artifact name: ``CreatePost`` -> ``/create-post``."""
    return "/" + _to_kebab_case(name)


def detect_write_pattern(name: str,
                         synonyms: Optional[Dict[str, List[str]]] = None) -> Optional[str]:
    """
    Classify the write intent of a command name.

    Args:
        name: Command name such as ``CreateOrder``
        synonyms: Verb tokens per pattern, checked in create/update/delete order

    Returns:
        ``"create"``, ``"update"``, ``"delete"`` or None
    """
    synonyms = synonyms or DEFAULT_PATTERN_SYNONYMS
    lowered = name.lower()
    for pattern in ("create", "update", "delete"):
        for token in synonyms.get(pattern, []):
            if lowered.startswith(token.lower()):
                return pattern
    return None
