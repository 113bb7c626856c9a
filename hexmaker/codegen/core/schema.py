"""
Property schema for generated entities, commands and inputs.

Parses the compact property grammar ``name[:kind[(a[,b])]][:modifier]*``
into PropertySpec objects that templates can render consistently.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union, Any
from enum import Enum


Bound = Union[int, float]


class PropertyParseError(ValueError):
    """Exception raised for malformed property definitions."""

    def __init__(self, message: str, fragment: str):
        super().__init__(f"{message}: '{fragment}'")
        self.fragment = fragment


class PropertyKind(Enum):
    """Supported property kinds."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    DATETIME = "datetime"
    DATE = "date"
    EMAIL = "email"
    TEXT = "text"


KIND_ALIASES = {
    "integer": PropertyKind.INT,
    "boolean": PropertyKind.BOOL,
    "decimal": PropertyKind.FLOAT,
}

STRING_LIKE_KINDS = frozenset({PropertyKind.STRING, PropertyKind.EMAIL, PropertyKind.TEXT})
NUMERIC_KINDS = frozenset({PropertyKind.INT, PropertyKind.FLOAT})

PHP_TYPE_MAP = {
    PropertyKind.STRING: "string",
    PropertyKind.INT: "int",
    PropertyKind.BOOL: "bool",
    PropertyKind.FLOAT: "float",
    PropertyKind.DATETIME: "\\DateTimeImmutable",
    PropertyKind.DATE: "\\DateTimeImmutable",
    PropertyKind.EMAIL: "string",
    PropertyKind.TEXT: "string",
}

DOCTRINE_TYPE_MAP = {
    PropertyKind.STRING: "string",
    PropertyKind.INT: "integer",
    PropertyKind.BOOL: "boolean",
    PropertyKind.FLOAT: "decimal",
    PropertyKind.DATETIME: "datetime_immutable",
    PropertyKind.DATE: "date_immutable",
    PropertyKind.TEXT: "text",
    PropertyKind.EMAIL: "string",
}

FORM_TYPE_MAP = {
    PropertyKind.STRING: "TextType",
    PropertyKind.INT: "IntegerType",
    PropertyKind.BOOL: "CheckboxType",
    PropertyKind.FLOAT: "NumberType",
    PropertyKind.DATETIME: "DateTimeType",
    PropertyKind.DATE: "DateType",
    PropertyKind.EMAIL: "EmailType",
    PropertyKind.TEXT: "TextareaType",
}

MODIFIERS = ("nullable", "unique", "required")

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_KIND_PATTERN = re.compile(r"^([A-Za-z_]+)(?:\((.*)\))?$", re.DOTALL)


@dataclass(frozen=True)
class ValidationRule:
    """A guard rendered as ``if (<condition>) throw ...(<message>)``."""

    rule: str
    condition: str
    message: str


@dataclass(frozen=True)
class PropertySpec:
    """Represents a single property of a generated class."""

    name: str
    kind: PropertyKind = PropertyKind.STRING
    nullable: bool = False
    unique: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[Bound] = None
    max: Optional[Bound] = None

    @property
    def is_string_like(self) -> bool:
        return self.kind in STRING_LIKE_KINDS

    @property
    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS

    @property
    def target_type(self) -> str:
        """PHP type of the property."""
        return PHP_TYPE_MAP[self.kind]

    @property
    def storage_type(self) -> str:
        """Doctrine column type of the property."""
        return DOCTRINE_TYPE_MAP[self.kind]

    @property
    def form_type(self) -> str:
        return FORM_TYPE_MAP[self.kind]

    @property
    def declaration_type(self) -> str:
        """PHP type including the nullable marker, e.g. ``?string``."""
        return f"?{self.target_type}" if self.nullable else self.target_type

    def validation_rules(self) -> List[ValidationRule]:
        """
        Build the ordered validation guards for this property.

        Order: emptiness, format, numeric bounds (lower first), length
        bounds (lower first).

        Returns:
            List of ValidationRule, empty when nothing needs checking
        """
        var = f"${self.name}"
        guard = f"null !== {var} && " if self.nullable else ""
        rules = []

        if self.is_string_like and not self.nullable:
            rules.append(ValidationRule(
                "required", f"'' === trim({var})", f"{self.name} cannot be empty"
            ))

        if self.kind == PropertyKind.EMAIL:
            rules.append(ValidationRule(
                "format",
                f"{guard}false === filter_var({var}, FILTER_VALIDATE_EMAIL)",
                "Invalid email format",
            ))

        if self.is_numeric:
            if self.min is not None:
                rules.append(ValidationRule(
                    "min", f"{guard}{var} < {self.min}",
                    f"{self.name} must be at least {self.min}",
                ))
            if self.max is not None:
                rules.append(ValidationRule(
                    "max", f"{guard}{var} > {self.max}",
                    f"{self.name} cannot exceed {self.max}",
                ))

        if self.is_string_like:
            if self.min_length is not None:
                rules.append(ValidationRule(
                    "min_length", f"{guard}mb_strlen(trim({var})) < {self.min_length}",
                    f"{self.name} must be at least {self.min_length} characters",
                ))
            if self.max_length is not None:
                rules.append(ValidationRule(
                    "max_length", f"{guard}mb_strlen(trim({var})) > {self.max_length}",
                    f"{self.name} cannot exceed {self.max_length} characters",
                ))

        return rules

    def to_context(self) -> Dict[str, Any]:
        """Convert to the dictionary handed to templates."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "php_type": self.target_type,
            "declaration_type": self.declaration_type,
            "doctrine_type": self.storage_type,
            "form_type": self.form_type,
            "nullable": self.nullable,
            "unique": self.unique,
            "min_length": self.min_length,
            "max_length": self.max_length,
            "min": self.min,
            "max": self.max,
            "is_string_like": self.is_string_like,
            "is_numeric": self.is_numeric,
            "is_email": self.kind == PropertyKind.EMAIL,
            "column_length": self._column_length(),
            "validations": [
                {"rule": r.rule, "condition": r.condition, "message": r.message}
                for r in self.validation_rules()
            ],
        }

    def _column_length(self) -> Optional[int]:
        if self.kind in (PropertyKind.STRING, PropertyKind.EMAIL):
            return self.max_length or 255
        return None


def split_properties(text: str) -> List[str]:
    """
    Split a comma-joined property list at top level.

    Commas inside parentheses belong to a constraint list and do not
    separate properties.

    Args:
        text: e.g. ``"a:int(0,10),b:string(1,5)"``

    Returns:
        List of individual property strings, blanks dropped

    Raises:
        PropertyParseError: If parentheses are unbalanced
    """
    items = []
    current = []
    depth = 0

    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise PropertyParseError("Unbalanced parentheses", text)
        if char == "," and depth == 0:
            items.append("".join(current))
            current = []
        else:
            current.append(char)

    if depth != 0:
        raise PropertyParseError("Unbalanced parentheses", text)

    items.append("".join(current))
    return [item.strip() for item in items if item.strip()]


def _split_fields(spec: str) -> List[str]:
    """Split one property on ``:`` outside parentheses."""
    fields = []
    current = []
    depth = 0

    for char in spec:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise PropertyParseError("Unbalanced parentheses", spec)
        if char == ":" and depth == 0:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    if depth != 0:
        raise PropertyParseError("Unbalanced parentheses", spec)

    fields.append("".join(current).strip())
    return fields


def _parse_bound(token: str, kind: PropertyKind, spec: str) -> Optional[Bound]:
    token = token.strip()
    if not token:
        return None
    try:
        return int(token)
    except ValueError:
        pass
    if kind == PropertyKind.FLOAT:
        try:
            value = float(token)
        except ValueError:
            pass
        else:
            if math.isfinite(value):
                return value
    raise PropertyParseError(f"Invalid bound '{token}'", spec)


def _parse_kind(token: str, spec: str) -> Tuple[PropertyKind, Optional[Bound], Optional[Bound]]:
    match = _KIND_PATTERN.match(token)
    if not match:
        raise PropertyParseError("Invalid type declaration", token)

    kind_name = match.group(1).lower()
    if kind_name in KIND_ALIASES:
        kind = KIND_ALIASES[kind_name]
    else:
        try:
            kind = PropertyKind(kind_name)
        except ValueError:
            raise PropertyParseError("Unknown property type", match.group(1)) from None

    constraints = match.group(2)
    if constraints is None or not constraints.strip():
        return kind, None, None

    if kind not in STRING_LIKE_KINDS and kind not in NUMERIC_KINDS:
        raise PropertyParseError(f"Type '{kind.value}' does not accept constraints", token)

    bounds = constraints.split(",")
    if len(bounds) > 2:
        raise PropertyParseError("Too many constraint bounds", token)

    lower = _parse_bound(bounds[0], kind, spec)
    upper = _parse_bound(bounds[1], kind, spec) if len(bounds) == 2 else None
    if kind in STRING_LIKE_KINDS:
        if any(isinstance(b, float) for b in (lower, upper)):
            raise PropertyParseError("Length bounds must be integers", token)
        if any(b is not None and b < 0 for b in (lower, upper)):
            raise PropertyParseError("Length bounds must not be negative", token)
    if lower is not None and upper is not None and lower > upper:
        raise PropertyParseError("Lower bound exceeds upper bound", token)
    return kind, lower, upper


def parse_property(spec: str) -> PropertySpec:
    """
    Parse a single property definition.

    Args:
        spec: e.g. ``"age:int(0,150)"`` or ``"email:email:unique"``

    Returns:
        Parsed PropertySpec

    Raises:
        PropertyParseError: On empty names, unknown types or modifiers,
            unbalanced parentheses or invalid bounds
    """
    fields = _split_fields(spec.strip())
    name = fields[0]
    if not _NAME_PATTERN.match(name):
        raise PropertyParseError("Invalid property name", name or spec)

    kind = PropertyKind.STRING
    lower = upper = None
    if len(fields) > 1 and fields[1]:
        kind, lower, upper = _parse_kind(fields[1], spec)

    nullable = False
    unique = False
    for modifier in fields[2:]:
        token = modifier.lower()
        if token == "nullable":
            nullable = True
        elif token == "unique":
            unique = True
        elif token == "required":
            nullable = False
        else:
            raise PropertyParseError("Unknown property modifier", modifier)

    if kind in STRING_LIKE_KINDS:
        return PropertySpec(
            name=name, kind=kind, nullable=nullable, unique=unique,
            min_length=lower, max_length=upper,
        )
    return PropertySpec(
        name=name, kind=kind, nullable=nullable, unique=unique, min=lower, max=upper
    )


def parse_properties(text: Optional[str]) -> Tuple[PropertySpec, ...]:
    """
    Parse a comma-joined property list.

    Args:
        text: e.g. ``"age:int(0,150),email:email:unique,bio:text:nullable"``

    Returns:
        Tuple of PropertySpec in the given order (empty for blank input)

    Raises:
        PropertyParseError: On any malformed item or duplicate names
    """
    if not text or not text.strip():
        return ()

    specs = []
    seen = set()
    for item in split_properties(text):
        spec = parse_property(item)
        if spec.name in seen:
            raise PropertyParseError("Duplicate property", spec.name)
        seen.add(spec.name)
        specs.append(spec)
    return tuple(specs)
