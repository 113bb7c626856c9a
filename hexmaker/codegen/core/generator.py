"""
Base maker interface for all generated artifact kinds.

Defines the contract every maker implements: turning a GenerationRequest
into template bindings, child requests and configuration changes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import GeneratorConfig
from .layout import ModuleLayout
from .naming import NamespacePath
from .patcher import ConfigChange, ConfigTarget
from .schema import PropertySpec


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class GenerationInputError(GeneratorError):
    """Raised for invalid requests, before any file is touched."""

    pass


class DestinationExistsError(GeneratorError):
    """Raised when a non-empty destination exists and overwrite is off."""

    def __init__(self, path):
        super().__init__(f"File already exists: {path} (use --force to overwrite)")
        self.path = path


class GenerationAborted(GeneratorError):
    """Raised when a run stops part-way; carries what was written before."""

    def __init__(self, message: str, written: Sequence[Any], remaining: int):
        super().__init__(message)
        self.written = list(written)
        self.remaining = remaining


class ArtifactKind(Enum):
    """Generated artifact kinds, valued by their command name."""

    ENTITY = "entity"
    VALUE_OBJECT = "value-object"
    EXCEPTION = "exception"
    COMMAND = "command"
    QUERY = "query"
    REPOSITORY = "repository"
    CONTROLLER = "controller"
    FORM = "form"
    CLI_COMMAND = "cli-command"
    USE_CASE = "use-case"
    INPUT = "input"
    MESSAGE_HANDLER = "message-handler"
    DOMAIN_EVENT = "domain-event"
    EVENT_SUBSCRIBER = "event-subscriber"
    USE_CASE_TEST = "use-case-test"
    CONTROLLER_TEST = "controller-test"
    CLI_COMMAND_TEST = "cli-command-test"
    CRUD = "crud"


@dataclass(frozen=True)
class GenerationRequest:
    """One generation operation: what to make, where, and how."""

    kind: ArtifactKind
    path: NamespacePath
    name: str
    properties: Tuple[PropertySpec, ...] = ()
    options: Dict[str, Any] = field(default_factory=dict)

    def flag(self, option: str) -> bool:
        return bool(self.options.get(option, False))

    def option(self, option: str, default: Any = None) -> Any:
        value = self.options.get(option)
        return default if value in (None, "") else value

    def child(self, kind: ArtifactKind, name: str,
              properties: Optional[Sequence[PropertySpec]] = None,
              **options: Any) -> "GenerationRequest":
        """Create a child request on the same module path."""
        child_options = {"no-interaction": True}
        child_options.update(options)
        return replace(
            self,
            kind=kind,
            name=name,
            properties=tuple(properties or ()),
            options=child_options,
        )

    @property
    def properties_context(self) -> List[Dict[str, Any]]:
        return [prop.to_context() for prop in self.properties]


@dataclass(frozen=True)
class TemplateBinding:
    """A template id, where its output goes, and the variables it needs."""

    template_id: str
    destination: PurePosixPath
    variables: Dict[str, Any]


@dataclass(frozen=True)
class MakerOption:
    """An option accepted by a maker."""

    name: str
    help: str
    flag: bool = True
    choices: Optional[Tuple[str, ...]] = None
    default: Any = None


COMMON_OPTIONS = (
    MakerOption("no-interaction", "Do not prompt for properties"),
)


class Maker(ABC):
    """Abstract base class for all artifact makers."""

    #: Options beyond the common ones
    options: Tuple[MakerOption, ...] = ()

    #: Whether the maker takes a property list
    accepts_properties: bool = False

    def __init__(self, config=None):
        """Initialize maker with the generator configuration."""
        self.config = config or GeneratorConfig()

    @property
    @abstractmethod
    def artifact_kind(self) -> ArtifactKind:
        """Return the kind of artifact this maker produces."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a one-line description for listings and help."""
        pass

    def all_options(self) -> Tuple[MakerOption, ...]:
        return COMMON_OPTIONS + self.options

    def validate_request(self, request: GenerationRequest):
        """
        Check a request before anything is bound or written.

        Raises:
            GenerationInputError: On an invalid name or module path, unknown
                options or option values outside their choices
        """
        if not request.name or not request.name.isidentifier():
            raise GenerationInputError(f"Invalid {self.artifact_kind.value} name: '{request.name}'")

        segments = request.path.segments
        if not segments:
            raise GenerationInputError("Module path is required")
        for segment in segments:
            if not segment.isidentifier():
                raise GenerationInputError(
                    f"Invalid module path '{request.path.raw_path}': "
                    f"'{segment}' is not a valid namespace segment"
                )

        known = {option.name: option for option in self.all_options()}
        for key, value in request.options.items():
            if key not in known:
                raise GenerationInputError(
                    f"Unknown option '{key}' for {self.artifact_kind.value}. "
                    f"Available: {', '.join(sorted(known))}"
                )
            option = known[key]
            if option.choices and value is not None and value not in option.choices:
                raise GenerationInputError(
                    f"Invalid value '{value}' for option '{key}'. "
                    f"Expected one of: {', '.join(option.choices)}"
                )

    @abstractmethod
    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        """
        Compute the template bindings of a request.

        Args:
            request: Request of this maker's kind
            layout: Shared namespace/path derivation for the module

        Returns:
            Bindings in emission order (may be empty for pure fan-out kinds)
        """
        pass

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        """Return child requests emitted after this request's own bindings."""
        return []

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        """Return configuration changes applied after this request's files are written."""
        return []


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(self, files: List[Any] = None, config_updates: Dict[ConfigTarget, bool] = None,
                 warnings: List[str] = None):
        """
        Initialize generation result.

        Args:
            files: WriteResult per artifact written
            config_updates: Whether each touched config target was modified
            warnings: Any warnings from generation
        """
        self.files = files or []
        self.config_updates = config_updates or {}
        self.warnings = warnings or []

    @property
    def config_modified(self) -> bool:
        return any(self.config_updates.values())

    def record_config(self, target: ConfigTarget, applied: bool):
        self.config_updates[target] = self.config_updates.get(target, False) or applied
