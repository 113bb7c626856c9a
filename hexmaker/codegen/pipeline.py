"""
Generation pipeline.

Plans every binding and configuration change of a request and its child
requests up front, then writes the artifacts in order and applies each
request's configuration changes right after its files.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from ..logging_config import get_logger
from .core.config import GeneratorConfig, load_config, resolve_mapping_format
from .core.emitter import FileEmitter
from .core.generator import (
    ArtifactKind,
    GenerationAborted,
    GenerationRequest,
    GenerationResult,
    GeneratorError,
    TemplateBinding,
)
from .core.layout import ModuleLayout
from .core.naming import NamespacePath
from .core.patcher import ConfigChange, ConfigPatcher, ConfigPatchError
from .core.schema import PropertySpec, parse_properties
from .core.templates import TemplateEngine, TemplateError, create_template_engine
from .registry import MakerRegistry, get_registry

logger = get_logger(__name__)


@dataclass
class PlannedStep:
    """Bindings and configuration changes of one request."""

    request: GenerationRequest
    bindings: List[TemplateBinding] = field(default_factory=list)
    changes: List[ConfigChange] = field(default_factory=list)
    skipped: List[PurePosixPath] = field(default_factory=list)


class GenerationPipeline:
    """Runs generation requests against one project directory."""

    def __init__(
        self,
        project_dir: Union[str, Path],
        config: Optional[GeneratorConfig] = None,
        registry: Optional[MakerRegistry] = None,
        engine: Optional[TemplateEngine] = None,
        patcher: Optional[ConfigPatcher] = None,
    ):
        """
        Initialize pipeline.

        Args:
            project_dir: Project root receiving generated files
            config: Generator configuration (loaded from the project if omitted)
            registry: Maker registry (global registry if omitted)
            engine: Template store (built-in templates plus config.template_dir)
            patcher: Configuration patcher for the project
        """
        self.project_dir = Path(project_dir)
        config = config or load_config(self.project_dir)
        self.config = replace(
            config, mapping_format=resolve_mapping_format(config, self.project_dir)
        )
        self.registry = registry or get_registry()
        self.engine = engine or create_template_engine(override_dir=self.template_override_dir)
        self.emitter = FileEmitter(self.project_dir, self.engine, overwrite=self.config.overwrite)
        self.patcher = patcher or ConfigPatcher(self.project_dir)
        logger.debug("Pipeline initialized for %s", self.project_dir)

    @property
    def template_override_dir(self) -> Optional[Path]:
        """Configured template directory, relative paths taken from the project root."""
        if not self.config.template_dir:
            return None
        template_dir = Path(self.config.template_dir)
        if template_dir.is_absolute():
            return template_dir
        return self.project_dir / template_dir

    def build_request(
        self,
        kind: Union[ArtifactKind, str],
        path: Union[NamespacePath, str],
        name: str,
        properties: Union[str, Sequence[PropertySpec], None] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> GenerationRequest:
        """
        Build a request from user input.

        Raises:
            RegistryError: If the kind is unknown
            PropertyParseError: If the property list is malformed
        """
        artifact_kind = self.registry.resolve(kind)
        if not isinstance(path, NamespacePath):
            path = NamespacePath(path, self.config.root_namespace)
        if isinstance(properties, str) or properties is None:
            properties = parse_properties(properties)
        return GenerationRequest(
            kind=artifact_kind,
            path=path,
            name=name,
            properties=tuple(properties),
            options=dict(options or {}),
        )

    def plan(self, request: GenerationRequest) -> List[PlannedStep]:
        """
        Compute every step of a request without touching the filesystem.

        Raises:
            GenerationInputError: If the request or a child request is invalid
        """
        steps: List[PlannedStep] = []
        self._plan(request, steps, set())
        logger.debug(
            "Planned %d steps, %d artifacts",
            len(steps), sum(len(step.bindings) for step in steps),
        )
        return steps

    def _plan(self, request: GenerationRequest, steps: List[PlannedStep],
              seen: Set[PurePosixPath]):
        maker = self.registry.create_maker(request.kind, self.config)
        maker.validate_request(request)
        layout = ModuleLayout(request.path, self.config)

        step = PlannedStep(request)
        for binding in maker.bind(request, layout):
            if binding.destination in seen:
                logger.warning("Skipping %s, already planned in this run", binding.destination)
                step.skipped.append(binding.destination)
                continue
            seen.add(binding.destination)
            step.bindings.append(binding)

        if self.config.auto_configure:
            step.changes = maker.config_changes(request, layout)
        steps.append(step)

        for child in maker.expand(request):
            self._plan(child, steps, seen)

    def run(self, request: GenerationRequest,
            overwrite: Optional[bool] = None) -> GenerationResult:
        """
        Plan and execute a request.

        Args:
            request: Top-level request
            overwrite: Override the configured overwrite policy

        Returns:
            GenerationResult with one WriteResult per artifact

        Raises:
            GenerationInputError: Before anything is written
            GenerationAborted: When a write or config update fails part-way;
                its ``written`` lists the artifacts written before the failure
        """
        steps = self.plan(request)
        total = sum(len(step.bindings) for step in steps)
        result = GenerationResult()

        for step in steps:
            result.warnings.extend(
                f"Skipped duplicate destination {destination}" for destination in step.skipped
            )
            for binding in step.bindings:
                try:
                    written = self.emitter.emit(
                        binding.template_id, binding.destination, binding.variables, overwrite
                    )
                except (GeneratorError, TemplateError, OSError) as e:
                    self._abort(result, total, binding.destination, e)
                result.files.append(written)

            for change in step.changes:
                try:
                    applied = self.patcher.apply(change)
                except ConfigPatchError as e:
                    self._abort(result, total, self.patcher.path_for(change.target), e)
                result.record_config(change.target, applied)

        logger.info("Generated %d artifacts for %s", len(result.files), request.name)
        return result

    def _abort(self, result: GenerationResult, total: int, where, error: Exception):
        written = len(result.files)
        logger.error("Generation stopped at %s after %d of %d artifacts", where, written, total)
        raise GenerationAborted(
            f"{error} ({written} of {total} artifacts written before the failure)",
            result.files,
            total - written,
        ) from error


def generate(
    project_dir: Union[str, Path],
    kind: Union[ArtifactKind, str],
    path: str,
    name: str,
    properties: Union[str, Sequence[PropertySpec], None] = None,
    options: Optional[Dict[str, Any]] = None,
    config: Optional[GeneratorConfig] = None,
) -> GenerationResult:
    """
    Generate one artifact kind into a project.

    Args:
        project_dir: Project root
        kind: Artifact kind or alias, e.g. ``"entity"``
        path: Module path, e.g. ``"sales/order"``
        name: Artifact name, e.g. ``"Order"``
        properties: Property list string or parsed PropertySpec sequence
        options: Maker options, e.g. ``{"with-repository": True}``
        config: Generator configuration

    Returns:
        GenerationResult
    """
    pipeline = GenerationPipeline(project_dir, config)
    request = pipeline.build_request(kind, path, name, properties, options)
    return pipeline.run(request)
