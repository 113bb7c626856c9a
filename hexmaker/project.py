from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .codegen.core.config import GeneratorConfig, detect_mapping_format
from .codegen.core.patcher import (
    COMMAND_BUS,
    COMMAND_BUS_MIDDLEWARE,
    QUERY_BUS,
    QUERY_BUS_MIDDLEWARE,
    ConfigPatcher,
    ConfigPatchError,
    ConfigTarget,
    bus_changes,
    domain_exclusions_change,
)
from .codegen.core.naming import REPOSITORY_INTERFACE_SUFFIX
from .logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_PACKAGES = (
    "symfony/framework-bundle",
    "symfony/messenger",
    "symfony/uid",
    "doctrine/orm",
    "doctrine/doctrine-bundle",
)
RECOMMENDED_PACKAGES = (
    "symfony/form",
    "symfony/validator",
    "symfony/console",
)
BUS_MIDDLEWARE = {
    COMMAND_BUS: COMMAND_BUS_MIDDLEWARE,
    QUERY_BUS: QUERY_BUS_MIDDLEWARE,
}
PROJECT_DIR_PARAMETER = "%kernel.project_dir%"


class CheckStatus(Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class CheckResult:
    """Outcome of one diagnostic check."""

    name: str
    status: CheckStatus
    message: str


class StepStatus(Enum):
    CONFIGURED = "configured"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class InitStep:
    """Outcome of one initialization step."""

    name: str
    status: StepStatus
    message: str


class ProjectDoctor:
    """Diagnose whether a Symfony project is ready for generated code."""

    def __init__(
        self,
        project_dir: str | Path,
        config: GeneratorConfig | None = None,
        patcher: ConfigPatcher | None = None,
    ) -> None:
        """Initialize the doctor.

        Args:
            project_dir: Project root.
            config: Generator configuration.
            patcher: Patcher used to read the configuration files.
        """
        self.project_dir = Path(project_dir)
        self.config = config or GeneratorConfig()
        self.patcher = patcher or ConfigPatcher(self.project_dir)

    def run(self) -> list[CheckResult]:
        """Run every check in a fixed order.

        Returns:
            One or more results per check.
        """
        results: list[CheckResult] = []
        for check in (
            self.check_composer,
            self.check_mappings,
            self.check_buses,
            self.check_services,
            self.check_routes,
        ):
            try:
                results.extend(check())
            except ConfigPatchError as e:
                logger.error("Check %s could not read configuration: %s", check.__name__, e)
                results.append(CheckResult(check.__name__[len("check_"):], CheckStatus.ERROR, str(e)))

        logger.info(
            "Doctor finished: %d ok, %d warnings, %d errors",
            *(sum(1 for r in results if r.status == status) for status in CheckStatus),
        )
        return results

    def check_composer(self) -> list[CheckResult]:
        composer_path = self.project_dir / "composer.json"
        if not composer_path.exists():
            return [CheckResult("composer", CheckStatus.ERROR, "composer.json not found")]

        try:
            composer = json.loads(composer_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            return [CheckResult("composer", CheckStatus.ERROR, f"Invalid composer.json: {e}")]

        require: dict[str, Any] = dict(composer.get("require", {}))
        require.update(composer.get("require-dev", {}))

        missing = [package for package in REQUIRED_PACKAGES if package not in require]
        if missing:
            return [CheckResult(
                "composer", CheckStatus.ERROR, f"Missing packages: {', '.join(missing)}"
            )]

        recommended = [package for package in RECOMMENDED_PACKAGES if package not in require]
        if recommended:
            return [CheckResult(
                "composer", CheckStatus.WARNING,
                f"Recommended packages not installed: {', '.join(recommended)}",
            )]
        return [CheckResult("composer", CheckStatus.OK, "All required packages present")]

    def check_mappings(self) -> list[CheckResult]:
        mappings = self.patcher.section(ConfigTarget.ORM_MAPPING)
        if not mappings:
            return [CheckResult("mappings", CheckStatus.WARNING, "No Doctrine mappings registered")]

        expected = detect_mapping_format(self.project_dir)
        results = []
        for alias, mapping in mappings.items():
            if not isinstance(mapping, dict):
                results.append(CheckResult(
                    "mappings", CheckStatus.ERROR, f"{alias}: mapping is not a section"
                ))
                continue

            mapping_type = mapping.get("type")
            mapping_dir = str(mapping.get("dir", ""))
            directory = Path(mapping_dir.replace(PROJECT_DIR_PARAMETER, str(self.project_dir)))

            if mapping_type == "yml" and expected == "xml":
                results.append(CheckResult(
                    "mappings", CheckStatus.ERROR,
                    f"{alias}: YAML mappings are not supported by the installed Doctrine ORM",
                ))
            elif mapping_type != expected:
                results.append(CheckResult(
                    "mappings", CheckStatus.WARNING,
                    f"{alias}: type '{mapping_type}' differs from detected '{expected}'",
                ))
            elif mapping_dir and not directory.is_dir():
                results.append(CheckResult(
                    "mappings", CheckStatus.WARNING, f"{alias}: directory {mapping_dir} not found"
                ))
            else:
                results.append(CheckResult("mappings", CheckStatus.OK, f"{alias}: {mapping_type}"))
        return results

    def check_buses(self) -> list[CheckResult]:
        buses = self.patcher.section(ConfigTarget.MESSAGE_BUS)
        results = []
        for bus, middleware in BUS_MIDDLEWARE.items():
            if bus not in buses:
                results.append(CheckResult(
                    "buses", CheckStatus.WARNING, f"{bus} not configured (run 'hexmaker init')"
                ))
                continue

            configured = (buses[bus] or {}).get("middleware", [])
            if isinstance(configured, str):
                configured = [configured]
            missing = [item for item in middleware if item not in configured]
            if missing:
                results.append(CheckResult(
                    "buses", CheckStatus.WARNING, f"{bus} lacks middleware: {', '.join(missing)}"
                ))
            else:
                results.append(CheckResult("buses", CheckStatus.OK, f"{bus} configured"))
        return results

    def check_services(self) -> list[CheckResult]:
        services = self.patcher.section(ConfigTarget.SERVICES)
        exclusions = domain_exclusions_change(self.config.root_namespace, self.config.source_dir)
        results = []

        root = services.get(exclusions.section_key)
        if not isinstance(root, dict):
            results.append(CheckResult(
                "services", CheckStatus.WARNING,
                f"No '{exclusions.section_key}' resource section in services.yaml",
            ))
        else:
            exclude = root.get("exclude", [])
            if isinstance(exclude, str):
                exclude = [exclude]
            missing = [item for item in exclusions.payload["exclude"] if item not in exclude]
            if missing:
                results.append(CheckResult(
                    "services", CheckStatus.WARNING,
                    f"Domain directories not excluded from autowiring: {', '.join(missing)}",
                ))
            else:
                results.append(CheckResult("services", CheckStatus.OK, "Domain exclusions present"))

        bindings = [key for key in services if str(key).endswith(REPOSITORY_INTERFACE_SUFFIX)]
        unbound = [key for key in bindings
                   if not isinstance(services[key], dict) or not services[key].get("class")]
        if unbound:
            results.append(CheckResult(
                "services", CheckStatus.ERROR,
                f"Repository interfaces without implementation: {', '.join(unbound)}",
            ))
        else:
            results.append(CheckResult(
                "services", CheckStatus.OK, f"{len(bindings)} repository binding(s)"
            ))
        return results

    def check_routes(self) -> list[CheckResult]:
        path = self.patcher.path_for(ConfigTarget.ROUTES)
        if not path.exists():
            return [CheckResult("routes", CheckStatus.WARNING, f"{path.name} not found")]

        routes = self.patcher.section(ConfigTarget.ROUTES)
        modules = [key for key in routes if str(key).endswith("_controllers")]
        return [CheckResult("routes", CheckStatus.OK, f"{len(modules)} module route import(s)")]


class ProjectInitializer:
    """Apply the configuration every generated module relies on."""

    def __init__(
        self,
        project_dir: str | Path,
        config: GeneratorConfig | None = None,
        patcher: ConfigPatcher | None = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.config = config or GeneratorConfig()
        self.patcher = patcher or ConfigPatcher(self.project_dir)

    def run(self) -> list[InitStep]:
        """Configure both buses and the domain exclusions.

        A failing step is reported and the remaining steps still run.

        Returns:
            One InitStep per change.
        """
        changes = bus_changes() + [
            domain_exclusions_change(self.config.root_namespace, self.config.source_dir)
        ]

        steps = []
        for change in changes:
            name = f"{change.target.label}: {change.section_key}"
            try:
                applied = self.patcher.apply(change)
            except ConfigPatchError as e:
                logger.error("Init step %s failed: %s", name, e)
                steps.append(InitStep(name, StepStatus.ERROR, str(e)))
                continue

            if applied:
                steps.append(InitStep(name, StepStatus.CONFIGURED, "Configured"))
            else:
                steps.append(InitStep(name, StepStatus.SKIPPED, "Already configured"))
        return steps
