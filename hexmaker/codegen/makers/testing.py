"""
Makers for PHPUnit tests of use cases, controllers and console commands.

The binding helpers are shared with the makers that generate the tested
artifact, so ``--with-tests`` and the standalone test makers emit the
same file.
"""

from typing import List, Optional

from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import CLI_LAYER, CONTROLLER_LAYER, ModuleLayout
from ..core.naming import derive_route, humanize
from .common import use_case_context


def use_case_test_binding(layout: ModuleLayout, name: str) -> TemplateBinding:
    return TemplateBinding(
        "tests/UseCaseTest.php.j2",
        layout.test_file("Application", name, f"{name}Test.php"),
        dict(
            use_case_context(layout, name),
            namespace=layout.test_namespace("Application", name),
            class_name=f"{name}Test",
        ),
    )


def controller_test_binding(layout: ModuleLayout, name: str,
                            route: Optional[str] = None) -> TemplateBinding:
    route_path = route or derive_route(name)
    return TemplateBinding(
        "tests/ControllerTest.php.j2",
        layout.test_file(*CONTROLLER_LAYER, f"{name}ControllerTest.php"),
        {
            "namespace": layout.test_namespace(*CONTROLLER_LAYER),
            "class_name": f"{name}ControllerTest",
            "controller_class": f"{name}Controller",
            "route_path": route_path,
            "uses_id": "{id}" in route_path,
        },
    )


def cli_command_test_binding(layout: ModuleLayout, name: str,
                             command_name: Optional[str] = None) -> TemplateBinding:
    return TemplateBinding(
        "tests/CliCommandTest.php.j2",
        layout.test_file(*CLI_LAYER, f"{name}CommandTest.php"),
        {
            "namespace": layout.test_namespace(*CLI_LAYER),
            "class_name": f"{name}CommandTest",
            "command_class": f"{name}Command",
            "command_namespace": layout.namespace(*CLI_LAYER),
            "command_name": command_name or layout.console_name(name),
            "description": f"Execute {humanize(name)} operation",
        },
    )


class UseCaseTestMaker(Maker):

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.USE_CASE_TEST

    @property
    def description(self) -> str:
        return "PHPUnit test for a use case"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [use_case_test_binding(layout, request.name)]


class ControllerTestMaker(Maker):

    options = (
        MakerOption("route", "Route path under test (derived from the name by default)",
                    flag=False),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.CONTROLLER_TEST

    @property
    def description(self) -> str:
        return "Functional test for a web controller"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [controller_test_binding(layout, request.name, request.option("route"))]


class CliCommandTestMaker(Maker):

    options = (
        MakerOption("command-name", "Console command name under test", flag=False),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.CLI_COMMAND_TEST

    @property
    def description(self) -> str:
        return "Test for a console command"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [cli_command_test_binding(layout, request.name, request.option("command-name"))]
