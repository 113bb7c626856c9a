"""
Makers for the UI layer: web controllers, form types and console commands.
"""

from typing import List

from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import CLI_LAYER, CONTROLLER_LAYER, FORM_LAYER, INPUT_LAYER, ModuleLayout
from ..core.naming import derive_route, detect_write_pattern, humanize, strip_action_prefix
from ..core.patcher import ConfigChange, route_change
from .common import use_case_context
from .testing import cli_command_test_binding, controller_test_binding

FORM_ACTIONS = ("Create", "Update")


def action_of(name: str) -> str:
    """The verb prefix stripped from a name, or an empty string."""
    entity = strip_action_prefix(name)
    return name[: len(name) - len(entity)] if entity != name else ""


class ControllerMaker(Maker):
    """Attribute-routed web controller delegating to a use case."""

    accepts_properties = True
    options = (
        MakerOption("route", "Route path (derived from the name by default)", flag=False),
        MakerOption("use-case", "Use case called by the controller (default: controller name)",
                    flag=False),
        MakerOption("with-workflow", "Also generate form, use case, input and command"),
        MakerOption("with-tests", "Also generate a functional test"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.CONTROLLER

    @property
    def description(self) -> str:
        return "Web controller"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        entity = strip_action_prefix(name)
        action = action_of(name)
        use_case = request.option("use-case", name)
        route_path = request.option("route") or derive_route(name)
        uses_id = "{id}" in route_path
        uses_form = action in FORM_ACTIONS
        properties = request.properties_context

        command_args = ["$id"] if uses_id else []
        if uses_form:
            command_args.extend(f"$input->{p['name']}" for p in properties if p["name"] != "id")

        bindings = [TemplateBinding(
            "ui/Controller.php.j2",
            layout.source_file(*CONTROLLER_LAYER, f"{name}Controller.php"),
            dict(
                use_case_context(layout, use_case),
                namespace=layout.namespace(*CONTROLLER_LAYER),
                class_name=f"{name}Controller",
                action=action,
                entity_name=entity,
                route_path=route_path,
                route_name=layout.route_name(name),
                template_path=layout.twig_template(name),
                uses_id=uses_id,
                uses_form=uses_form,
                form_class=f"{entity}Type",
                form_namespace=layout.namespace(*FORM_LAYER),
                input_class=f"{use_case}Input",
                input_namespace=layout.namespace(*INPUT_LAYER),
                command_args=command_args,
                properties=properties,
            ),
        )]

        if request.flag("with-tests"):
            bindings.append(controller_test_binding(layout, name, route_path))
        return bindings

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        if not request.flag("with-workflow"):
            return []
        name = request.name
        entity = strip_action_prefix(name)
        return [
            request.child(ArtifactKind.FORM, entity, request.properties, input=f"{name}Input"),
            request.child(ArtifactKind.USE_CASE, name),
            request.child(ArtifactKind.INPUT, f"{name}Input", request.properties),
            request.child(ArtifactKind.COMMAND, name, request.properties, entity=entity),
        ]

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        return [route_change(layout)]


class FormMaker(Maker):
    """Symfony form type bound to an input DTO."""

    accepts_properties = True
    options = (
        MakerOption("input", "Input DTO class bound to the form (default: <name>Input)",
                    flag=False),
        MakerOption("with-command", "Also generate the input and command for an action"),
        MakerOption("action", "Action for --with-command (default: Create<name>)", flag=False),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.FORM

    @property
    def description(self) -> str:
        return "Form type"

    def input_class(self, request: GenerationRequest) -> str:
        if request.option("input"):
            return request.option("input")
        if request.flag("with-command"):
            return f"{self.action(request)}Input"
        return f"{request.name}Input"

    def action(self, request: GenerationRequest) -> str:
        return request.option("action", f"Create{request.name}")

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [TemplateBinding(
            "ui/FormType.php.j2",
            layout.source_file(*FORM_LAYER, f"{request.name}Type.php"),
            {
                "namespace": layout.namespace(*FORM_LAYER),
                "class_name": f"{request.name}Type",
                "input_class": self.input_class(request),
                "input_namespace": layout.namespace(*INPUT_LAYER),
                "properties": request.properties_context,
            },
        )]

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        if not request.flag("with-command"):
            return []
        action = self.action(request)
        return [
            request.child(ArtifactKind.INPUT, self.input_class(request), request.properties),
            request.child(ArtifactKind.COMMAND, action, request.properties, entity=request.name),
        ]


class CliCommandMaker(Maker):
    """Symfony console command, optionally wired to a use case."""

    options = (
        MakerOption("command-name", "Console name (default: app:<path>:<name>)", flag=False),
        MakerOption("with-use-case", "Also generate use case, input and command"),
        MakerOption("with-tests", "Also generate a command test"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.CLI_COMMAND

    @property
    def description(self) -> str:
        return "Console command"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        command_name = request.option("command-name") or layout.console_name(name)

        bindings = [TemplateBinding(
            "ui/CliCommand.php.j2",
            layout.source_file(*CLI_LAYER, f"{name}Command.php"),
            dict(
                use_case_context(layout, name),
                namespace=layout.namespace(*CLI_LAYER),
                class_name=f"{name}Command",
                command_name=command_name,
                description=f"Execute {humanize(name)} operation",
                with_use_case=request.flag("with-use-case"),
                needs_id=detect_write_pattern(name, self.config.pattern_synonyms)
                in ("update", "delete"),
            ),
        )]

        if request.flag("with-tests"):
            bindings.append(cli_command_test_binding(layout, name, command_name))
        return bindings

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        if not request.flag("with-use-case"):
            return []
        name = request.name
        return [
            request.child(ArtifactKind.USE_CASE, name),
            request.child(ArtifactKind.INPUT, f"{name}Input"),
            request.child(ArtifactKind.COMMAND, name, entity=strip_action_prefix(name)),
        ]
