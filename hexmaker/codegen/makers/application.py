"""
Makers for the application layer: commands, queries, use cases and
input DTOs.
"""

from typing import List

from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import INPUT_LAYER, USE_CASE_LAYER, ModuleLayout
from ..core.naming import detect_write_pattern
from ..core.patcher import ConfigChange, command_bus_change, query_bus_change
from .common import repository_context, use_case_context
from .testing import use_case_test_binding

WRITE_PATTERNS = ("create", "update", "delete")


class CommandMaker(Maker):
    """Write command with its handler, optionally backed by a factory."""

    accepts_properties = True
    options = (
        MakerOption("factory", "Create the aggregate through a factory"),
        MakerOption("with-tests", "Also generate unit and integration handler tests"),
        MakerOption("pattern", "Write pattern (detected from the name by default)",
                    flag=False, choices=WRITE_PATTERNS),
        MakerOption("entity", "Entity handled by the command (default: aggregate name)",
                    flag=False),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.COMMAND

    @property
    def description(self) -> str:
        return "CQRS command and command handler"

    def detect_pattern(self, request: GenerationRequest):
        return request.option("pattern") or detect_write_pattern(
            request.name, self.config.pattern_synonyms
        )

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        namespace = layout.application_namespace(name)
        entity = request.option("entity", layout.aggregate_name)
        pattern = self.detect_pattern(request)
        properties = request.properties_context
        command_class = f"{name}Command"
        handler_class = f"{name}CommandHandler"

        has_id = any(p["name"] == "id" for p in properties)
        command_vars = {
            "namespace": namespace,
            "class_name": command_class,
            "properties": properties,
            "pattern": pattern,
            "needs_id": pattern in ("update", "delete") and not has_id,
        }
        handler_vars = dict(
            repository_context(layout, entity),
            namespace=namespace,
            class_name=handler_class,
            command_class=command_class,
            pattern=pattern,
            properties=[p for p in properties if p["name"] != "id"],
        )

        bindings = [TemplateBinding(
            "application/Command.php.j2",
            layout.source_file("Application", name, f"{command_class}.php"),
            command_vars,
        )]

        if request.flag("factory"):
            factory_class = f"{layout.aggregate_name}Factory"
            handler_vars["factory_class"] = factory_class
            bindings.append(TemplateBinding(
                "application/CommandHandlerWithFactory.php.j2",
                layout.source_file("Application", name, f"{handler_class}.php"),
                handler_vars,
            ))
            bindings.append(TemplateBinding(
                "application/Factory.php.j2",
                layout.source_file("Application", name, f"{factory_class}.php"),
                dict(
                    repository_context(layout, entity),
                    namespace=namespace,
                    class_name=factory_class,
                    properties=handler_vars["properties"],
                ),
            ))
        else:
            bindings.append(TemplateBinding(
                "application/CommandHandler.php.j2",
                layout.source_file("Application", name, f"{handler_class}.php"),
                handler_vars,
            ))

        if request.flag("with-tests"):
            for test_type in ("Unit", "Integration"):
                bindings.append(TemplateBinding(
                    f"tests/CommandHandler{test_type}Test.php.j2",
                    layout.typed_test_file(test_type, "Application", name, f"{handler_class}Test.php"),
                    dict(
                        handler_vars,
                        namespace=layout.typed_test_namespace(test_type, "Application", name),
                        class_name=f"{handler_class}Test",
                        handler_class=handler_class,
                        handler_namespace=namespace,
                        command_properties=properties,
                        needs_id=command_vars["needs_id"],
                    ),
                ))

        return bindings

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        return [command_bus_change()]


class QueryMaker(Maker):
    """Read query with its handler and response DTO."""

    accepts_properties = True
    options = (
        MakerOption("with-tests", "Also generate a unit handler test"),
        MakerOption("entity", "Entity returned by the query (default: aggregate name)",
                    flag=False),
        MakerOption("collection", "The response wraps a list of entities"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.QUERY

    @property
    def description(self) -> str:
        return "CQRS query, query handler and response"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        namespace = layout.application_namespace(name)
        entity = request.option("entity", layout.aggregate_name)
        is_collection = request.flag("collection")
        properties = request.properties_context
        needs_id = not is_collection and not properties
        has_id = needs_id or any(p["name"] == "id" for p in properties)
        shared = dict(
            repository_context(layout, entity),
            namespace=namespace,
            query_class=f"{name}Query",
            handler_class=f"{name}QueryHandler",
            response_class=f"{name}Response",
            is_collection=is_collection,
            needs_id=needs_id,
            find_by_id=has_id and not is_collection,
            properties=properties,
        )

        bindings = [
            TemplateBinding(
                "application/Query.php.j2",
                layout.source_file("Application", name, f"{name}Query.php"),
                dict(shared, class_name=f"{name}Query"),
            ),
            TemplateBinding(
                "application/QueryHandler.php.j2",
                layout.source_file("Application", name, f"{name}QueryHandler.php"),
                dict(shared, class_name=f"{name}QueryHandler"),
            ),
            TemplateBinding(
                "application/Response.php.j2",
                layout.source_file("Application", name, f"{name}Response.php"),
                dict(shared, class_name=f"{name}Response"),
            ),
        ]

        if request.flag("with-tests"):
            bindings.append(TemplateBinding(
                "tests/QueryHandlerTest.php.j2",
                layout.typed_test_file("Unit", "Application", name, f"{name}QueryHandlerTest.php"),
                dict(
                    shared,
                    namespace=layout.typed_test_namespace("Unit", "Application", name),
                    class_name=f"{name}QueryHandlerTest",
                    handler_namespace=namespace,
                ),
            ))

        return bindings

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        return [query_bus_change()]


class UseCaseMaker(Maker):
    """Use case orchestrating a command against a repository port."""

    options = (
        MakerOption("with-tests", "Also generate a use case test"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.USE_CASE

    @property
    def description(self) -> str:
        return "Application use case"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        bindings = [TemplateBinding(
            "application/UseCase.php.j2",
            layout.source_file(*USE_CASE_LAYER, f"{name}UseCase.php"),
            dict(
                use_case_context(layout, name),
                namespace=layout.namespace(*USE_CASE_LAYER),
                class_name=f"{name}UseCase",
            ),
        )]

        if request.flag("with-tests"):
            bindings.append(use_case_test_binding(layout, name))
        return bindings


class InputMaker(Maker):
    """Validated input DTO bound to forms and use cases."""

    accepts_properties = True

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.INPUT

    @property
    def description(self) -> str:
        return "Input DTO with validation constraints"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [TemplateBinding(
            "application/Input.php.j2",
            layout.source_file(*INPUT_LAYER, f"{request.name}.php"),
            {
                "namespace": layout.namespace(*INPUT_LAYER),
                "class_name": request.name,
                "properties": request.properties_context,
            },
        )]
