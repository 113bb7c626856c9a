"""
CRUD bundle maker.

Fans a single request out into the entity, its repository, one use
case/command/input chain per action and the web controllers, in the
order they are written.
"""

from typing import List

from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import ModuleLayout
from ..core.schema import PropertySpec

CRUD_ACTIONS = ("Create", "Update", "Delete", "Get", "List")
WRITE_ACTIONS = ("Create", "Update")


class CrudMaker(Maker):
    """Complete create/read/update/delete slice for one entity."""

    accepts_properties = True
    options = (
        MakerOption("route-prefix", "Route prefix (default: /<name>s)", flag=False),
        MakerOption("with-tests", "Also generate use case and controller tests"),
        MakerOption("with-id-vo", "Also generate an identifier value object"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.CRUD

    @property
    def description(self) -> str:
        return "Entity, repository, use cases, commands, inputs, form and controllers"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return []

    def route_prefix(self, request: GenerationRequest) -> str:
        prefix = request.option("route-prefix", f"/{request.name.lower()}s")
        return "/" + prefix.strip("/")

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        name = request.name
        properties = request.properties
        with_tests = request.flag("with-tests")
        prefix = self.route_prefix(request)
        tests = {"with-tests": with_tests}

        children = [
            request.child(ArtifactKind.ENTITY, name, properties,
                          **{"with-id-vo": request.flag("with-id-vo")}),
            request.child(ArtifactKind.REPOSITORY, name, properties),
        ]

        for action in CRUD_ACTIONS:
            action_name = f"{action}{name}"
            action_properties = self._action_properties(action, properties)
            children.append(request.child(ArtifactKind.USE_CASE, action_name, **tests))
            children.append(request.child(
                ArtifactKind.COMMAND, action_name, action_properties, entity=name
            ))
            children.append(request.child(
                ArtifactKind.INPUT, f"{action_name}Input", action_properties
            ))

        def controller(action: str, route: str, **options) -> GenerationRequest:
            action_properties = properties if action in WRITE_ACTIONS else ()
            return request.child(
                ArtifactKind.CONTROLLER, f"{action}{name}", action_properties,
                route=route, **tests, **options
            )

        children.extend([
            controller("Create", f"{prefix}/new"),
            controller("Update", f"{prefix}/{{id}}/edit"),
            request.child(ArtifactKind.FORM, name, properties, input=f"Create{name}Input"),
            controller("Delete", f"{prefix}/{{id}}/delete"),
            controller("Show", f"{prefix}/{{id}}", **{"use-case": f"Get{name}"}),
            controller("List", prefix),
        ])
        return children

    def _action_properties(self, action: str, properties):
        if action in WRITE_ACTIONS:
            return properties
        if action == "Get":
            return (PropertySpec("id"),)
        return ()
