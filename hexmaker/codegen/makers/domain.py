"""
Makers for the domain layer: entities, value objects, exceptions,
domain events and repository ports with their Doctrine adapters.
"""

from typing import List

from ..core.config import MAPPING_FORMATS, ConfigError
from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import (
    EVENT_LAYER,
    EXCEPTION_LAYER,
    MAPPING_LAYER,
    MODEL_LAYER,
    PERSISTENCE_LAYER,
    PORT_LAYER,
    VALUE_OBJECT_LAYER,
    ModuleLayout,
)
from ..core.naming import (
    NamingCase,
    convert_case,
    lcfirst,
    repository_adapter_name,
    repository_interface_name,
)
from ..core.patcher import ConfigChange, orm_mapping_change, service_binding_change


class EntityMaker(Maker):
    """Pure domain entity plus its Doctrine mapping file."""

    accepts_properties = True
    options = (
        MakerOption("with-repository", "Also generate the repository port and adapter"),
        MakerOption("with-id-vo", "Also generate an identifier value object"),
        MakerOption("with-tests", "Also generate a unit test"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.ENTITY

    @property
    def description(self) -> str:
        return "Domain entity with its ORM mapping"

    @property
    def mapping_format(self) -> str:
        if self.config.mapping_format == "auto":
            return "yml"
        if self.config.mapping_format not in MAPPING_FORMATS:
            raise ConfigError(f"Invalid mapping_format '{self.config.mapping_format}'")
        return self.config.mapping_format

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        properties = [p for p in request.properties_context if p["name"] != "id"]
        id_class = f"{name}Id" if request.flag("with-id-vo") else None

        bindings = [
            TemplateBinding(
                "domain/Entity.php.j2",
                layout.source_file(*MODEL_LAYER, f"{name}.php"),
                {
                    "namespace": layout.namespace(*MODEL_LAYER),
                    "class_name": name,
                    "properties": properties,
                    "id_class": id_class,
                    "id_namespace": layout.namespace(*VALUE_OBJECT_LAYER),
                    "mapping_file": f"{name}.orm.{self.mapping_format}",
                },
            ),
            TemplateBinding(
                f"infrastructure/Mapping.orm.{self.mapping_format}.j2",
                layout.source_file(*MAPPING_LAYER, f"{name}.orm.{self.mapping_format}"),
                {
                    "entity_name": name,
                    "entity_full_class_name": layout.entity_fqcn(name),
                    "repository_full_class_name": layout.repository_adapter_fqcn(name),
                    "table_name": convert_case(name, NamingCase.SNAKE_CASE),
                    "properties": properties,
                },
            ),
        ]

        if request.flag("with-tests"):
            bindings.append(TemplateBinding(
                "tests/EntityTest.php.j2",
                layout.typed_test_file("Unit", *MODEL_LAYER, f"{name}Test.php"),
                {
                    "namespace": layout.typed_test_namespace("Unit", *MODEL_LAYER),
                    "class_name": f"{name}Test",
                    "entity_name": name,
                    "entity_namespace": layout.namespace(*MODEL_LAYER),
                    "properties": properties,
                },
            ))

        return bindings

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        children = []
        if request.flag("with-id-vo"):
            children.append(request.child(
                ArtifactKind.VALUE_OBJECT, f"{request.name}Id", identifier=True
            ))
        if request.flag("with-repository"):
            children.append(request.child(
                ArtifactKind.REPOSITORY, request.name, request.properties
            ))
        return children

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        return [orm_mapping_change(layout, self.mapping_format)]


class ValueObjectMaker(Maker):
    """Immutable value object, optionally an entity identifier."""

    accepts_properties = True
    options = (
        MakerOption("identifier", "Render as a UUID based entity identifier"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.VALUE_OBJECT

    @property
    def description(self) -> str:
        return "Immutable domain value object"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [TemplateBinding(
            "domain/ValueObject.php.j2",
            layout.source_file(*VALUE_OBJECT_LAYER, f"{request.name}.php"),
            {
                "namespace": layout.namespace(*VALUE_OBJECT_LAYER),
                "class_name": request.name,
                "is_identifier": request.flag("identifier"),
                "properties": request.properties_context,
            },
        )]


class ExceptionMaker(Maker):

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.EXCEPTION

    @property
    def description(self) -> str:
        return "Domain exception"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [TemplateBinding(
            "domain/Exception.php.j2",
            layout.source_file(*EXCEPTION_LAYER, f"{request.name}.php"),
            {
                "namespace": layout.namespace(*EXCEPTION_LAYER),
                "class_name": request.name,
            },
        )]


class DomainEventMaker(Maker):
    """Domain event, optionally paired with an application subscriber."""

    accepts_properties = True
    options = (
        MakerOption("with-subscriber", "Also generate an application event subscriber"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.DOMAIN_EVENT

    @property
    def description(self) -> str:
        return "Domain event"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        return [TemplateBinding(
            "domain/DomainEvent.php.j2",
            layout.source_file(*EVENT_LAYER, f"{request.name}Event.php"),
            {
                "namespace": layout.namespace(*EVENT_LAYER),
                "class_name": f"{request.name}Event",
                "event_name": layout.route_name(request.name).replace("app.", "", 1),
                "properties": request.properties_context,
            },
        )]

    def expand(self, request: GenerationRequest) -> List[GenerationRequest]:
        if not request.flag("with-subscriber"):
            return []
        return [request.child(
            ArtifactKind.EVENT_SUBSCRIBER, request.name, layer="application", event=request.name
        )]


class RepositoryMaker(Maker):
    """Repository port in the domain and its Doctrine adapter."""

    accepts_properties = True

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.REPOSITORY

    @property
    def description(self) -> str:
        return "Repository port and Doctrine adapter"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        entity = request.name
        port_class = repository_interface_name(entity)
        adapter_class = repository_adapter_name(entity)
        unique_properties = [p for p in request.properties_context if p["unique"]]
        shared = {
            "entity_name": entity,
            "entity_namespace": layout.namespace(*MODEL_LAYER),
            "entity_variable": lcfirst(entity),
            "unique_properties": unique_properties,
        }

        return [
            TemplateBinding(
                "domain/RepositoryInterface.php.j2",
                layout.source_file(*PORT_LAYER, f"{port_class}.php"),
                dict(shared, namespace=layout.namespace(*PORT_LAYER), class_name=port_class),
            ),
            TemplateBinding(
                "infrastructure/DoctrineRepository.php.j2",
                layout.source_file(*PERSISTENCE_LAYER, f"{adapter_class}.php"),
                dict(
                    shared,
                    namespace=layout.namespace(*PERSISTENCE_LAYER),
                    class_name=adapter_class,
                    port_namespace=layout.namespace(*PORT_LAYER),
                    port_class=port_class,
                ),
            ),
        ]

    def config_changes(self, request: GenerationRequest,
                       layout: ModuleLayout) -> List[ConfigChange]:
        return [service_binding_change(
            layout.repository_interface_fqcn(request.name),
            layout.repository_adapter_fqcn(request.name),
        )]
