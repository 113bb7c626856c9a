"""Unit tests for the artifact makers.

Tests cover:
- Destinations and variables bound by each layer's makers
- Child requests produced by the composite flags
- The ordered fan-out of the CRUD maker
- Request validation
"""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from hexmaker.codegen.core.config import ConfigError, GeneratorConfig
from hexmaker.codegen.core.generator import ArtifactKind, GenerationInputError, GenerationRequest
from hexmaker.codegen.core.naming import NamespacePath
from hexmaker.codegen.core.patcher import ConfigTarget
from hexmaker.codegen.core.schema import parse_properties
from hexmaker.codegen.makers import (
    CliCommandMaker,
    CommandMaker,
    ControllerMaker,
    CrudMaker,
    DomainEventMaker,
    EntityMaker,
    EventSubscriberMaker,
    FormMaker,
    MessageHandlerMaker,
    QueryMaker,
    RepositoryMaker,
    UseCaseMaker,
)

pytestmark = pytest.mark.unit


def make_request(kind: ArtifactKind, name: str, properties: str = "", **options) -> GenerationRequest:
    return GenerationRequest(
        kind=kind,
        path=NamespacePath("sales/order"),
        name=name,
        properties=parse_properties(properties),
        options=options,
    )


def destinations(bindings) -> list[str]:
    return [str(binding.destination) for binding in bindings]


# ----------------------------------------------------------------------
# Domain layer
# ----------------------------------------------------------------------


class TestEntityMaker:
    def test_entity_and_mapping(self, config, layout):
        request = make_request(ArtifactKind.ENTITY, "Order", "id:string,total:float(0,)")
        bindings = EntityMaker(config).bind(request, layout)

        assert destinations(bindings) == [
            "src/Sales/Order/Domain/Model/Order.php",
            "src/Sales/Order/Infrastructure/Persistence/Doctrine/Orm/Mapping/Order.orm.yml",
        ]
        entity, mapping = bindings
        assert entity.variables["namespace"] == "App\\Sales\\Order\\Domain\\Model"
        assert [p["name"] for p in entity.variables["properties"]] == ["total"]
        assert mapping.template_id == "infrastructure/Mapping.orm.yml.j2"
        assert mapping.variables["table_name"] == "order"
        assert mapping.variables["repository_full_class_name"] == (
            "App\\Sales\\Order\\Infrastructure\\Persistence\\Doctrine\\DoctrineOrderRepository"
        )

    def test_xml_mapping(self, layout):
        maker = EntityMaker(GeneratorConfig(mapping_format="xml"))
        bindings = maker.bind(make_request(ArtifactKind.ENTITY, "Order"), layout)
        assert bindings[1].template_id == "infrastructure/Mapping.orm.xml.j2"
        assert bindings[1].destination.name == "Order.orm.xml"

    def test_unresolved_format_defaults_to_yml(self):
        assert EntityMaker(GeneratorConfig()).mapping_format == "yml"

    def test_unknown_format_rejected(self, layout):
        maker = EntityMaker(GeneratorConfig(mapping_format="xlm"))
        with pytest.raises(ConfigError, match="xlm"):
            maker.bind(make_request(ArtifactKind.ENTITY, "Order"), layout)

    def test_with_tests(self, config, layout):
        request = make_request(ArtifactKind.ENTITY, "Order", **{"with-tests": True})
        bindings = EntityMaker(config).bind(request, layout)

        assert bindings[-1].destination == PurePosixPath("tests/Unit/Sales/Order/Domain/Model/OrderTest.php")
        assert bindings[-1].variables["namespace"] == "App\\Tests\\Unit\\Sales\\Order\\Domain\\Model"

    def test_expand_with_id_and_repository(self, config):
        request = make_request(
            ArtifactKind.ENTITY, "Order", "total:float",
            **{"with-id-vo": True, "with-repository": True},
        )
        children = EntityMaker(config).expand(request)

        assert [(c.kind, c.name) for c in children] == [
            (ArtifactKind.VALUE_OBJECT, "OrderId"),
            (ArtifactKind.REPOSITORY, "Order"),
        ]
        assert children[0].flag("identifier")
        assert children[0].flag("no-interaction")
        assert children[1].properties == request.properties

    def test_id_value_object_reference(self, config, layout):
        request = make_request(ArtifactKind.ENTITY, "Order", **{"with-id-vo": True})
        entity = EntityMaker(config).bind(request, layout)[0]
        assert entity.variables["id_class"] == "OrderId"
        assert entity.variables["id_namespace"] == "App\\Sales\\Order\\Domain\\ValueObject"

    def test_registers_mapping(self, config, layout):
        changes = EntityMaker(config).config_changes(make_request(ArtifactKind.ENTITY, "Order"), layout)
        assert [(c.target, c.section_key) for c in changes] == [(ConfigTarget.ORM_MAPPING, "SalesOrder")]


class TestRepositoryMaker:
    def test_port_and_adapter(self, config, layout):
        request = make_request(ArtifactKind.REPOSITORY, "Order", "email:email:unique,name:string")
        port, adapter = RepositoryMaker(config).bind(request, layout)

        assert port.destination == PurePosixPath("src/Sales/Order/Domain/Port/OrderRepositoryInterface.php")
        assert adapter.destination == PurePosixPath(
            "src/Sales/Order/Infrastructure/Persistence/Doctrine/DoctrineOrderRepository.php"
        )
        assert adapter.variables["port_class"] == "OrderRepositoryInterface"
        assert [p["name"] for p in port.variables["unique_properties"]] == ["email"]

    def test_binds_service(self, config, layout):
        change = RepositoryMaker(config).config_changes(
            make_request(ArtifactKind.REPOSITORY, "Order"), layout
        )[0]
        assert change.target is ConfigTarget.SERVICES
        assert change.section_key == "App\\Sales\\Order\\Domain\\Port\\OrderRepositoryInterface"
        assert change.payload["class"].endswith("DoctrineOrderRepository")


class TestDomainEventMaker:
    def test_event_name(self, config, layout):
        binding = DomainEventMaker(config).bind(make_request(ArtifactKind.DOMAIN_EVENT, "OrderPlaced"), layout)[0]
        assert binding.destination.name == "OrderPlacedEvent.php"
        assert binding.variables["event_name"] == "sales.order.order_placed"

    def test_with_subscriber(self, config):
        request = make_request(ArtifactKind.DOMAIN_EVENT, "OrderPlaced", **{"with-subscriber": True})
        child = DomainEventMaker(config).expand(request)[0]
        assert child.kind is ArtifactKind.EVENT_SUBSCRIBER
        assert child.option("layer") == "application"
        assert child.option("event") == "OrderPlaced"


# ----------------------------------------------------------------------
# Application layer
# ----------------------------------------------------------------------


class TestCommandMaker:
    def test_create_command(self, config, layout):
        request = make_request(ArtifactKind.COMMAND, "CreateOrder", "total:float")
        command, handler = CommandMaker(config).bind(request, layout)

        assert command.destination == PurePosixPath("src/Sales/Order/Application/CreateOrder/CreateOrderCommand.php")
        assert handler.destination.name == "CreateOrderCommandHandler.php"
        assert command.variables["pattern"] == "create"
        assert command.variables["needs_id"] is False
        assert handler.variables["repository_interface"] == "OrderRepositoryInterface"

    def test_update_command_needs_id(self, config, layout):
        command = CommandMaker(config).bind(make_request(ArtifactKind.COMMAND, "UpdateOrder"), layout)[0]
        assert command.variables["pattern"] == "update"
        assert command.variables["needs_id"] is True

    def test_explicit_pattern_and_entity(self, config, layout):
        request = make_request(ArtifactKind.COMMAND, "ArchiveOrder", pattern="delete", entity="Invoice")
        command, handler = CommandMaker(config).bind(request, layout)
        assert command.variables["pattern"] == "delete"
        assert handler.variables["entity_name"] == "Invoice"

    def test_factory(self, config, layout):
        request = make_request(ArtifactKind.COMMAND, "CreateOrder", factory=True)
        bindings = CommandMaker(config).bind(request, layout)

        assert [b.template_id for b in bindings] == [
            "application/Command.php.j2",
            "application/CommandHandlerWithFactory.php.j2",
            "application/Factory.php.j2",
        ]
        assert bindings[2].destination.name == "OrderFactory.php"

    def test_with_tests(self, config, layout):
        request = make_request(ArtifactKind.COMMAND, "CreateOrder", **{"with-tests": True})
        bindings = CommandMaker(config).bind(request, layout)

        assert destinations(bindings)[2:] == [
            "tests/Unit/Sales/Order/Application/CreateOrder/CreateOrderCommandHandlerTest.php",
            "tests/Integration/Sales/Order/Application/CreateOrder/CreateOrderCommandHandlerTest.php",
        ]

    def test_command_bus_change(self, config, layout):
        change = CommandMaker(config).config_changes(make_request(ArtifactKind.COMMAND, "CreateOrder"), layout)[0]
        assert (change.target, change.section_key) == (ConfigTarget.MESSAGE_BUS, "command.bus")


class TestQueryMaker:
    def test_find_by_id(self, config, layout):
        bindings = QueryMaker(config).bind(make_request(ArtifactKind.QUERY, "GetOrder"), layout)

        assert [b.destination.name for b in bindings] == [
            "GetOrderQuery.php", "GetOrderQueryHandler.php", "GetOrderResponse.php",
        ]
        variables = bindings[1].variables
        assert variables["needs_id"] is True
        assert variables["find_by_id"] is True
        assert variables["is_collection"] is False

    def test_collection(self, config, layout):
        request = make_request(ArtifactKind.QUERY, "ListOrders", collection=True)
        variables = QueryMaker(config).bind(request, layout)[0].variables
        assert variables["needs_id"] is False
        assert variables["find_by_id"] is False

    def test_custom_criteria(self, config, layout):
        request = make_request(ArtifactKind.QUERY, "FindOrderByStatus", "status:string")
        variables = QueryMaker(config).bind(request, layout)[0].variables
        assert variables["needs_id"] is False
        assert variables["find_by_id"] is False

    def test_query_bus_change(self, config, layout):
        change = QueryMaker(config).config_changes(make_request(ArtifactKind.QUERY, "GetOrder"), layout)[0]
        assert change.section_key == "query.bus"


class TestUseCaseMaker:
    def test_use_case_with_test(self, config, layout):
        request = make_request(ArtifactKind.USE_CASE, "CreateOrder", **{"with-tests": True})
        use_case, test = UseCaseMaker(config).bind(request, layout)

        assert use_case.destination == PurePosixPath("src/Sales/Order/Application/UseCase/CreateOrderUseCase.php")
        assert use_case.variables["command_namespace"] == "App\\Sales\\Order\\Application\\CreateOrder"
        assert use_case.variables["entity_name"] == "Order"
        assert test.destination == PurePosixPath("tests/Sales/Order/Application/CreateOrder/CreateOrderTest.php")


# ----------------------------------------------------------------------
# Infrastructure and UI layers
# ----------------------------------------------------------------------


class TestMessagingMakers:
    def test_handler_with_message(self, config, layout):
        request = make_request(ArtifactKind.MESSAGE_HANDLER, "SendInvoice", **{"with-message": True})
        bindings = MessageHandlerMaker(config).bind(request, layout)
        assert destinations(bindings) == [
            "src/Sales/Order/Infrastructure/Messaging/Handler/SendInvoiceHandler.php",
            "src/Sales/Order/Application/Message/SendInvoiceMessage.php",
        ]

    @pytest.mark.parametrize(
        "layer, expected",
        [
            ("application", "src/Sales/Order/Application/EventSubscriber/AuditSubscriber.php"),
            ("infrastructure", "src/Sales/Order/Infrastructure/EventSubscriber/AuditSubscriber.php"),
        ],
    )
    def test_subscriber_layer(self, config, layout, layer, expected):
        binding = EventSubscriberMaker(config).bind(
            make_request(ArtifactKind.EVENT_SUBSCRIBER, "Audit", layer=layer), layout
        )[0]
        assert str(binding.destination) == expected
        assert binding.template_id == f"{layer}/EventSubscriber.php.j2"


class TestControllerMaker:
    def test_create_controller(self, config, layout):
        request = make_request(ArtifactKind.CONTROLLER, "CreateOrder", "id:string,total:float")
        binding = ControllerMaker(config).bind(request, layout)[0]
        variables = binding.variables

        assert binding.destination == PurePosixPath("src/Sales/Order/UI/Http/Web/Controller/CreateOrderController.php")
        assert variables["route_path"] == "/create-order"
        assert variables["route_name"] == "app.sales.order.create_order"
        assert variables["uses_form"] is True
        assert variables["uses_id"] is False
        assert variables["command_args"] == ["$input->total"]
        assert variables["form_class"] == "OrderType"

    def test_show_controller_with_use_case(self, config, layout):
        request = make_request(
            ArtifactKind.CONTROLLER, "ShowOrder", route="/orders/{id}", **{"use-case": "GetOrder"}
        )
        variables = ControllerMaker(config).bind(request, layout)[0].variables

        assert variables["action"] == "Show"
        assert variables["uses_id"] is True
        assert variables["uses_form"] is False
        assert variables["use_case_class"] == "GetOrderUseCase"
        assert variables["command_args"] == ["$id"]

    def test_with_workflow(self, config):
        request = make_request(ArtifactKind.CONTROLLER, "CreateOrder", "total:float", **{"with-workflow": True})
        children = ControllerMaker(config).expand(request)
        assert [(c.kind, c.name) for c in children] == [
            (ArtifactKind.FORM, "Order"),
            (ArtifactKind.USE_CASE, "CreateOrder"),
            (ArtifactKind.INPUT, "CreateOrderInput"),
            (ArtifactKind.COMMAND, "CreateOrder"),
        ]

    def test_registers_routes(self, config, layout):
        change = ControllerMaker(config).config_changes(
            make_request(ArtifactKind.CONTROLLER, "CreateOrder"), layout
        )[0]
        assert change.target is ConfigTarget.ROUTES


class TestFormMaker:
    def test_input_class(self, config):
        maker = FormMaker(config)
        assert maker.input_class(make_request(ArtifactKind.FORM, "Order")) == "OrderInput"
        assert maker.input_class(make_request(ArtifactKind.FORM, "Order", **{"with-command": True})) == "CreateOrderInput"
        assert maker.input_class(make_request(ArtifactKind.FORM, "Order", input="X")) == "X"

    def test_with_command(self, config):
        request = make_request(ArtifactKind.FORM, "Order", "total:float", **{"with-command": True, "action": "UpdateOrder"})
        children = FormMaker(config).expand(request)
        assert [(c.kind, c.name) for c in children] == [
            (ArtifactKind.INPUT, "UpdateOrderInput"),
            (ArtifactKind.COMMAND, "UpdateOrder"),
        ]


class TestCliCommandMaker:
    def test_console_name(self, config, layout):
        binding = CliCommandMaker(config).bind(make_request(ArtifactKind.CLI_COMMAND, "ImportOrders"), layout)[0]
        assert binding.destination == PurePosixPath("src/Sales/Order/UI/Cli/ImportOrdersCommand.php")
        assert binding.variables["command_name"] == "app:sales:order:import-orders"
        assert binding.variables["description"] == "Execute Import Orders operation"
        assert binding.variables["needs_id"] is False

    def test_delete_command_takes_id(self, config, layout):
        binding = CliCommandMaker(config).bind(make_request(ArtifactKind.CLI_COMMAND, "DeleteOrder"), layout)[0]
        assert binding.variables["needs_id"] is True

    def test_with_use_case(self, config):
        children = CliCommandMaker(config).expand(
            make_request(ArtifactKind.CLI_COMMAND, "PurgeOrder", **{"with-use-case": True})
        )
        assert [(c.kind, c.name) for c in children] == [
            (ArtifactKind.USE_CASE, "PurgeOrder"),
            (ArtifactKind.INPUT, "PurgeOrderInput"),
            (ArtifactKind.COMMAND, "PurgeOrder"),
        ]
        assert children[2].option("entity") == "PurgeOrder"


# ----------------------------------------------------------------------
# CRUD fan-out
# ----------------------------------------------------------------------


class TestCrudMaker:
    def test_children_in_order(self, config):
        request = make_request(ArtifactKind.CRUD, "Order", "total:float(0,)")
        children = CrudMaker(config).expand(request)

        assert [(c.kind.value, c.name) for c in children] == [
            ("entity", "Order"),
            ("repository", "Order"),
            ("use-case", "CreateOrder"), ("command", "CreateOrder"), ("input", "CreateOrderInput"),
            ("use-case", "UpdateOrder"), ("command", "UpdateOrder"), ("input", "UpdateOrderInput"),
            ("use-case", "DeleteOrder"), ("command", "DeleteOrder"), ("input", "DeleteOrderInput"),
            ("use-case", "GetOrder"), ("command", "GetOrder"), ("input", "GetOrderInput"),
            ("use-case", "ListOrder"), ("command", "ListOrder"), ("input", "ListOrderInput"),
            ("controller", "CreateOrder"),
            ("controller", "UpdateOrder"),
            ("form", "Order"),
            ("controller", "DeleteOrder"),
            ("controller", "ShowOrder"),
            ("controller", "ListOrder"),
        ]

    def test_routes(self, config):
        children = CrudMaker(config).expand(make_request(ArtifactKind.CRUD, "Order"))
        routes = [c.option("route") for c in children if c.kind is ArtifactKind.CONTROLLER]
        assert routes == ["/orders/new", "/orders/{id}/edit", "/orders/{id}/delete", "/orders/{id}", "/orders"]

    def test_route_prefix_option(self, config):
        request = make_request(ArtifactKind.CRUD, "Order", **{"route-prefix": "shop/orders/"})
        assert CrudMaker(config).route_prefix(request) == "/shop/orders"

    def test_action_properties(self, config):
        request = make_request(ArtifactKind.CRUD, "Order", "total:float")
        children = {(c.kind, c.name): c for c in CrudMaker(config).expand(request)}

        assert children[(ArtifactKind.COMMAND, "CreateOrder")].properties == request.properties
        assert [p.name for p in children[(ArtifactKind.COMMAND, "GetOrder")].properties] == ["id"]
        assert children[(ArtifactKind.COMMAND, "DeleteOrder")].properties == ()
        assert children[(ArtifactKind.CONTROLLER, "DeleteOrder")].properties == ()

    def test_no_own_artifacts(self, config, layout):
        assert CrudMaker(config).bind(make_request(ArtifactKind.CRUD, "Order"), layout) == []


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------


class TestValidateRequest:
    @pytest.mark.parametrize("name", ["", "Order-Item", "1Order"])
    def test_invalid_name(self, config, name):
        with pytest.raises(GenerationInputError, match="Invalid entity name"):
            EntityMaker(config).validate_request(make_request(ArtifactKind.ENTITY, name))

    def test_unknown_option(self, config):
        with pytest.raises(GenerationInputError, match="Unknown option 'with-magic'"):
            EntityMaker(config).validate_request(make_request(ArtifactKind.ENTITY, "Order", **{"with-magic": True}))

    def test_value_outside_choices(self, config):
        with pytest.raises(GenerationInputError, match="Expected one of"):
            CommandMaker(config).validate_request(
                make_request(ArtifactKind.COMMAND, "ArchiveOrder", pattern="archive")
            )

    def test_common_option_accepted(self, config):
        UseCaseMaker(config).validate_request(
            make_request(ArtifactKind.USE_CASE, "CreateOrder", **{"no-interaction": True})
        )
