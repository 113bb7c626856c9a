"""
Makers for asynchronous messaging and event subscribers.
"""

from typing import List

from ..core.generator import (
    ArtifactKind,
    GenerationRequest,
    Maker,
    MakerOption,
    TemplateBinding,
)
from ..core.layout import (
    APPLICATION_SUBSCRIBER_LAYER,
    EVENT_LAYER,
    INFRASTRUCTURE_SUBSCRIBER_LAYER,
    MESSAGE_HANDLER_LAYER,
    MESSAGE_LAYER,
    ModuleLayout,
)

SUBSCRIBER_LAYERS = ("application", "infrastructure")


class MessageHandlerMaker(Maker):
    """Messenger handler for an application message."""

    accepts_properties = True
    options = (
        MakerOption("with-message", "Also generate the message class"),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.MESSAGE_HANDLER

    @property
    def description(self) -> str:
        return "Asynchronous message handler"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        message_class = f"{name}Message"
        bindings = [TemplateBinding(
            "infrastructure/MessageHandler.php.j2",
            layout.source_file(*MESSAGE_HANDLER_LAYER, f"{name}Handler.php"),
            {
                "namespace": layout.namespace(*MESSAGE_HANDLER_LAYER),
                "class_name": f"{name}Handler",
                "message_class": message_class,
                "message_namespace": layout.namespace(*MESSAGE_LAYER),
            },
        )]

        if request.flag("with-message"):
            bindings.append(TemplateBinding(
                "application/Message.php.j2",
                layout.source_file(*MESSAGE_LAYER, f"{message_class}.php"),
                {
                    "namespace": layout.namespace(*MESSAGE_LAYER),
                    "class_name": message_class,
                    "properties": request.properties_context,
                },
            ))
        return bindings


class EventSubscriberMaker(Maker):
    """Event subscriber in the application or infrastructure layer."""

    options = (
        MakerOption("layer", "Layer of the subscriber", flag=False,
                    choices=SUBSCRIBER_LAYERS, default="application"),
        MakerOption("event", "Domain event handled (default: subscriber name)", flag=False),
    )

    @property
    def artifact_kind(self) -> ArtifactKind:
        return ArtifactKind.EVENT_SUBSCRIBER

    @property
    def description(self) -> str:
        return "Event subscriber"

    def bind(self, request: GenerationRequest, layout: ModuleLayout) -> List[TemplateBinding]:
        name = request.name
        layer = request.option("layer", "application")
        if layer == "application":
            location = APPLICATION_SUBSCRIBER_LAYER
            event = request.option("event", name)
            variables = {
                "event_class": f"{event}Event",
                "event_namespace": layout.namespace(*EVENT_LAYER),
            }
        else:
            location = INFRASTRUCTURE_SUBSCRIBER_LAYER
            variables = {}

        variables.update(
            namespace=layout.namespace(*location),
            class_name=f"{name}Subscriber",
        )
        return [TemplateBinding(
            f"{layer}/EventSubscriber.php.j2",
            layout.source_file(*location, f"{name}Subscriber.php"),
            variables,
        )]
