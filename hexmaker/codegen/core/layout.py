"""
Architectural layout of a hexagonal module.

Every generated artifact derives its namespace and file location from a
single ModuleLayout so that cross references between artifacts (an adapter
implementing its port, a handler using its command) always agree.
"""

from pathlib import PurePosixPath
from typing import List

from .config import GeneratorConfig
from .naming import (
    NamespacePath,
    NamingCase,
    convert_case,
    repository_adapter_name,
    repository_interface_name,
)


# Layer locations inside a module
MODEL_LAYER = ("Domain", "Model")
VALUE_OBJECT_LAYER = ("Domain", "ValueObject")
EXCEPTION_LAYER = ("Domain", "Exception")
EVENT_LAYER = ("Domain", "Event")
PORT_LAYER = ("Domain", "Port")
USE_CASE_LAYER = ("Application", "UseCase")
INPUT_LAYER = ("Application", "Input")
MESSAGE_LAYER = ("Application", "Message")
APPLICATION_SUBSCRIBER_LAYER = ("Application", "EventSubscriber")
PERSISTENCE_LAYER = ("Infrastructure", "Persistence", "Doctrine")
MAPPING_LAYER = PERSISTENCE_LAYER + ("Orm", "Mapping")
MESSAGE_HANDLER_LAYER = ("Infrastructure", "Messaging", "Handler")
INFRASTRUCTURE_SUBSCRIBER_LAYER = ("Infrastructure", "EventSubscriber")
CONTROLLER_LAYER = ("UI", "Http", "Web", "Controller")
FORM_LAYER = ("UI", "Http", "Web", "Form")
CLI_LAYER = ("UI", "Cli")


class ModuleLayout:
    """Namespaces and file paths of one module (e.g. ``Sales/Order``)."""

    def __init__(self, path: NamespacePath, config: GeneratorConfig):
        self.path = path
        self.config = config

    @property
    def root_namespace(self) -> str:
        return self.path.root_namespace

    @property
    def module_alias(self) -> str:
        """Mapping alias: path segments joined, e.g. ``SalesOrder``."""
        return "".join(self.path.segments)

    @property
    def module_key(self) -> str:
        """Snake case key, e.g. ``sales_order``."""
        return "_".join(convert_case(s, NamingCase.SNAKE_CASE) for s in self.path.segments)

    @property
    def aggregate_name(self) -> str:
        return self.path.to_short_name()

    def namespace(self, *layers: str) -> str:
        suffix = "".join(f"\\{layer}" for layer in layers)
        return self.path.to_namespace(suffix)

    def source_file(self, *parts: str) -> PurePosixPath:
        """Path below the source directory, relative to the project root."""
        return PurePosixPath(self.config.source_dir, *self._path_parts(), *parts)

    def source_dir(self, *layers: str) -> PurePosixPath:
        return PurePosixPath(self.config.source_dir, *self._path_parts(), *layers)

    def test_namespace(self, *layers: str) -> str:
        parts = [self.root_namespace, "Tests"] if self.root_namespace else ["Tests"]
        parts.extend(self.path.segments)
        parts.extend(layers)
        return "\\".join(parts)

    def test_file(self, *parts: str) -> PurePosixPath:
        return PurePosixPath(self.config.tests_dir, *self._path_parts(), *parts)

    def typed_test_namespace(self, test_type: str, *layers: str) -> str:
        """Namespace of ``tests/<Unit|Integration>/<path>/...``."""
        parts = [self.root_namespace, "Tests"] if self.root_namespace else ["Tests"]
        parts.append(test_type)
        parts.extend(self.path.segments)
        parts.extend(layers)
        return "\\".join(parts)

    def typed_test_file(self, test_type: str, *parts: str) -> PurePosixPath:
        return PurePosixPath(self.config.tests_dir, test_type, *self._path_parts(), *parts)

    def fqcn(self, layers, class_name: str) -> str:
        return f"{self.namespace(*layers)}\\{class_name}"

    # Shared derivations

    def entity_fqcn(self, entity_name: str) -> str:
        return self.fqcn(MODEL_LAYER, entity_name)

    def repository_interface_fqcn(self, entity_name: str) -> str:
        return self.fqcn(PORT_LAYER, repository_interface_name(entity_name))

    def repository_adapter_fqcn(self, entity_name: str) -> str:
        return self.fqcn(PERSISTENCE_LAYER, repository_adapter_name(entity_name))

    def application_namespace(self, name: str) -> str:
        """Namespace holding a command or query and its handler."""
        return self.namespace("Application", name)

    def route_name(self, name: str) -> str:
        """Route name such as ``app.sales.order.create_order``."""
        parts = ["app"] + [segment.lower() for segment in self.path.segments]
        parts.append(convert_case(name, NamingCase.SNAKE_CASE))
        return ".".join(parts)

    def twig_template(self, name: str) -> str:
        parts = [segment.lower() for segment in self.path.segments]
        parts.append(f"{convert_case(name, NamingCase.SNAKE_CASE)}.html.twig")
        return "/".join(parts)

    def console_name(self, name: str) -> str:
        """Console command name such as ``app:sales:order:create-order``."""
        parts = ["app"] + [segment.lower() for segment in self.path.segments]
        parts.append(convert_case(name, NamingCase.KEBAB_CASE))
        return ":".join(parts)

    def _path_parts(self) -> List[str]:
        return self.path.segments
