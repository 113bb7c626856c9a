"""
Template variables shared by several makers.
"""

from typing import Any, Dict

from ..core.layout import MODEL_LAYER, PORT_LAYER, USE_CASE_LAYER, ModuleLayout
from ..core.naming import lcfirst, repository_interface_name, strip_action_prefix


def repository_context(layout: ModuleLayout, entity: str) -> Dict[str, Any]:
    """Variables naming an entity and its repository port."""
    return {
        "entity_name": entity,
        "entity_namespace": layout.namespace(*MODEL_LAYER),
        "entity_variable": lcfirst(entity),
        "repository_interface": repository_interface_name(entity),
        "repository_namespace": layout.namespace(*PORT_LAYER),
        "repository_variable": f"{lcfirst(entity)}Repository",
    }


def use_case_context(layout: ModuleLayout, name: str) -> Dict[str, Any]:
    """Variables shared by a use case, its test and the UI entry points calling it."""
    entity = strip_action_prefix(name)
    return dict(
        repository_context(layout, entity),
        use_case_name=name,
        use_case_class=f"{name}UseCase",
        use_case_namespace=layout.namespace(*USE_CASE_LAYER),
        command_namespace=layout.application_namespace(name),
        command_class=f"{name}Command",
    )
