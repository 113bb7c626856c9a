"""
Artifact makers, one per generated artifact kind.
"""

from .application import CommandMaker, InputMaker, QueryMaker, UseCaseMaker
from .crud import CrudMaker
from .domain import (
    DomainEventMaker,
    EntityMaker,
    ExceptionMaker,
    RepositoryMaker,
    ValueObjectMaker,
)
from .infrastructure import EventSubscriberMaker, MessageHandlerMaker
from .testing import CliCommandTestMaker, ControllerTestMaker, UseCaseTestMaker
from .ui import CliCommandMaker, ControllerMaker, FormMaker

__all__ = [
    "EntityMaker",
    "ValueObjectMaker",
    "ExceptionMaker",
    "DomainEventMaker",
    "RepositoryMaker",
    "CommandMaker",
    "QueryMaker",
    "UseCaseMaker",
    "InputMaker",
    "MessageHandlerMaker",
    "EventSubscriberMaker",
    "ControllerMaker",
    "FormMaker",
    "CliCommandMaker",
    "UseCaseTestMaker",
    "ControllerTestMaker",
    "CliCommandTestMaker",
    "CrudMaker",
]
