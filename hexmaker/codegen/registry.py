"""
Maker registry system for managing available artifact makers.

Provides registration and instantiation of makers by artifact kind
or alias.
"""

from typing import Dict, Type, Optional, Any, List, Union

from .core.config import GeneratorConfig
from .core.generator import ArtifactKind, Maker


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


class MakerRegistry:
    """Registry for managing available makers."""

    def __init__(self):
        """Initialize empty registry."""
        self._makers: Dict[str, Type[Maker]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        kind: Union[ArtifactKind, str],
        maker_class: Type[Maker],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a maker for an artifact kind.

        Args:
            kind: Artifact kind or its command name
            maker_class: Class implementing Maker
            aliases: Alternative names for this kind
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If maker class is invalid or an alias conflicts
        """
        if not isinstance(maker_class, type) or not issubclass(maker_class, Maker):
            raise RegistryError("Maker class must inherit from Maker")

        kind_key = self._key(kind)

        if kind_key in self._makers and not replace:
            return

        self._makers[kind_key] = maker_class

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == kind_key:
                continue
            if not replace:
                if alias_key in self._makers:
                    raise RegistryError(f"Alias '{alias}' conflicts with an existing kind")
                if alias_key in self._aliases and self._aliases[alias_key] != kind_key:
                    raise RegistryError(
                        f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                    )
            self._aliases[alias_key] = kind_key

    def unregister(self, kind: Union[ArtifactKind, str]):
        """Unregister a maker and its aliases."""
        kind_key = self._key(kind)
        self._makers.pop(kind_key, None)
        for alias in [a for a, target in self._aliases.items() if target == kind_key]:
            del self._aliases[alias]

    def resolve(self, kind: Union[ArtifactKind, str]) -> ArtifactKind:
        """
        Resolve a kind name or alias to an ArtifactKind.

        Raises:
            RegistryError: If the kind is unknown
        """
        kind_key = self._key(kind)
        kind_key = self._aliases.get(kind_key, kind_key)
        if kind_key not in self._makers:
            raise RegistryError(
                f"Unknown artifact kind: {kind}. "
                f"Available: {', '.join(self.list_kinds())}"
            )
        return ArtifactKind(kind_key)

    def get_maker_class(self, kind: Union[ArtifactKind, str]) -> Type[Maker]:
        return self._makers[self.resolve(kind).value]

    def create_maker(self, kind: Union[ArtifactKind, str],
                     config: Optional[GeneratorConfig] = None) -> Maker:
        """
        Create maker instance for a kind.

        Args:
            kind: Artifact kind, command name or alias
            config: Generator configuration

        Returns:
            Configured maker instance
        """
        return self.get_maker_class(kind)(config)

    def list_kinds(self) -> List[str]:
        """Get list of registered kind names in declaration order."""
        return [kind.value for kind in ArtifactKind if kind.value in self._makers]

    def get_aliases_for_kind(self, kind: Union[ArtifactKind, str]) -> List[str]:
        kind_key = self._key(kind)
        return sorted(alias for alias, target in self._aliases.items() if target == kind_key)

    def is_supported(self, kind: str) -> bool:
        kind_key = kind.lower()
        return kind_key in self._makers or kind_key in self._aliases

    def get_maker_info(self, kind: Union[ArtifactKind, str]) -> Dict[str, Any]:
        """
        Get information about a registered maker.

        Raises:
            RegistryError: If kind not found
        """
        artifact_kind = self.resolve(kind)
        maker = self.create_maker(artifact_kind)
        return {
            "name": artifact_kind.value,
            "class": type(maker).__name__,
            "description": maker.description,
            "aliases": self.get_aliases_for_kind(artifact_kind),
            "options": [option.name for option in maker.all_options()],
            "accepts_properties": maker.accepts_properties,
            "module": type(maker).__module__,
        }

    @staticmethod
    def _key(kind: Union[ArtifactKind, str]) -> str:
        return kind.value if isinstance(kind, ArtifactKind) else str(kind).lower()


# Global registry instance - created once
_global_registry: Optional[MakerRegistry] = None


def get_registry() -> MakerRegistry:
    """Get the global maker registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = MakerRegistry()
        _auto_register_makers(_global_registry)
    return _global_registry


def _auto_register_makers(registry: MakerRegistry):
    """Register every built-in maker with its aliases."""
    from . import makers

    registry.register(ArtifactKind.ENTITY, makers.EntityMaker)
    registry.register(ArtifactKind.VALUE_OBJECT, makers.ValueObjectMaker, aliases=["vo"])
    registry.register(ArtifactKind.EXCEPTION, makers.ExceptionMaker)
    registry.register(ArtifactKind.DOMAIN_EVENT, makers.DomainEventMaker, aliases=["event"])
    registry.register(ArtifactKind.REPOSITORY, makers.RepositoryMaker)
    registry.register(ArtifactKind.COMMAND, makers.CommandMaker)
    registry.register(ArtifactKind.QUERY, makers.QueryMaker)
    registry.register(ArtifactKind.USE_CASE, makers.UseCaseMaker)
    registry.register(ArtifactKind.INPUT, makers.InputMaker)
    registry.register(ArtifactKind.MESSAGE_HANDLER, makers.MessageHandlerMaker)
    registry.register(ArtifactKind.EVENT_SUBSCRIBER, makers.EventSubscriberMaker,
                      aliases=["subscriber"])
    registry.register(ArtifactKind.CONTROLLER, makers.ControllerMaker)
    registry.register(ArtifactKind.FORM, makers.FormMaker)
    registry.register(ArtifactKind.CLI_COMMAND, makers.CliCommandMaker, aliases=["cli"])
    registry.register(ArtifactKind.USE_CASE_TEST, makers.UseCaseTestMaker)
    registry.register(ArtifactKind.CONTROLLER_TEST, makers.ControllerTestMaker)
    registry.register(ArtifactKind.CLI_COMMAND_TEST, makers.CliCommandTestMaker)
    registry.register(ArtifactKind.CRUD, makers.CrudMaker)


# Public API functions using the global registry


def get_maker(kind: Union[ArtifactKind, str], config: Optional[GeneratorConfig] = None) -> Maker:
    """Get maker instance from the global registry."""
    return get_registry().create_maker(kind, config)


def list_supported_kinds() -> List[str]:
    """List all supported artifact kinds from the global registry."""
    return get_registry().list_kinds()


def get_maker_info(kind: Union[ArtifactKind, str]) -> Dict[str, Any]:
    """Get information about a supported artifact kind."""
    return get_registry().get_maker_info(kind)
