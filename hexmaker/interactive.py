from __future__ import annotations

from rich import box
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .codegen.core.schema import (
    NUMERIC_KINDS,
    STRING_LIKE_KINDS,
    PropertyKind,
    PropertyParseError,
    PropertySpec,
    parse_property,
)
from .logging_config import get_logger

logger = get_logger(__name__)

KIND_CHOICES = [kind.value for kind in PropertyKind]


class PropertyPrompter:
    """Collect an entity property list through interactive prompts."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the prompter.

        Args:
            console: Rich console used for prompts and feedback.
        """
        self.console = console or Console()
        logger.debug("PropertyPrompter initialized")

    def collect(self, subject: str = "") -> tuple[PropertySpec, ...]:
        """Prompt for properties until an empty name is entered.

        Args:
            subject: Name of the artifact the properties belong to.

        Returns:
            Tuple of parsed properties in entry order.
        """
        title = f" for [cyan]{subject}[/cyan]" if subject else ""
        self.console.print(f"\n📝 [bold]Properties{title}[/bold] (empty name to finish)")

        properties: list[PropertySpec] = []
        while True:
            name = Prompt.ask("Property name", default="", console=self.console).strip()
            if not name:
                break
            if any(prop.name == name for prop in properties):
                self.console.print(f"[red]✗ Duplicate property:[/red] {name}")
                continue

            try:
                prop = parse_property(self._prompt_spec(name))
            except PropertyParseError as e:
                self.console.print(f"[red]✗ Invalid property:[/red] {e}")
                logger.info("Rejected interactive property %s: %s", name, e)
                continue

            properties.append(prop)
            logger.debug("Collected property %s:%s", prop.name, prop.kind.value)

        if properties:
            self.show_summary(properties)
        return tuple(properties)

    def _prompt_spec(self, name: str) -> str:
        """Ask for the type, bounds and modifiers of one property.

        Returns:
            The property in ``name:kind(bounds):modifier`` form.
        """
        kind = PropertyKind(
            Prompt.ask("Type", choices=KIND_CHOICES, default="string", console=self.console)
        )

        spec = f"{name}:{kind.value}"
        if kind in STRING_LIKE_KINDS or kind in NUMERIC_KINDS:
            label = "Length" if kind in STRING_LIKE_KINDS else "Range"
            bounds = Prompt.ask(
                f"{label} as min,max (empty for none)", default="", console=self.console
            ).strip()
            if bounds:
                spec += f"({bounds})"

        if Confirm.ask("Nullable?", default=False, console=self.console):
            spec += ":nullable"
        if Confirm.ask("Unique?", default=False, console=self.console):
            spec += ":unique"
        return spec

    def show_summary(self, properties: list[PropertySpec]) -> None:
        """Print the collected properties as a table."""
        table = Table(title="Properties", box=box.SIMPLE, header_style="bold cyan")
        table.add_column("Name", style="bold")
        table.add_column("PHP type", style="green")
        table.add_column("Doctrine type", style="cyan")
        table.add_column("Rules", style="dim")

        for prop in properties:
            rules = ", ".join(rule.rule for rule in prop.validation_rules())
            table.add_row(prop.name, prop.declaration_type, prop.storage_type, rules or "-")

        self.console.print(table)


def prompt_properties(subject: str = "", console: Console | None = None) -> tuple[PropertySpec, ...]:
    """Collect properties interactively with a fresh prompter."""
    return PropertyPrompter(console).collect(subject)
