from __future__ import annotations

import argparse

from rich import box
from rich.console import Console
from rich.table import Table

from .codegen import ConfigError
from .codegen.cli_integration import build_config
from .logging_config import get_logger
from .project import CheckStatus, ProjectDoctor, ProjectInitializer, StepStatus

logger = get_logger(__name__)

CHECK_STYLES = {
    CheckStatus.OK: "[green]✓ ok[/green]",
    CheckStatus.WARNING: "[yellow]⚠ warning[/yellow]",
    CheckStatus.ERROR: "[red]✗ error[/red]",
}
STEP_STYLES = {
    StepStatus.CONFIGURED: "[green]✓ configured[/green]",
    StepStatus.SKIPPED: "[dim]- skipped[/dim]",
    StepStatus.ERROR: "[red]✗ error[/red]",
}


class CLIHandler:
    """Handle the project-level commands: init and doctor."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output.
        """
        self.console = console or Console()
        logger.debug("CLIHandler initialized")

    def run_init(self, args: argparse.Namespace) -> int:
        """Configure the message buses and domain exclusions of a project.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Exit code (0 when every step succeeded or was already done).
        """
        try:
            config = build_config(args)
        except ConfigError as e:
            self.console.print(f"[red]✗ Error:[/red] {e}")
            return 1

        steps = ProjectInitializer(args.project_dir, config).run()

        table = Table(title="🔧 Project initialization", box=box.SIMPLE, header_style="bold cyan")
        table.add_column("Step", style="bold")
        table.add_column("Status")
        table.add_column("Details", style="dim")
        for step in steps:
            table.add_row(step.name, STEP_STYLES[step.status], step.message)
        self.console.print(table)

        failed = sum(1 for step in steps if step.status == StepStatus.ERROR)
        logger.info("Init finished with %d failed step(s)", failed)
        return 1 if failed else 0

    def run_doctor(self, args: argparse.Namespace) -> int:
        """Report whether a project is ready for generated code.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Exit code (1 when any check reports an error).
        """
        try:
            config = build_config(args)
        except ConfigError as e:
            self.console.print(f"[red]✗ Error:[/red] {e}")
            return 1

        results = ProjectDoctor(args.project_dir, config).run()

        table = Table(title="🩺 Project diagnostics", box=box.ROUNDED, header_style="bold cyan")
        table.add_column("Check", style="bold")
        table.add_column("Status", no_wrap=True)
        table.add_column("Details")
        for result in results:
            table.add_row(result.name, CHECK_STYLES[result.status], result.message)
        self.console.print(table)

        errors = sum(1 for result in results if result.status == CheckStatus.ERROR)
        warnings = sum(1 for result in results if result.status == CheckStatus.WARNING)
        if errors:
            self.console.print(f"[red]✗ {errors} error(s), {warnings} warning(s)[/red]")
            return 1
        if warnings:
            self.console.print(f"[yellow]⚠ {warnings} warning(s)[/yellow]")
        else:
            self.console.print("[green]✓ Project ready[/green]")
        return 0
