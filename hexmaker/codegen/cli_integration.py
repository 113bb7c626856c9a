"""
CLI integration for code generation functionality.

Builds one argparse subcommand per registered maker and runs the
generation pipeline for it.
"""

import argparse
import sys
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from . import (
    ConfigError,
    GeneratorConfig,
    GenerationAborted,
    GeneratorError,
    PropertyParseError,
    RegistryError,
    get_maker_info,
    get_registry,
    list_all_kind_info,
    load_config,
)
from .core.templates import TemplateError
from .core.patcher import ConfigPatchError
from .pipeline import GenerationPipeline
from .registry import MakerRegistry
from ..interactive import prompt_properties
from ..logging_config import get_logger

logger = get_logger(__name__)

# Package errors reported as "✗ Error" with exit code 1
HANDLED_ERRORS = (
    ConfigError,
    ConfigPatchError,
    GeneratorError,
    PropertyParseError,
    RegistryError,
    TemplateError,
)


# Initialize rich console
console = Console()


def add_global_args(parser: argparse.ArgumentParser):
    """Add the project-level options shared by every command."""
    parser.add_argument(
        "--project-dir",
        "-d",
        default=".",
        metavar="DIR",
        help="Symfony project root (default: current directory)",
    )
    parser.add_argument(
        "--config", metavar="FILE", help="JSON configuration file (default: DIR/hexmaker.json)"
    )
    parser.add_argument(
        "--root-namespace", metavar="NS", help="Root PHP namespace (default: App)"
    )
    parser.add_argument(
        "--force", "-f", action="store_true", help="Overwrite existing files"
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Don't patch doctrine, messenger, services or routes configuration",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file", metavar="FILE", help="Also write log records to this file"
    )


def add_output_args(parser: argparse.ArgumentParser):
    """
    Accept --force and --no-config after the maker arguments too.

    Defaults are suppressed so the top-level values survive when the
    options are not repeated here.
    """
    parser.add_argument(
        "--force", "-f", action="store_true", default=argparse.SUPPRESS,
        help="Overwrite existing files",
    )
    parser.add_argument(
        "--no-config", action="store_true", default=argparse.SUPPRESS,
        help="Don't patch doctrine, messenger, services or routes configuration",
    )


def create_maker_subparsers(subparsers, registry: Optional[MakerRegistry] = None):
    """
    Create one subcommand per registered artifact kind.

    For use with: hexmaker <kind> <path> <name> [options]

    Args:
        subparsers: Subparser group from main parser
        registry: Maker registry (global registry if omitted)
    """
    registry = registry or get_registry()

    for kind in registry.list_kinds():
        maker = registry.create_maker(kind)
        parser = subparsers.add_parser(
            kind,
            aliases=registry.get_aliases_for_kind(kind),
            help=maker.description,
            description=maker.description,
        )
        parser.add_argument("path", help="Module path, e.g. sales/order")
        parser.add_argument("name", help="Artifact name in PascalCase, e.g. Order")
        add_output_args(parser)

        if maker.accepts_properties:
            parser.add_argument(
                "--properties",
                "-p",
                metavar="LIST",
                help="Comma-separated properties, e.g. 'name:string(2,80),price:float(0,)'",
            )

        for option in maker.all_options():
            if option.flag:
                parser.add_argument(f"--{option.name}", action="store_true", help=option.help)
            else:
                parser.add_argument(
                    f"--{option.name}",
                    metavar="VALUE",
                    choices=list(option.choices) if option.choices else None,
                    help=option.help,
                )

        parser.set_defaults(func=handle_generate, artifact_kind=kind)


def create_list_subparser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "list", help="List artifact kinds", description="List artifact kinds or show one in detail"
    )
    parser.add_argument("kind", nargs="?", help="Show details for this kind")
    parser.set_defaults(func=handle_list)
    return parser


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the global CLI arguments."""
    overrides = {
        "root_namespace": getattr(args, "root_namespace", None),
        "overwrite": True if getattr(args, "force", False) else None,
        "auto_configure": False if getattr(args, "no_config", False) else None,
    }
    return load_config(args.project_dir, overrides, getattr(args, "config", None))


def handle_generate(args: argparse.Namespace) -> int:
    """
    Handle a maker subcommand.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = build_config(args)
        pipeline = GenerationPipeline(args.project_dir, config)
        maker = pipeline.registry.create_maker(args.artifact_kind, pipeline.config)

        options = _collect_options(args, maker)
        properties = _resolve_properties(args, maker.accepts_properties, options)

        request = pipeline.build_request(
            args.artifact_kind, args.path, args.name, properties, options
        )
        result = pipeline.run(request)

    except GenerationAborted as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        _print_files(e.written, "Written before the failure")
        return 1
    except HANDLED_ERRORS as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    _print_files(result.files, "Generated files")
    _print_config_updates(result)
    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")
    console.print(f"[green]✓[/green] {len(result.files)} file(s) generated for {args.name}")
    return 0


def _collect_options(args: argparse.Namespace, maker) -> Dict[str, Any]:
    options = {}
    for option in maker.all_options():
        value = getattr(args, option.name.replace("-", "_"), None)
        if value is not None:
            options[option.name] = value
    return options


def _resolve_properties(args: argparse.Namespace, accepts_properties: bool,
                        options: Dict[str, Any]):
    """Properties from --properties, or prompted for on a terminal."""
    properties = getattr(args, "properties", None)
    if properties is not None or not accepts_properties:
        return properties
    if options.get("no-interaction") or not sys.stdin.isatty():
        return None
    return prompt_properties(args.name, console)


def _print_files(files, title: str):
    if not files:
        return

    table = Table(title=title, box=box.SIMPLE, header_style="bold cyan")
    table.add_column("File", style="green")
    table.add_column("Template", style="dim")
    table.add_column("Status")

    for written in files:
        status = "[yellow]overwritten[/yellow]" if written.overwritten else "created"
        table.add_row(str(written.path), written.template_id, status)

    console.print(table)


def _print_config_updates(result):
    for target, modified in result.config_updates.items():
        if modified:
            console.print(f"[green]✓[/green] Updated {target.relative_path}")
        else:
            console.print(f"[dim]- {target.relative_path} already configured[/dim]")


def handle_list(args: argparse.Namespace) -> int:
    """Handle the list subcommand."""
    if getattr(args, "kind", None):
        return _show_kind_info(args.kind)
    return _list_kinds()


def _list_kinds() -> int:
    """List artifact kinds with details."""
    kind_info = list_all_kind_info()

    table = Table(
        title="📋 Artifact Kinds", box=box.ROUNDED, title_style="bold cyan"
    )

    table.add_column("Kind", style="bold green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Properties", style="cyan")
    table.add_column("Aliases", style="blue")

    for kind_name, info in kind_info.items():
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(
            kind_name,
            info["description"],
            "yes" if info["accepts_properties"] else "-",
            aliases,
        )

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] hexmaker [cyan]KIND[/cyan] [dim]path name[/dim] "
            "--properties 'name:string(2,80)'\n"
            "[bold]Info:[/bold] hexmaker list [cyan]KIND[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_kind_info(kind: str) -> int:
    """Show detailed information about one artifact kind."""
    try:
        info = get_maker_info(kind)
    except RegistryError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    info_text = f"""[bold]Kind:[/bold] {info['name']}
[bold]Description:[/bold] {info['description']}
[bold]Maker Class:[/bold] {info['class']}
[bold]Module:[/bold] {info['module']}
[bold]Accepts Properties:[/bold] {'yes' if info['accepts_properties'] else 'no'}"""

    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name']}", border_style="green"))

    options_table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    options_table.add_column("Option", style="bold")
    options_table.add_column("Description")

    maker = get_registry().create_maker(info["name"])
    for option in maker.all_options():
        suffix = "" if option.flag else " VALUE"
        choices = f" ({', '.join(option.choices)})" if option.choices else ""
        options_table.add_row(f"--{option.name}{suffix}", f"{option.help}{choices}")

    console.print(options_table)
    return 0
