from __future__ import annotations

import argparse
import logging
import sys

from .cli import CLIHandler
from .codegen import __version__
from .codegen.cli_integration import (
    add_global_args,
    create_list_subparser,
    create_maker_subparsers,
)
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with every subcommand."""
    parser = argparse.ArgumentParser(
        prog="hexmaker",
        description="Scaffold hexagonal Symfony/Doctrine code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hexmaker entity sales/order Order -p 'total:float(0,),status:string:nullable'
  hexmaker crud catalog/product Product -p 'name:string(2,80)' --with-tests
  hexmaker -d ../shop exception billing Overdue --force
  hexmaker init
  hexmaker doctor
        """.strip(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    add_global_args(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    create_maker_subparsers(subparsers)
    create_list_subparser(subparsers)

    handler = CLIHandler()
    init_parser = subparsers.add_parser(
        "init", help="Configure message buses and domain exclusions"
    )
    init_parser.set_defaults(func=handler.run_init)
    doctor_parser = subparsers.add_parser(
        "doctor", help="Check the project configuration"
    )
    doctor_parser.set_defaults(func=handler.run_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the hexmaker command line.

    Args:
        argv: Arguments without the program name (defaults to sys.argv).

    Returns:
        Process exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        logging.DEBUG if args.verbose else logging.WARNING, log_file=args.log_file
    )
    logger.debug("Parsed arguments: %s", args)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
