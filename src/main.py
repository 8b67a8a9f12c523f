"""
Main CLI entry point for the billing portal.

Usage:
    python src/main.py purge-skeleton
    python src/main.py purge-skeleton --path ./workbench --config testbench.yaml
    python src/main.py countries
    python src/main.py api --port 8000
"""

import sys
import argparse
from pathlib import Path

from rich.console import Console
from rich.table import Table

from billing.countries import all_countries
from config.constants import EXIT_FAILURE, EXIT_SUCCESS, SKELETON_CONFIG_FILE
from config.logging_config import setup_structured_logging
from core.exceptions import BillingPortalError
from interaction.cli import ConsoleComponents
from skeleton.config import SkeletonConfig
from skeleton.purge import PurgeSkeleton


def command_purge_skeleton(args) -> int:
    """Purge skeleton folder to original state."""
    console = Console()
    components = ConsoleComponents(console)

    config_path = Path(args.config)
    try:
        config = SkeletonConfig.from_file(config_path)

        working_path = Path(args.path) if args.path else config.skeleton_path(config_path.parent)
        if working_path is None:
            working_path = Path.cwd()

        return PurgeSkeleton(working_path, config, components).handle()
    except BillingPortalError as e:
        components.error(str(e))
        return EXIT_FAILURE


def command_countries(args) -> int:
    """List the countries offered in the billing address form."""
    console = Console()

    table = Table(title="Countries")
    table.add_column("Code", style="cyan")
    table.add_column("Name")

    for code, name in all_countries().items():
        table.add_row(code, name)

    console.print(table)
    return EXIT_SUCCESS


def command_api(args) -> int:
    """Start the API server."""
    import uvicorn

    from api.app import create_app

    console = Console()

    app = create_app()

    console.print("[bold green]Starting billing portal API[/bold green]")
    console.print(f"Host: {args.host}")
    console.print(f"Port: {args.port}")
    console.print(f"Docs: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        workers=args.workers
    )

    return EXIT_SUCCESS


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Billing portal - Stripe billing dashboard state and skeleton tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s purge-skeleton
  %(prog)s purge-skeleton --path ./workbench
  %(prog)s countries
  %(prog)s api --port 8000
        """
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (DEBUG, INFO, WARNING...)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Purge skeleton command
    purge_parser = subparsers.add_parser("purge-skeleton", help="Purge skeleton folder to original state")
    purge_parser.add_argument(
        "--path",
        help="Skeleton directory (default: 'skeleton' from the config file, else the current directory)"
    )
    purge_parser.add_argument(
        "--config",
        default=SKELETON_CONFIG_FILE,
        help=f"Harness configuration file (default: {SKELETON_CONFIG_FILE})"
    )

    # Countries command
    subparsers.add_parser("countries", help="List billing address countries")

    # API command
    api_parser = subparsers.add_parser("api", help="Start API server")
    api_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    api_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    api_parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")

    args = parser.parse_args(argv)

    setup_structured_logging(level=args.log_level, serialize=False)

    commands = {
        "purge-skeleton": command_purge_skeleton,
        "countries": command_countries,
        "api": command_api,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_FAILURE

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
