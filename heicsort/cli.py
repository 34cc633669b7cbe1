"""
Command-line interface for heicsort.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .constants import (DEFAULT_DESTINATION, DEFAULT_PORT, DEFAULT_SOURCE, PROGRAM,
                        configure_logging, get_console, get_logger)
from .core import PhotoRenamer
from .errors import ServerConfigError, TraversalError
from .server import create_server, create_tls_context, serve


def parse_port(port_str: str) -> int:
    """Convert a port string (e.g. '8080') to an integer port number."""
    try:
        port = int(port_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port: {port_str}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"Port out of range: {port_str}")
    return port


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Rename HEIC/JPEG photos by their original capture date",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {PROGRAM} --source ~/Downloads/Photos --destination ~/Pictures/Renamed
  {PROGRAM} -s ~/Photos --remove --verbose
  {PROGRAM} --serve --port 8443 --cert server.pem --key server.key --client-ca ca.pem
        """
    )

    parser.add_argument(
        "--source", "-s", default=DEFAULT_SOURCE,
        help=f"Path for getting files from (default: {DEFAULT_SOURCE})"
    )
    parser.add_argument(
        "--destination", "-d", default=DEFAULT_DESTINATION,
        help=f"Path to save the renamed files to (default: {DEFAULT_DESTINATION})"
    )
    parser.add_argument(
        "--remove", "-r", action="store_true",
        help="Delete source files after a successful copy"
    )
    parser.add_argument(
        "--overwrite", action="store_true",
        help="Replace existing destination files instead of skipping them"
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Preview operations without making changes"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--serve", action="store_true",
        help="Serve the destination directory over HTTP after processing"
    )
    parser.add_argument(
        "--port", "-p", type=parse_port, default=DEFAULT_PORT, metavar="PORT",
        help=f"Port for the HTTP server (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--cert", type=Path, metavar="FILE",
        help="Server certificate (PEM) to enable HTTPS"
    )
    parser.add_argument(
        "--key", type=Path, metavar="FILE",
        help="Private key (PEM) for --cert"
    )
    parser.add_argument(
        "--client-ca", type=Path, metavar="FILE",
        help="CA bundle for verifying client certificates (mutual TLS)"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def show_processing_plan(args: argparse.Namespace, console: Console) -> None:
    """Display the processing plan before execution."""
    mode = "DRY RUN" if args.dry_run else ("MOVE" if args.remove else "COPY")

    console.print("\n[bold]Processing Plan:[/bold]")
    console.print(f"  Source:          [blue]{args.source}[/blue]")
    console.print(f"  Destination:     [blue]{args.destination}[/blue]")
    console.print(f"  Processing Mode: [cyan]{mode}[/cyan]")
    console.print(f"  Overwrite:       [cyan]{'Yes' if args.overwrite else 'No'}[/cyan]")
    if args.serve:
        scheme = "https" if args.cert else "http"
        console.print(f"  Serve:           [cyan]{scheme} on port {args.port}[/cyan]")
    console.print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__, __copyright__
        if args.verbose:
            print(f"{PROGRAM} version {__version__} {__copyright__}")
            return 0
        print(__version__)
        return 0

    if (args.cert is None) != (args.key is None):
        parser.error("--cert and --key must be given together")
    if args.client_ca and args.cert is None:
        parser.error("--client-ca requires --cert and --key")

    logger = configure_logging(args.verbose)
    console = get_console()

    source = Path(args.source).expanduser()
    dest = Path(args.destination).expanduser()

    # Load TLS material before the batch so bad paths fail fast
    tls_context = None
    if args.serve and args.cert:
        try:
            tls_context = create_tls_context(args.cert, args.key, args.client_ca)
        except ServerConfigError as e:
            logger.error(str(e))
            return 1

    show_processing_plan(args, console)

    renamer = PhotoRenamer(
        source=source,
        dest=dest,
        remove_originals=args.remove,
        overwrite=args.overwrite,
        dry_run=args.dry_run
    )

    try:
        renamer.run()
    except TraversalError as e:
        logger.error(f"Fatal error: {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[red]Operation cancelled by user[/red]")
        return 1

    renamer.print_summary()

    if not args.serve:
        return 0

    if args.dry_run and not dest.is_dir():
        logger.warning(f"Not serving {dest}: it does not exist and a dry run does not create it")
        return 0

    try:
        renamer.file_ops.ensure_directory(dest)
        server = create_server(dest, args.port, tls_context=tls_context)
    except (OSError, ServerConfigError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    try:
        serve(server)
    except KeyboardInterrupt:
        get_logger().info("server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
