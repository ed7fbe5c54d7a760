"""
=============================================================================
TINYHTTP CLI ENTRY POINT
=============================================================================

    # Serve ./hello.html on 127.0.0.1:7878
    python -m tinyhttp

    # Another directory / page / port
    python -m tinyhttp --root ./public --path index.html --port 3000

    # Listen on all interfaces (for containers)
    python -m tinyhttp --host 0.0.0.0

    # Don't let a silent client block the server forever
    python -m tinyhttp --read-timeout 5

Defaults come from TINYHTTP_* environment variables (see
ServerConfig.from_env), and flags override them.

Exit status:
    0   stopped by SIGINT / SIGTERM
    1   could not bind, or accept failed
    2   bad arguments (argparse)

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .errors import AcceptError, BindError
from .logging_setup import setup_logging
from .server import Server


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttp",
        description="Serve one page over HTTP, one connection at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttp                              # ./hello.html on 127.0.0.1:7878
  python -m tinyhttp --port 3000                  # Custom port
  python -m tinyhttp --root ./public --path a.html
  python -m tinyhttp --read-timeout 5             # Bound the request read
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--read-timeout",
        type=float,
        default=defaults.read_timeout,
        help="Seconds to wait for request bytes (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.content_root,
        help=f"Directory to serve content from (default: {defaults.content_root})"
    )

    parser.add_argument(
        "--path",
        default=defaults.content_path,
        help=f"Logical path served to every connection (default: {defaults.content_path})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # BEHAVIOUR ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--keep-accepting",
        action="store_true",
        help="Log accept failures and keep going instead of exiting"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttp {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, build the server, run it.

    Returns:
        Process exit status.
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment: {e}", file=sys.stderr)
        return 1

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        read_timeout=args.read_timeout,
        content_root=args.root,
        content_path=args.path,
        fatal_accept_errors=not args.keep_accepting,
        log_level=args.log_level,
    )

    setup_logging(config.log_level)

    try:
        server = Server(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except (BindError, AcceptError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
