"""
=============================================================================
PAGE SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:8080, bundled pages)
    python -m pageserver

    # Custom port
    python -m pageserver --port 3000

    # Serve your own pages
    python -m pageserver --success-page hello.html --not-found-page 404.html

    # Missing pages crash the server instead of answering 500
    python -m pageserver --strict

Settings come from, in order of priority: command-line arguments,
PAGESERVER_* environment variables, built-in defaults.

Exit status is 1 when the server dies on a fatal error (address already in
use, accept failure, unreadable page in strict mode).

=============================================================================
"""

import argparse
import dataclasses
import logging
import sys

from . import __version__
from .server import PageServer
from .config import ServerConfig
from .errors import PageServerError


logger = logging.getLogger("pageserver")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pageserver",
        description="Minimal single-threaded HTTP page server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m pageserver                         # 127.0.0.1:8080
  python -m pageserver --port 3000             # Custom port
  python -m pageserver --success-page a.html   # Custom success page
  python -m pageserver --strict                # Missing page is fatal
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client read timeout in seconds (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PAGES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--success-page",
        default=None,
        help="File served for 'GET / HTTP/1.1' (default: bundled hello.html)"
    )

    parser.add_argument(
        "--not-found-page",
        default=None,
        help="File served for every other request (default: bundled 404.html)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # BEHAVIOR
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Exit when a page cannot be read instead of sending 500"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"pageserver {__version__}"
    )

    return parser


def load_config(argv=None) -> ServerConfig:
    """
    Build the configuration from the environment, then apply CLI overrides.

    Only arguments the user actually passed override the environment.
    """
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env()

    overrides = {
        "host": args.host,
        "port": args.port,
        "timeout": args.timeout,
        "success_page": args.success_page,
        "not_found_page": args.not_found_page,
        "strict": args.strict,
        "log_level": args.log_level,
    }
    return dataclasses.replace(
        config, **{name: value for name, value in overrides.items() if value is not None}
    )


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        config = load_config(argv)
        server = PageServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except PageServerError as e:
        logger.critical(f"Fatal: {e}")
        return 1
    except OSError as e:
        logger.critical(f"Fatal socket error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
