"""
Entry point for launching the translator REST server.

The backend (Flask, Gunicorn or Waitress) comes from ``--server`` (or the
``--gunicorn`` / ``--waitress`` shortcuts) and falls back to the
``ETA_TRANSLATOR_SERVER_TYPE`` environment variable.

Typical usage
---------------
>>> python -m eta_translator.rest_api --gunicorn   # production
>>> python -m eta_translator.rest_api --server waitress
>>> eta-translator-api                            # development server (Flask)
"""

import logging
import argparse

from typing import List, Optional

from eta_translator.core.server import (
    run_flask_server,
    run_gunicorn_server,
    run_waitress_server,
)
from eta_translator.base.constants import (
    SERVER_TYPE,
    SERVER_PORT,
    SERVER_HOST,
    SERVER_WORKERS_COUNT,
    SERVER_THREADS_COUNT,
    SERVER_WORKERS_CLASS,
    ETA_TRANSLATOR_API_TIMEOUT,
    RUN_IN_DEBUG_MODE,
)

SERVER_CHOICES = ("flask", "gunicorn", "waitress")

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments; defaults come from
    ``eta_translator.base.constants``.
    """
    parser = argparse.ArgumentParser(
        description="Start the translator API with the chosen WSGI server"
    )
    parser.add_argument(
        "--server",
        choices=SERVER_CHOICES,
        default=None,
        help=f"WSGI backend (default: {SERVER_TYPE})",
    )
    shortcut = parser.add_mutually_exclusive_group()
    shortcut.add_argument(
        "--gunicorn",
        dest="server",
        action="store_const",
        const="gunicorn",
        help="Same as --server gunicorn",
    )
    shortcut.add_argument(
        "--waitress",
        dest="server",
        action="store_const",
        const="waitress",
        help="Same as --server waitress",
    )
    parser.add_argument("--host", default=SERVER_HOST)
    parser.add_argument("--port", type=int, default=SERVER_PORT)
    parser.add_argument(
        "--workers",
        type=int,
        default=SERVER_WORKERS_COUNT,
        help="Worker processes (Gunicorn only)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=SERVER_THREADS_COUNT,
        help="Threads per worker (Gunicorn/Waitress)",
    )
    return parser.parse_args(argv)


def server_choice(args: argparse.Namespace) -> str:
    # Command line wins over the environment
    return args.server or SERVER_TYPE


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    backend = server_choice(args)
    logger.info("Starting translator API with %s on %s:%d", backend, args.host, args.port)

    try:
        if backend == "gunicorn":
            run_gunicorn_server(
                host=args.host,
                port=args.port,
                workers=args.workers,
                threads=args.threads,
                timeout=ETA_TRANSLATOR_API_TIMEOUT,
                worker_class=SERVER_WORKERS_CLASS,
            )
        elif backend == "waitress":
            run_waitress_server(host=args.host, port=args.port, threads=args.threads)
        else:
            run_flask_server(host=args.host, port=args.port, debug=RUN_IN_DEBUG_MODE)
    except Exception:
        logger.exception("Failed to start the server")
        raise


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    main()
