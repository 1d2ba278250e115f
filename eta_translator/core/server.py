"""
Launch helpers for the translator REST API.

* :func:`run_flask_server` - Flask's development server, for local use.
* :func:`run_gunicorn_server` - Gunicorn, for production on POSIX hosts.
* :func:`run_waitress_server` - Waitress, a pure-Python production server.

Each helper builds the application with :func:`build_app`, so every
Gunicorn worker process gets its own app and therefore its own in-memory
quota store.  Configure Redis to share counters between workers.
"""

import logging

from typing import Optional

from flask import Flask

from eta_translator.core.engine import FlaskEngine
from eta_translator.base.constants import (
    PROVIDERS_CONFIG_FILE,
    REST_API_LOG_FILE_NAME,
    REST_API_LOG_LEVEL,
)

WAITRESS_CHANNEL_TIMEOUT = 300
GUNICORN_KEEPALIVE = 75

logger = logging.getLogger(__name__)


def build_app(debug: bool = False) -> Flask:
    return FlaskEngine(
        providers_config_path=PROVIDERS_CONFIG_FILE,
        logger_file_name=REST_API_LOG_FILE_NAME,
        logger_level="DEBUG" if debug else REST_API_LOG_LEVEL,
    ).prepare_flask_app()


def run_flask_server(host: str, port: int, debug: bool = False):
    """
    Run the Flask development server.

    Parameters
    ----------
    host : str
        Interface address to bind to.
    port : int
        TCP port to listen on.
    debug : bool, optional
        Flask debug mode; also switches the app loggers to ``DEBUG``.
    """
    try:
        build_app(debug=debug).run(host=host, port=port, debug=debug)
    except RuntimeError as e:
        raise RuntimeError(f"Failed to run flask server: {e}")


def gunicorn_options(
    host: str,
    port: int,
    workers: int,
    threads: int,
    timeout: int,
    log_level: str,
    worker_class: Optional[str],
) -> dict:
    options = {
        "bind": f"{host}:{port}",
        "workers": workers,
        "threads": threads,
        "timeout": timeout,
        "loglevel": log_level,
        "accesslog": "-",
        "errorlog": "-",
        "keepalive": GUNICORN_KEEPALIVE,
    }
    if worker_class and worker_class.strip():
        options["worker_class"] = worker_class.strip()
    return options


def run_gunicorn_server(
    host: str,
    port: int,
    workers: int = 2,
    threads: int = 8,
    timeout: int = 0,
    log_level: str = "info",
    worker_class: Optional[str] = None,
):
    """
    Serve the app with Gunicorn, configured programmatically instead of
    through a ``gunicorn.conf.py`` file.
    """
    try:
        from gunicorn.app.base import BaseApplication
    except ImportError:
        raise ImportError(
            "Gunicorn is not installed. Install it with: pip install gunicorn"
        )

    class _TranslatorApplication(BaseApplication):
        def __init__(self, app: Flask, options: dict):
            self.options = options
            self.application = app
            super().__init__()

        def load_config(self):
            for key, value in self.options.items():
                if key in self.cfg.settings and value is not None:
                    self.cfg.set(key.lower(), value)

        def load(self):
            return self.application

    options = gunicorn_options(
        host=host,
        port=port,
        workers=workers,
        threads=threads,
        timeout=timeout,
        log_level=log_level,
        worker_class=worker_class,
    )
    app = build_app(debug=log_level.lower() == "debug")
    _TranslatorApplication(app, options).run()


def run_waitress_server(host: str, port: int, threads: int = 4):
    """
    Serve the app with Waitress (requires ``pip install waitress``).
    """
    try:
        from waitress import serve
    except ImportError:
        raise ImportError(
            "Waitress is not installed. Install it with: pip install waitress"
        )

    app = build_app()
    logger.info("Starting Waitress on %s:%d with %d threads", host, port, threads)
    serve(
        app,
        host=host,
        port=port,
        threads=threads,
        channel_timeout=WAITRESS_CHANNEL_TIMEOUT,
    )
