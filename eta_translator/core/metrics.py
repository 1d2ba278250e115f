"""
Metrics module that provides Prometheus integration for a Flask application.
It defines a :class:`PrometheusMetrics` class that registers request count
and latency metrics plus a per-provider attempt counter fed by the fallback
engine, and exposes them at the ``/metrics`` endpoint.

The module raises a clear error when Prometheus is requested but not
installed.
"""

import time
from typing import Optional

from flask import Flask, request, Response

from eta_translator.base.constants import USE_PROMETHEUS, REST_API_LOG_LEVEL
from eta_translator.utils.logger import prepare_logger

IS_PROMETHEUS_AVAILABLE = False
try:
    from prometheus_client import (
        CollectorRegistry,
        Counter,
        Histogram,
        generate_latest,
        CONTENT_TYPE_LATEST,
    )

    IS_PROMETHEUS_AVAILABLE = True
except ImportError:
    IS_PROMETHEUS_AVAILABLE = False


if USE_PROMETHEUS and not IS_PROMETHEUS_AVAILABLE:
    raise RuntimeError(
        "Prometheus is not available, check your installation! Install "
        "eta-translator with prometheus to enable Prometheus metrics: "
        "pip install .[metrics]"
    )


class PrometheusMetrics:
    """
    Helper class that registers Prometheus metrics with a Flask app.

    Each instance owns its registry, so several apps (e.g. in tests) can
    live in one process.
    """

    METRICS_EP = "/metrics"

    def __init__(
        self,
        app: Flask,
        logger_file_name: Optional[str] = None,
        logger_level: Optional[str] = REST_API_LOG_LEVEL,
    ):
        """
        Parameters
        ----------
        app : Flask
            The Flask application to which the metrics hooks will be attached.
        logger_file_name : Optional[str]
            File name for metric‑related logs; if ``None`` logging defaults to
            standard output.
        logger_level : Optional[str]
            Logging level for the metrics logger.
        """
        if not IS_PROMETHEUS_AVAILABLE:
            raise RuntimeError(
                "Prometheus is not available, check your installation."
            )

        self.flask_app = app
        if not self.flask_app:
            raise RuntimeError("Flask app is required!")

        self._logger = prepare_logger(
            logger_name=__name__,
            logger_file_name=logger_file_name,
            log_level=logger_level,
        )

        self.registry = CollectorRegistry()
        self._prepare_metrics()
        self._register_request_hooks()

    def register_metrics_ep(self):
        """Register the ``/metrics`` endpoint on the Flask app."""

        @self.flask_app.route(self.METRICS_EP)
        def prometheus_metrics():
            return Response(
                generate_latest(self.registry), mimetype=CONTENT_TYPE_LATEST
            )

    def inc_provider_attempt(self, provider_id: str, outcome: str) -> None:
        self.PROVIDER_ATTEMPTS.labels(provider=provider_id, outcome=outcome).inc()

    def _prepare_metrics(self):
        self._logger.info("[Prometheus] preparing metrics")

        self.REQUEST_COUNT = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint", "http_status"],
            registry=self.registry,
        )

        self.REQUEST_LATENCY = Histogram(
            "http_request_duration_seconds",
            "Histogram of request latency (seconds)",
            ["method", "endpoint"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 90),
            registry=self.registry,
        )

        self.PROVIDER_ATTEMPTS = Counter(
            "translator_provider_attempts_total",
            "Provider attempts made by the fallback engine",
            ["provider", "outcome"],
            registry=self.registry,
        )

    def _register_request_hooks(self):
        """Attach Flask ``before_request`` and ``after_request`` hooks."""

        @self.flask_app.before_request
        def _start_timer():
            request.start_time = time.time()

        @self.flask_app.after_request
        def _record_metrics(response):
            if hasattr(request, "start_time"):
                self.REQUEST_LATENCY.labels(
                    method=request.method,
                    endpoint=request.path,
                ).observe(time.time() - request.start_time)

            self.REQUEST_COUNT.labels(
                method=request.method,
                endpoint=request.path,
                http_status=response.status_code,
            ).inc()
            return response
