"""
eta_translator.core.engine
==========================

This module provides the :class:`FlaskEngine` class, which builds and
configures a Flask application for the translation REST API.  The engine
creates the shared collaborators (quota store, provider fallback engine),
instantiates the endpoints with them and registers the endpoint instances
under the API prefix defined by
:data:`~eta_translator.base.constants.DEFAULT_API_PREFIX`.

Typical usage
-------------
>>> engine = FlaskEngine(providers_config_path='resources/configs/providers-config.json')
>>> app = engine.prepare_flask_app()
>>> app.run()
"""

import traceback

from flask import Flask
from typing import List, Optional

from eta_translator.base.providers_config import ProvidersConfig
from eta_translator.base.constants import (
    DEFAULT_API_PREFIX,
    MAX_REQUEST_BYTES,
    REST_API_LOG_LEVEL,
    USE_PROMETHEUS,
)
from eta_translator.core.fallback import ProviderFallbackEngine
from eta_translator.core.quota.store import QuotaStoreI, prepare_quota_store
from eta_translator.core.quota.rate_limiter import RateLimiter
from eta_translator.core.quota.usage_recorder import UsageRecorder
from eta_translator.endpoints.endpoint_i import EndpointI
from eta_translator.endpoints.builtin.ping import Ping
from eta_translator.endpoints.builtin.translate import Translate
from eta_translator.register.register import FlaskEndpointRegistrar
from eta_translator.utils.logger import prepare_logger


class FlaskEngine:
    """
    Engine responsible for creating a Flask application with the
    translation endpoints.

    Parameters
    ----------
    providers_config_path : Optional[str]
        Path to the ordered providers configuration file.  When the file does
        not exist the built-in provider list is used.
    logger_file_name : Optional[str], optional
        File name for the engine's logger output.
    logger_level : Optional[str], optional
        Logging level for the engine; defaults to
        :data:`~eta_translator.base.constants.REST_API_LOG_LEVEL`.
    quota_store : Optional[QuotaStoreI], optional
        Quota store shared by the rate limiter and the usage recorder.  Built
        from the Redis configuration when omitted.
    fallback_engine : Optional[ProviderFallbackEngine], optional
        Ready fallback engine; built from the providers configuration when
        omitted.
    use_prometheus : bool, optional
        Register ``/metrics``; defaults to
        :data:`~eta_translator.base.constants.USE_PROMETHEUS`.

    Notes
    -----
    The engine does not start the Flask server; it only prepares the
    application instance.  The caller is responsible for running the app
    (e.g., via ``app.run()`` or a WSGI server such as Gunicorn).
    """

    def __init__(
        self,
        providers_config_path: Optional[str] = None,
        logger_file_name: Optional[str] = None,
        logger_level: Optional[str] = REST_API_LOG_LEVEL,
        quota_store: Optional[QuotaStoreI] = None,
        fallback_engine: Optional[ProviderFallbackEngine] = None,
        use_prometheus: bool = USE_PROMETHEUS,
    ) -> None:
        self.providers_config_path = providers_config_path

        self.logger_level = logger_level
        self.logger_file_name = logger_file_name

        self.quota_store = quota_store
        self.fallback_engine = fallback_engine
        self.use_prometheus = use_prometheus

        self._logger = prepare_logger(
            logger_name=__name__,
            logger_file_name=logger_file_name,
            log_level=logger_level,
        )

    def prepare_flask_app(self) -> Flask:
        """
        Create and configure the Flask application.

        Returns
        -------
        Flask
            A Flask instance with all endpoints registered.

        Raises
        ------
        RuntimeError
            If endpoint registration fails for any reason.
        """
        flask_app = Flask(__name__)
        flask_app.config["MAX_CONTENT_LENGTH"] = MAX_REQUEST_BYTES

        metrics = self.__prepare_prometheus_if_needed(flask_app)
        try:
            self.__register_instances(
                application=flask_app,
                instances=self.__prepare_endpoints(metrics=metrics),
            )
        except (RuntimeError, ValueError) as e:
            raise RuntimeError(f"Failed to register endpoints: {e}")

        return flask_app

    def __prepare_prometheus_if_needed(self, flask_app: Flask):
        """
        Register the Prometheus metrics endpoint when enabled and return the
        metrics instance (``None`` otherwise).
        """
        if not self.use_prometheus:
            return None

        from eta_translator.core.metrics import PrometheusMetrics

        try:
            _m = PrometheusMetrics(
                app=flask_app,
                logger_file_name=self.logger_file_name,
                logger_level=self.logger_level,
            )
            _m.register_metrics_ep()
        except Exception:
            raise RuntimeError(
                f"Failed to register metrics: {traceback.format_exc()}"
            )
        return _m

    def __prepare_endpoints(self, metrics=None) -> List[EndpointI]:
        quota_store = self.quota_store
        if quota_store is None:
            quota_store = prepare_quota_store(logger=self._logger)

        fallback_engine = self.fallback_engine
        if fallback_engine is None:
            providers = ProvidersConfig(self.providers_config_path).providers
            self._logger.info(
                "Providers in fallback order: "
                + ", ".join(p.id for p in providers)
            )
            fallback_engine = ProviderFallbackEngine(
                providers=providers,
                logger=self._logger,
                metrics=metrics,
            )

        return [
            Translate(
                fallback_engine=fallback_engine,
                rate_limiter=RateLimiter(store=quota_store, logger=self._logger),
                usage_recorder=UsageRecorder(store=quota_store, logger=self._logger),
                logger_file_name=self.logger_file_name,
                logger_level=self.logger_level,
            ),
            Ping(
                logger_file_name=self.logger_file_name,
                logger_level=self.logger_level,
            ),
        ]

    def __register_instances(self, application: Flask, instances: List[EndpointI]):
        """
        Register a collection of endpoint instances with a Flask application
        under the ``DEFAULT_API_PREFIX`` URL prefix.
        """
        with FlaskEndpointRegistrar(
            app=application, url_prefix=DEFAULT_API_PREFIX, logger=self._logger
        ) as registrar:
            registrar.register_endpoints(endpoints=instances)
