"""
Translation endpoint.

Runs the request pipeline::

    validator -> (credential check) -> rate limiter -> usage recorder
              -> provider fallback engine -> response shaper

Validation and quota failures short-circuit before any provider is called.
Every response, including errors and the ``OPTIONS`` preflight, carries the
CORS headers built by the response shaper.
"""

from typing import List, Optional

from flask import Request, Response
from werkzeug.exceptions import RequestEntityTooLarge

from eta_translator.base.constants import CLIENT_IP_HEADERS, REST_API_LOG_LEVEL
from eta_translator.core.decorators import EP
from eta_translator.core.errors import (
    TranslatorApiError,
    InputTooLarge,
    ServerMisconfigured,
)
from eta_translator.core.fallback import ProviderFallbackEngine
from eta_translator.core.quota.rate_limiter import RateLimiter
from eta_translator.core.quota.usage_recorder import UsageRecorder
from eta_translator.core.response_shaper import ResponseShaper
from eta_translator.core.validator import RequestValidator
from eta_translator.endpoints.endpoint_i import EndpointI

UNKNOWN_CLIENT = "0.0.0.0"


class Translate(EndpointI):
    """
    ``POST /api/translate`` (alias ``/api/gemini``).

    The endpoint is routed for every method in :attr:`EndpointI.METHODS` so
    that unsupported methods get the JSON ``MethodNotAllowed`` body with CORS
    headers instead of the framework's default page.
    """

    def __init__(
        self,
        fallback_engine: ProviderFallbackEngine,
        rate_limiter: RateLimiter,
        usage_recorder: UsageRecorder,
        validator: Optional[RequestValidator] = None,
        response_shaper: Optional[ResponseShaper] = None,
        client_ip_headers: Optional[List[str]] = None,
        logger_file_name: Optional[str] = None,
        logger_level: Optional[str] = REST_API_LOG_LEVEL,
        ep_name: str = "translate",
        aliases: Optional[List[str]] = None,
    ):
        super().__init__(
            ep_name=ep_name,
            methods=EndpointI.METHODS,
            logger_file_name=logger_file_name,
            logger_level=logger_level,
            aliases=["gemini"] if aliases is None else aliases,
        )

        self.fallback_engine = fallback_engine
        self.rate_limiter = rate_limiter
        self.usage_recorder = usage_recorder
        self.validator = validator or RequestValidator()
        self.response_shaper = response_shaper or ResponseShaper()
        self.client_ip_headers = (
            CLIENT_IP_HEADERS if client_ip_headers is None else client_ip_headers
        )

    @EP.response_time
    def run_ep(self, http_request: Request) -> Response:
        headers = http_request.headers
        try:
            if self.validator.is_preflight(http_request.method):
                return self.response_shaper.preflight(headers)

            self.validator.check_content_type(headers)
            translation_request = self.validator.validate(
                headers=headers, body=self._read_body(http_request)
            )

            if not self.fallback_engine.is_configured():
                self.logger.error("No provider has a credential configured")
                raise ServerMisconfigured("Server misconfigured")

            self.rate_limiter.check_and_record(self.client_id(http_request))
            self.usage_recorder.record(chars=len(translation_request.text))

            result = self.fallback_engine.translate(translation_request)
        except TranslatorApiError as e:
            self.logger.info(f"Request rejected: {e.error_code} ({e.status_code})")
            return self.response_shaper.error(e, headers)
        except Exception:
            self.logger.exception("Unhandled exception in translate endpoint")
            return self.response_shaper.internal_error(headers)

        return self.response_shaper.success(result, headers)

    @staticmethod
    def _read_body(http_request: Request) -> bytes:
        # Bodies over MAX_CONTENT_LENGTH are refused before being read
        try:
            return http_request.get_data()
        except RequestEntityTooLarge:
            raise InputTooLarge("Request body too large")

    def client_id(self, http_request: Request) -> str:
        """
        Client address from the first configured proxy header present,
        falling back to the socket peer address.
        """
        for header in self.client_ip_headers:
            value = http_request.headers.get(header)
            if value and value.strip():
                # X-Forwarded-For holds a chain, the first entry is the client
                return value.split(",")[0].strip()
        return http_request.remote_addr or UNKNOWN_CLIENT
