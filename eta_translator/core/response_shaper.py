"""
Shapes pipeline results and errors into Flask responses.

Every response of the translation endpoint carries the CORS headers.  The
``Access-Control-Allow-Origin`` value echoes the request ``Origin`` only when
it is the service's own origin (``https://<Host>``) or matches one of the
allow-listed patterns; any other origin gets the header with an empty value,
so the browser denies the cross-origin read while the request is still
answered.
"""

import json
import fnmatch

from typing import Any, Dict, List, Mapping, Optional

from flask import Response

from eta_translator.base.constants import ALLOWED_ORIGINS
from eta_translator.core.errors import TranslatorApiError, error_as_dict
from eta_translator.core.data_models.translation import TranslationResult

JSON_MIMETYPE = "application/json"


class ResponseShaper:
    def __init__(self, allowed_origins: Optional[List[str]] = None):
        self.allowed_origins = (
            ALLOWED_ORIGINS if allowed_origins is None else list(allowed_origins)
        )

    def allowed_origin(self, headers: Mapping[str, str]) -> str:
        """Origin to echo in ``Access-Control-Allow-Origin`` (maybe empty)."""
        origin = headers.get("Origin") or ""
        if not origin:
            return ""

        host = headers.get("Host") or ""
        if host and origin == f"https://{host}":
            return origin

        for pattern in self.allowed_origins:
            if fnmatch.fnmatchcase(origin, pattern):
                return origin
        return ""

    def cors_headers(self, headers: Mapping[str, str]) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allowed_origin(headers),
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Vary": "Origin",
        }

    def preflight(self, headers: Mapping[str, str]) -> Response:
        return Response(
            status=204, headers=self.cors_headers(headers), mimetype=JSON_MIMETYPE
        )

    def success(self, result: TranslationResult, headers: Mapping[str, str]) -> Response:
        return self._json(result.model_dump(), 200, headers)

    def error(self, error: TranslatorApiError, headers: Mapping[str, str]) -> Response:
        return self._json(error.as_dict(), error.status_code, headers)

    def internal_error(self, headers: Mapping[str, str]) -> Response:
        return self._json(error_as_dict("InternalError"), 500, headers)

    def _json(self, body: Any, status: int, headers: Mapping[str, str]) -> Response:
        return Response(
            json.dumps(body, ensure_ascii=False),
            status=status,
            headers=self.cors_headers(headers),
            mimetype=JSON_MIMETYPE,
        )
