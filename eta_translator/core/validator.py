"""
Request validation for the translation endpoint.

:class:`RequestValidator` turns the raw HTTP method, headers and body into a
:class:`~eta_translator.core.data_models.translation.TranslationRequest` or
raises one of the tagged validation errors from
:mod:`eta_translator.core.errors`.  It has no side effects and performs no
I/O, so every check here runs before any quota or provider call.
"""

import json

from typing import Any, Dict, Mapping, Optional, Union

from eta_translator.base.constants import (
    MAX_TEXT_LENGTH,
    DEFAULT_SOURCE_LANG,
    DEFAULT_TARGET_LANG,
)
from eta_translator.core.errors import (
    MethodNotAllowed,
    UnsupportedMediaType,
    InvalidPayload,
    MissingInput,
    InputTooLarge,
)
from eta_translator.core.data_models.translation import TranslationRequest

JSON_CONTENT_TYPE = "application/json"


class RequestValidator:
    """
    Parameters
    ----------
    max_text_length : int
        Upper bound (inclusive) on the trimmed text length.
    default_source : str
        Source language used when the payload has none.
    default_target : str
        Target language used when the payload has none.
    """

    ALLOWED_METHOD = "POST"
    PREFLIGHT_METHOD = "OPTIONS"

    def __init__(
        self,
        max_text_length: int = MAX_TEXT_LENGTH,
        default_source: str = DEFAULT_SOURCE_LANG,
        default_target: str = DEFAULT_TARGET_LANG,
    ):
        self.max_text_length = max_text_length
        self.default_source = default_source
        self.default_target = default_target

    def is_preflight(self, method: str) -> bool:
        """
        ``True`` for a CORS preflight, ``False`` for ``POST``.

        Raises
        ------
        MethodNotAllowed
            For any other method.
        """
        method = (method or "").upper()
        if method == self.PREFLIGHT_METHOD:
            return True
        if method != self.ALLOWED_METHOD:
            raise MethodNotAllowed("Method Not Allowed")
        return False

    def validate(
        self,
        headers: Mapping[str, str],
        body: Union[bytes, str, None],
    ) -> TranslationRequest:
        """
        Validate a ``POST`` request and build the translation request.

        Raises
        ------
        UnsupportedMediaType
            When ``Content-Type`` does not declare JSON.
        InvalidPayload
            When the body is not valid JSON; carries the parser message.
        MissingInput
            When ``text`` is absent or blank.
        InputTooLarge
            When the trimmed ``text`` is longer than ``max_text_length``.
        """
        self.check_content_type(headers)

        payload = self._parse_json(body)

        text = _coerce_str(payload.get("text")).strip()
        if not text:
            raise MissingInput("Missing text")
        if len(text) > self.max_text_length:
            raise InputTooLarge(
                f"Text too long (max {self.max_text_length} characters)"
            )

        return TranslationRequest(
            text=text,
            source=self._language(payload.get("source"), self.default_source),
            target=self._language(payload.get("target"), self.default_target),
        )

    @staticmethod
    def check_content_type(headers: Mapping[str, str]) -> None:
        content_type = (headers.get("Content-Type") or "").lower()
        if JSON_CONTENT_TYPE not in content_type:
            raise UnsupportedMediaType("Unsupported Media Type")

    @staticmethod
    def _parse_json(body: Union[bytes, str, None]) -> Dict[str, Any]:
        if isinstance(body, bytes):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidPayload(str(e))
        try:
            payload = json.loads(body or "")
        except json.JSONDecodeError as e:
            raise InvalidPayload(str(e))

        # A JSON value that is not an object carries no fields
        if not isinstance(payload, dict):
            return {}
        return payload

    @staticmethod
    def _language(value: Any, default: str) -> str:
        lang = _coerce_str(value).lower().strip()
        return lang or default


def _coerce_str(value: Optional[Any]) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
