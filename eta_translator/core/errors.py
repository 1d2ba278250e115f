"""
Error taxonomy of the translation service and helpers for representing
errors as JSON-serializable dictionaries.

Every failure the request pipeline can surface to a client is an instance of
:class:`TranslatorApiError`.  Each subclass fixes a stable, machine-readable
``error_code`` and the HTTP ``status_code`` that carries the taxonomy, so the
endpoint only has to catch the base class and hand it to the response shaper.
"""

from typing import Dict, Any, Optional


class TranslatorApiError(Exception):
    """Base class of all client-visible translation errors."""

    error_code = "InternalError"
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.error_code)
        self.message = message

    def as_dict(self) -> Dict[str, Any]:
        return error_as_dict(error=self.error_code, error_msg=self.message)


class MethodNotAllowed(TranslatorApiError):
    error_code = "MethodNotAllowed"
    status_code = 405


class UnsupportedMediaType(TranslatorApiError):
    error_code = "UnsupportedMediaType"
    status_code = 415


class InvalidPayload(TranslatorApiError):
    error_code = "InvalidPayload"
    status_code = 400


class MissingInput(TranslatorApiError):
    error_code = "MissingInput"
    status_code = 400


class InputTooLarge(TranslatorApiError):
    error_code = "InputTooLarge"
    status_code = 413


class RateLimited(TranslatorApiError):
    error_code = "RateLimited"
    status_code = 429


class ServerMisconfigured(TranslatorApiError):
    error_code = "ServerMisconfigured"
    status_code = 500


class AllProvidersFailed(TranslatorApiError):
    error_code = "AllProvidersFailed"
    status_code = 502


def error_as_dict(error: str, error_msg: Optional[str] = None) -> Dict[str, Any]:
    """
    Convert an error identifier and optional message into a serialisable dictionary.

    Parameters
    ----------
    error : str
        A short, machine-readable error code or identifier.
    error_msg : Optional[str], default ``None``
        A human-readable description providing additional context.
        If omitted, only the ``error`` key is included in the result.

    Returns
    -------
    Dict[str, Any]
        A dictionary suitable for JSON responses, containing at least the
        ``"error"`` key and, when ``error_msg`` is supplied, a ``"message"``
        key.

    Examples
    --------
    >>> error_as_dict("MissingInput")
    {'error': 'MissingInput'}

    >>> error_as_dict("InputTooLarge", "Text exceeds 2000 characters")
    {'error': 'InputTooLarge', 'message': 'Text exceeds 2000 characters'}
    """
    if error_msg is None:
        return {"error": error}

    return {"error": error, "message": error_msg}
