"""
Data models shared by the translation pipeline.

``TranslationRequest`` and ``TranslationResult`` are pydantic models, the
former produced by the request validator, the latter being the fixed
response contract returned to the client regardless of which provider
answered.  ``ProviderAttempt`` is an ephemeral record of one provider call,
used only for control flow and logging inside the fallback engine.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel

from eta_translator.base.constants import DEFAULT_SOURCE_LANG, DEFAULT_TARGET_LANG

# Field names every provider must return in its structured output
RESULT_FIELDS = ["inputLanguage", "improved", "translation"]


class TranslationRequest(BaseModel):
    """
    Validated translation request.

    Attributes
    ----------
    text : str
        Trimmed, non-empty text to translate.
    source : str
        Lowercase source language tag, ``auto`` lets the model detect it.
    target : str
        Lowercase target language tag.
    """

    text: str
    source: str = DEFAULT_SOURCE_LANG
    target: str = DEFAULT_TARGET_LANG


class TranslationResult(BaseModel):
    inputLanguage: str = ""
    improved: str = ""
    translation: str = ""

    @classmethod
    def from_provider_output(cls, data: Dict[str, Any]) -> "TranslationResult":
        """
        Decode a provider's structured output.

        Values are coerced to strings; a missing or ``null`` field becomes an
        empty string instead of failing the whole request.
        """
        return cls(**{name: _as_str(data.get(name)) for name in RESULT_FIELDS})


@dataclass
class ProviderAttempt:
    provider_id: str
    success: bool
    latency: float
    error_reason: Optional[str] = None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
