"""
Ordered provider configuration.

This module defines:
- ProviderConfig: an immutable representation of a single provider entry.
- ProvidersConfig: loader of the ordered provider list from a JSON file,
  falling back to the built-in Gemini list when the file does not exist.

The order of the list is the fallback order used by the translation engine.
"""

import os
import json

from dataclasses import dataclass
from typing import Dict, List, Optional, Any

from eta_translator.base.constants import GEMINI_API_KEY
from eta_translator.base.constants_base import ProviderTypes, POSSIBLE_PROVIDER_TYPES

GEMINI_API_HOST = "https://generativelanguage.googleapis.com"

DEFAULT_GEMINI_MODELS = [
    "gemini-1.5-flash",
    "gemini-pro",
    "gemini-2.5-flash",
    "gemini-1.5-pro",
]


@dataclass(frozen=True)
class ProviderConfig:
    """
    Immutable representation of one upstream provider.

    Attributes
    ----------
    id : str
        Unique provider identifier, used in logs and metrics.
    api_type : str
        Provider wire format: ``gemini`` or ``openai``.
    api_host : str
        Base URL of the provider API.
    model : str
        Model name sent to the provider.
    api_token : str
        Credential (maybe empty, in which case every attempt fails).
    """

    id: str
    api_type: str
    api_host: str
    model: str
    api_token: str = ""

    @staticmethod
    def from_config(cfg: Dict[str, Any]) -> "ProviderConfig":
        """
        Build a provider from a configuration entry.

        The credential is taken from ``api_token`` or, when absent, from the
        environment variable named by ``api_token_env``.
        """
        api_token = cfg.get("api_token")
        if not api_token and cfg.get("api_token_env"):
            api_token = os.environ.get(str(cfg["api_token_env"]), "")

        model = str(cfg.get("model") or cfg["id"])
        return ProviderConfig(
            id=str(cfg["id"]),
            api_type=str(cfg["api_type"]).lower(),
            api_host=str(cfg["api_host"]).rstrip("/"),
            model=model,
            api_token=str(api_token or ""),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Loggable representation, the credential is never included."""
        return {
            "id": self.id,
            "api_type": self.api_type,
            "api_host": self.api_host,
            "model": self.model,
            "has_token": bool(self.api_token),
        }


class ProvidersConfig:
    """
    Loader of the ordered provider list.

    Parameters
    ----------
    providers_config_path : str, optional
        Path to a JSON file ``{"providers": [{...}, ...]}``.  When the path is
        empty or the file does not exist, :func:`default_providers` is used.

    Raises
    ------
    json.JSONDecodeError
        If the file content is not valid JSON.
    KeyError
        If an entry lacks ``id``, ``api_type`` or ``api_host``.
    ValueError
        If the list is empty, a provider type is unknown or an ``id`` is
        duplicated.
    """

    def __init__(self, providers_config_path: Optional[str] = None):
        self.providers_config_path = providers_config_path
        self.providers: List[ProviderConfig] = self._read_providers()

        self._validate_providers()

    def _read_providers(self) -> List[ProviderConfig]:
        path = self.providers_config_path
        if not path or not os.path.exists(path):
            return default_providers()

        with open(path, "rt", encoding="utf-8") as f:
            providers_json = json.load(f)

        return [ProviderConfig.from_config(p) for p in providers_json["providers"]]

    def _validate_providers(self) -> None:
        if not len(self.providers):
            raise ValueError("At least one provider must be configured")

        seen_ids = set()
        duplicates = set()
        for provider in self.providers:
            if provider.api_type not in POSSIBLE_PROVIDER_TYPES:
                raise ValueError(
                    f"Provider {provider.id} has unknown type {provider.api_type}. "
                    f"Available types: {POSSIBLE_PROVIDER_TYPES}"
                )
            if provider.id in seen_ids:
                duplicates.add(provider.id)
            seen_ids.add(provider.id)

        if duplicates:
            dup_str = ", ".join(sorted(duplicates))
            raise ValueError(f"Duplicate provider identifiers found: {dup_str}")


def default_providers(api_token: str = GEMINI_API_KEY) -> List[ProviderConfig]:
    return [
        ProviderConfig(
            id=model,
            api_type=ProviderTypes.GEMINI,
            api_host=GEMINI_API_HOST,
            model=model,
            api_token=api_token,
        )
        for model in DEFAULT_GEMINI_MODELS
    ]
