from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from eta_translator.base.providers_config import ProviderConfig
from eta_translator.core.data_models.translation import RESULT_FIELDS


class ProviderTypeI(ABC):
    """
    Wire format of one family of generation APIs.

    Subclasses know how to build the structured-output request for a prompt
    and how to pull the generated text out of the provider's JSON envelope.

    Subclasses must implement:
    - generate_url()
    - auth_headers()
    - build_payload()
    - extract_text()
    """

    @staticmethod
    def result_fields() -> List[str]:
        return list(RESULT_FIELDS)

    @abstractmethod
    def generate_url(self, provider: ProviderConfig) -> str:
        """
        Return the absolute URL of the generation endpoint.

        Returns
        -------
        str
            e.g. ``https://host/v1/chat/completions``.
        """
        raise NotImplementedError

    @abstractmethod
    def auth_headers(self, provider: ProviderConfig) -> Dict[str, str]:
        """Return the headers carrying the provider credential."""
        raise NotImplementedError

    @abstractmethod
    def build_payload(self, provider: ProviderConfig, prompt: str) -> Dict[str, Any]:
        """
        Return the JSON body asking for a structured answer with exactly the
        three string fields of a translation result.
        """
        raise NotImplementedError

    @abstractmethod
    def extract_text(self, envelope: Any) -> Optional[str]:
        """
        Return the generated text from a decoded response envelope, or
        ``None`` when the envelope carries no text.
        """
        raise NotImplementedError

    def prepare_request(
        self, provider: ProviderConfig, prompt: str
    ) -> Dict[str, Any]:
        """
        Return ``url``, ``headers`` and ``json`` keyword arguments for the
        outbound POST.
        """
        headers = {"Content-Type": "application/json"}
        headers.update(self.auth_headers(provider))
        return {
            "url": self.generate_url(provider),
            "headers": headers,
            "json": self.build_payload(provider, prompt),
        }
