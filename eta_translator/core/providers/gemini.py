"""
Google Generative Language (Gemini) provider type.

Requests go to ``<host>/v1beta/models/<model>:generateContent`` with a
``responseSchema`` describing the translation result; the generated text is
found at ``candidates[0].content.parts[0].text``.  The API key travels in the
``x-goog-api-key`` header so it never appears in a URL.
"""

from typing import Any, Dict, Optional

from eta_translator.base.providers_config import ProviderConfig
from eta_translator.core.providers.provider_i import ProviderTypeI


class GeminiType(ProviderTypeI):
    API_VERSION = "v1beta"

    def generate_url(self, provider: ProviderConfig) -> str:
        return (
            f"{provider.api_host}/{self.API_VERSION}/models/"
            f"{provider.model}:generateContent"
        )

    def auth_headers(self, provider: ProviderConfig) -> Dict[str, str]:
        if not provider.api_token:
            return {}
        return {"x-goog-api-key": provider.api_token}

    def build_payload(self, provider: ProviderConfig, prompt: str) -> Dict[str, Any]:
        fields = self.result_fields()
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "OBJECT",
                    "properties": {name: {"type": "STRING"} for name in fields},
                    "required": fields,
                },
            },
        }

    def extract_text(self, envelope: Any) -> Optional[str]:
        if not isinstance(envelope, dict):
            return None
        candidates = envelope.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        if not isinstance(content, dict):
            return None
        parts = content.get("parts")
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            return None
        text = parts[0].get("text")
        if isinstance(text, str) and text:
            return text
        return None
