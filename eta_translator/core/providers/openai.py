"""
OpenAI-compatible chat completions provider type.

Works with any server exposing ``/v1/chat/completions`` with
``response_format: {"type": "json_schema", ...}`` support.
"""

from typing import Any, Dict, Optional

from eta_translator.base.providers_config import ProviderConfig
from eta_translator.core.providers.provider_i import ProviderTypeI


class OpenAIType(ProviderTypeI):
    SCHEMA_NAME = "translation_result"

    def generate_url(self, provider: ProviderConfig) -> str:
        return f"{provider.api_host}/v1/chat/completions"

    def auth_headers(self, provider: ProviderConfig) -> Dict[str, str]:
        if not provider.api_token:
            return {}
        return {"Authorization": f"Bearer {provider.api_token}"}

    def build_payload(self, provider: ProviderConfig, prompt: str) -> Dict[str, Any]:
        fields = self.result_fields()
        return {
            "model": provider.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": self.SCHEMA_NAME,
                    "strict": True,
                    "schema": {
                        "type": "object",
                        "properties": {name: {"type": "string"} for name in fields},
                        "required": fields,
                        "additionalProperties": False,
                    },
                },
            },
        }

    def extract_text(self, envelope: Any) -> Optional[str]:
        if not isinstance(envelope, dict):
            return None
        choices = envelope.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        if isinstance(content, str) and content:
            return content
        return None
