import json

from unittest import mock

from eta_translator.base.providers_config import ProviderConfig

GEMINI_HOST = "https://generativelanguage.googleapis.com"

HELLO_RESULT = {
    "inputLanguage": "en",
    "improved": "Hello",
    "translation": "Xin chào",
}


def gemini_provider(provider_id: str, api_token: str = "test-key") -> ProviderConfig:
    return ProviderConfig(
        id=provider_id,
        api_type="gemini",
        api_host=GEMINI_HOST,
        model=provider_id,
        api_token=api_token,
    )


def gemini_envelope(output) -> dict:
    """Gemini ``generateContent`` response carrying *output* as JSON text."""
    text = output if isinstance(output, str) else json.dumps(output)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def http_response(status_code: int = 200, body=None) -> mock.MagicMock:
    """
    Streamed ``requests`` response; *body* is sent as JSON unless it is
    already ``bytes``.
    """
    raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    response = mock.MagicMock()
    response.status_code = status_code
    response.iter_content.side_effect = lambda chunk_size=None: iter(
        [raw[i : i + 7] for i in range(0, len(raw), 7)]
    )
    return response
