import http.server
import json
import threading
import time

import pytest
import requests

from unittest import mock

from eta_translator.base.providers_config import ProviderConfig
from eta_translator.core.errors import AllProvidersFailed
from eta_translator.core.fallback import FallbackState, ProviderFallbackEngine
from eta_translator.core.data_models.translation import TranslationRequest

from tests.helpers import (
    HELLO_RESULT,
    gemini_envelope,
    gemini_provider,
    http_response,
)

REQUEST = TranslationRequest(text="Hello", source="auto", target="vi")


def _engine(*provider_ids, **kwargs):
    kwargs.setdefault("attempt_timeout", 30)
    kwargs.setdefault("overall_timeout", 90)
    return ProviderFallbackEngine(
        providers=[gemini_provider(p) for p in provider_ids], **kwargs
    )


def _called_models(post: mock.MagicMock):
    return [c.kwargs["url"].split("/models/")[1] for c in post.call_args_list]


def test_empty_provider_list_is_rejected():
    with pytest.raises(ValueError):
        ProviderFallbackEngine(providers=[])


def test_first_provider_success(provider_post):
    result = _engine("a", "b").translate(REQUEST)

    assert result.model_dump() == HELLO_RESULT
    assert _called_models(provider_post) == ["a:generateContent"]


def test_falls_back_in_order():
    responses = [
        requests.exceptions.Timeout(),
        http_response(503, {"error": "unavailable"}),
        http_response(200, gemini_envelope(HELLO_RESULT)),
    ]
    with mock.patch(
        "eta_translator.core.fallback.requests.post", side_effect=responses
    ) as post:
        outcome = _engine("a", "b", "c").run(REQUEST)

    assert outcome.state is FallbackState.SUCCEEDED
    assert outcome.result.translation == "Xin chào"
    assert _called_models(post) == [
        "a:generateContent",
        "b:generateContent",
        "c:generateContent",
    ]
    assert [a.success for a in outcome.attempts] == [False, False, True]
    assert outcome.attempts[0].error_reason.startswith("timeout")
    assert outcome.attempts[1].error_reason == "status 503"


@pytest.mark.parametrize(
    "response",
    [
        http_response(200, b"<html>Service Unavailable</html>"),
        http_response(200, {"candidates": []}),
        http_response(200, gemini_envelope("not json at all")),
        http_response(200, gemini_envelope([1, 2, 3])),
        http_response(200, gemini_envelope({"unrelated": "x"})),
        http_response(404, gemini_envelope(HELLO_RESULT)),
    ],
)
def test_unusable_responses_exhaust_providers(response):
    with mock.patch(
        "eta_translator.core.fallback.requests.post", return_value=response
    ) as post:
        with pytest.raises(AllProvidersFailed):
            _engine("a", "b").translate(REQUEST)

    assert post.call_count == 2


def test_connection_error_is_recovered():
    responses = [
        requests.exceptions.ConnectionError("refused"),
        http_response(200, gemini_envelope(HELLO_RESULT)),
    ]
    with mock.patch(
        "eta_translator.core.fallback.requests.post", side_effect=responses
    ):
        outcome = _engine("a", "b").run(REQUEST)

    assert outcome.state is FallbackState.SUCCEEDED
    assert outcome.attempts[0].error_reason == "request error: ConnectionError"


def test_missing_fields_default_to_empty_string():
    partial = http_response(200, gemini_envelope({"translation": "Xin chào"}))
    with mock.patch(
        "eta_translator.core.fallback.requests.post", return_value=partial
    ):
        result = _engine("a").translate(REQUEST)

    assert result.model_dump() == {
        "inputLanguage": "",
        "improved": "",
        "translation": "Xin chào",
    }


def test_provider_without_credential_is_skipped(provider_post):
    engine = ProviderFallbackEngine(
        providers=[gemini_provider("a", api_token=""), gemini_provider("b")]
    )

    assert engine.is_configured()
    outcome = engine.run(REQUEST)

    assert outcome.attempts[0].error_reason == "missing credential"
    assert _called_models(provider_post) == ["b:generateContent"]


def test_not_configured_without_any_credential():
    engine = ProviderFallbackEngine(providers=[gemini_provider("a", api_token="")])
    assert not engine.is_configured()


def test_overall_deadline_stops_the_loop(provider_post):
    outcome = _engine("a", "b", overall_timeout=0).run(REQUEST)

    assert outcome.state is FallbackState.ALL_FAILED
    assert outcome.attempts == []
    provider_post.assert_not_called()


def test_attempt_timeout_is_bounded_by_deadline(provider_post):
    _engine("a", attempt_timeout=30, overall_timeout=5).translate(REQUEST)

    assert provider_post.call_args.kwargs["timeout"] <= 5


def test_gemini_request_shape(provider_post):
    _engine("gemini-1.5-flash").translate(REQUEST)

    kwargs = provider_post.call_args.kwargs
    assert kwargs["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-1.5-flash:generateContent"
    )
    assert kwargs["headers"]["x-goog-api-key"] == "test-key"
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert prompt.endswith('SOURCE: auto\nTARGET: vi\n\nTEXT: "Hello"')
    schema = kwargs["json"]["generationConfig"]["responseSchema"]
    assert schema["required"] == ["inputLanguage", "improved", "translation"]


def test_metrics_count_every_attempt():
    metrics = mock.MagicMock()
    responses = [
        http_response(500, {}),
        http_response(200, gemini_envelope(HELLO_RESULT)),
    ]
    with mock.patch(
        "eta_translator.core.fallback.requests.post", side_effect=responses
    ):
        _engine("a", "b", metrics=metrics).translate(REQUEST)

    assert metrics.inc_provider_attempt.call_args_list == [
        mock.call("a", "failure"),
        mock.call("b", "success"),
    ]


def test_decoded_output_values_are_strings():
    output = {"inputLanguage": "en", "improved": None, "translation": 5}
    with mock.patch(
        "eta_translator.core.fallback.requests.post",
        return_value=http_response(200, gemini_envelope(json.dumps(output))),
    ):
        result = _engine("a").translate(REQUEST)

    assert result.improved == ""
    assert result.translation == "5"


class _DripHandler(http.server.BaseHTTPRequestHandler):
    """Answers 200 and then sends one body byte every 0.1 s."""

    protocol_version = "HTTP/1.1"

    def do_POST(self):
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Transfer-Encoding", "chunked")
        self.end_headers()
        try:
            for _ in range(40):
                self.wfile.write(b"1\r\n \r\n")
                self.wfile.flush()
                time.sleep(0.1)
            self.wfile.write(b"0\r\n\r\n")
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def drip_server_url():
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _DripHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_slow_body_is_cut_at_the_deadline(drip_server_url):
    providers = [
        ProviderConfig(
            id=provider_id,
            api_type="gemini",
            api_host=drip_server_url,
            model=provider_id,
            api_token="test-key",
        )
        for provider_id in ("slow-a", "slow-b")
    ]
    engine = ProviderFallbackEngine(
        providers=providers, attempt_timeout=0.5, overall_timeout=0.8
    )

    start = time.monotonic()
    outcome = engine.run(REQUEST)
    elapsed = time.monotonic() - start

    assert outcome.state is FallbackState.ALL_FAILED
    assert elapsed < 1.5
    assert outcome.attempts
    assert all(a.error_reason.startswith("timeout") for a in outcome.attempts)
