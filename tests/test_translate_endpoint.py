import datetime

import pytest

from unittest import mock

from eta_translator.core.engine import FlaskEngine
from eta_translator.core.fallback import ProviderFallbackEngine
from eta_translator.core.quota.rate_limiter import RateLimiter
from eta_translator.core.quota.store import InMemoryQuotaStore
from eta_translator.core.quota.usage_recorder import UsageRecorder
from eta_translator.endpoints.builtin.translate import Translate

from tests.helpers import HELLO_RESULT, gemini_provider

CLIENT_IP = "203.0.113.7"
SITE_ORIGIN = "https://translator-eta.pages.dev"


def _post(client, payload=None, **kwargs):
    headers = {"CF-Connecting-IP": CLIENT_IP, "Origin": SITE_ORIGIN}
    headers.update(kwargs.pop("headers", {}))
    if payload is not None:
        kwargs["json"] = payload
    return client.post("/api/translate", headers=headers, **kwargs)


def _fill_bucket(store, client_ip: str, count: int) -> None:
    now = datetime.datetime.now(datetime.timezone.utc)
    for minute in (now, now + datetime.timedelta(minutes=1)):
        store.put(RateLimiter.bucket_key(client_ip, minute), str(count), 70)


def test_translate_hello(client, provider_post):
    response = _post(client, {"text": "Hello", "source": "auto", "target": "vi"})

    assert response.status_code == 200
    assert response.get_json() == HELLO_RESULT
    assert response.headers["Access-Control-Allow-Origin"] == SITE_ORIGIN
    assert response.headers["Vary"] == "Origin"
    assert "X-Response-Time" in response.headers
    assert provider_post.call_count == 1


def test_gemini_alias(client, provider_post):
    response = client.post("/api/gemini", json={"text": "Hello"})

    assert response.status_code == 200
    assert response.get_json()["translation"] == "Xin chào"


def test_preflight(client, provider_post):
    response = client.options("/api/translate", headers={"Origin": SITE_ORIGIN})

    assert response.status_code == 204
    assert response.get_data() == b""
    assert response.headers["Access-Control-Allow-Origin"] == SITE_ORIGIN
    assert response.mimetype == "application/json"
    assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
    provider_post.assert_not_called()


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_method_not_allowed(client, method):
    response = getattr(client, method)("/api/translate")

    assert response.status_code == 405
    assert response.get_json()["error"] == "MethodNotAllowed"
    assert "Access-Control-Allow-Origin" in response.headers


@pytest.mark.parametrize(
    "kwargs, status, error",
    [
        ({"data": "text=Hello", "content_type": "text/plain"}, 415, "UnsupportedMediaType"),
        ({"data": "{oops", "content_type": "application/json"}, 400, "InvalidPayload"),
        ({"payload": {"source": "en"}}, 400, "MissingInput"),
        ({"payload": {"text": "   "}}, 400, "MissingInput"),
        ({"payload": {"text": "x" * 2001}}, 413, "InputTooLarge"),
    ],
)
def test_invalid_requests_touch_no_quota(client, quota_store, provider_post, kwargs, status, error):
    kwargs = dict(kwargs)
    payload = kwargs.pop("payload", None)
    response = _post(client, payload, **kwargs)

    assert response.status_code == status
    assert response.get_json()["error"] == error
    assert quota_store._data == {}
    provider_post.assert_not_called()


def test_oversized_body_is_refused_unread(client, quota_store, provider_post):
    response = _post(client, {"text": "x" * 70000})

    assert response.status_code == 413
    assert response.get_json() == {
        "error": "InputTooLarge",
        "message": "Request body too large",
    }
    assert quota_store._data == {}
    provider_post.assert_not_called()


def test_rate_limited_request_is_rejected(client, quota_store, provider_post):
    _fill_bucket(quota_store, CLIENT_IP, 25)

    response = _post(client, {"text": "Hello"})

    assert response.status_code == 429
    assert response.get_json()["error"] == "RateLimited"
    now = datetime.datetime.now(datetime.timezone.utc)
    assert quota_store.get_int(RateLimiter.bucket_key(CLIENT_IP, now)) == 25
    provider_post.assert_not_called()


def test_other_clients_are_not_limited(client, quota_store, provider_post):
    _fill_bucket(quota_store, CLIENT_IP, 25)

    response = _post(client, {"text": "Hello"}, headers={"CF-Connecting-IP": "198.51.100.1"})

    assert response.status_code == 200


def test_rotating_forwarded_for_shares_the_peer_bucket(client, quota_store, provider_post):
    peer = "198.51.100.9"
    _fill_bucket(quota_store, peer, 24)

    statuses = [
        client.post(
            "/api/translate",
            json={"text": "Hello"},
            headers={"X-Forwarded-For": f"10.0.0.{i}", "X-Real-IP": f"10.0.1.{i}"},
            environ_base={"REMOTE_ADDR": peer},
        ).status_code
        for i in range(2)
    ]

    assert statuses == [200, 429]
    assert provider_post.call_count == 1


def test_usage_is_recorded(client, quota_store, provider_post):
    _post(client, {"text": "Hello"})
    _post(client, {"text": "Hi"})

    today = UsageRecorder.day_of(datetime.datetime.now(datetime.timezone.utc))
    usage = UsageRecorder(store=quota_store).read_day(today)
    assert usage["requests"] == 2
    assert usage["characters"] == 7


def test_all_providers_failed(client, provider_post):
    provider_post.return_value.status_code = 503

    response = _post(client, {"text": "Hello"})

    assert response.status_code == 502
    assert response.get_json() == {
        "error": "AllProvidersFailed",
        "message": "All models failed",
    }
    assert provider_post.call_count == 2


def test_server_misconfigured_without_credentials(quota_store, provider_post):
    engine = ProviderFallbackEngine(
        providers=[gemini_provider("model-a", api_token="")]
    )
    client = FlaskEngine(
        quota_store=quota_store, fallback_engine=engine, use_prometheus=False
    ).prepare_flask_app().test_client()

    response = _post(client, {"text": "Hello"})

    assert response.status_code == 500
    assert response.get_json()["error"] == "ServerMisconfigured"
    assert quota_store._data == {}
    provider_post.assert_not_called()


def test_unexpected_error_is_hidden(client, fallback_engine):
    with mock.patch.object(
        fallback_engine, "translate", side_effect=RuntimeError("secret detail")
    ):
        response = _post(client, {"text": "Hello"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "InternalError"}
    assert "secret detail" not in response.get_data(as_text=True)


def test_foreign_origin_gets_empty_cors_value(client, provider_post):
    response = _post(client, {"text": "Hello"}, headers={"Origin": "https://evil.example"})

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == ""


@pytest.mark.parametrize(
    "headers, remote_addr, expected",
    [
        ({"CF-Connecting-IP": "1.1.1.1", "X-Forwarded-For": "2.2.2.2"}, "9.9.9.9", "1.1.1.1"),
        ({"X-Forwarded-For": "2.2.2.2, 10.0.0.1"}, "9.9.9.9", "2.2.2.2"),
        ({"X-Real-IP": "3.3.3.3"}, "9.9.9.9", "3.3.3.3"),
        ({}, "9.9.9.9", "9.9.9.9"),
        ({}, None, "0.0.0.0"),
    ],
)
def test_client_id(fallback_engine, headers, remote_addr, expected):
    store = InMemoryQuotaStore()
    endpoint = Translate(
        fallback_engine=fallback_engine,
        rate_limiter=RateLimiter(store=store),
        usage_recorder=UsageRecorder(store=store),
        client_ip_headers=["CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP"],
    )
    http_request = mock.MagicMock(headers=headers, remote_addr=remote_addr)

    assert endpoint.client_id(http_request) == expected


def test_ping(client):
    response = client.get("/api/ping")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] is True
    assert body["body"] == "pong"
    assert "response_time" in body
