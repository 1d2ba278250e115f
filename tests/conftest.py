import pytest

from unittest import mock

from eta_translator.core.engine import FlaskEngine
from eta_translator.core.fallback import ProviderFallbackEngine
from eta_translator.core.quota.store import InMemoryQuotaStore

from tests.helpers import HELLO_RESULT, gemini_envelope, gemini_provider, http_response


@pytest.fixture
def providers():
    return [gemini_provider("model-a"), gemini_provider("model-b")]


@pytest.fixture
def quota_store():
    return InMemoryQuotaStore()


@pytest.fixture
def fallback_engine(providers):
    return ProviderFallbackEngine(
        providers=providers, attempt_timeout=5, overall_timeout=10
    )


@pytest.fixture
def app(quota_store, fallback_engine):
    flask_app = FlaskEngine(
        quota_store=quota_store,
        fallback_engine=fallback_engine,
        use_prometheus=False,
    ).prepare_flask_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def provider_post():
    with mock.patch("eta_translator.core.fallback.requests.post") as post:
        post.return_value = http_response(200, gemini_envelope(HELLO_RESULT))
        yield post
