import json

import pytest

from eta_translator.core.errors import (
    MethodNotAllowed,
    UnsupportedMediaType,
    InvalidPayload,
    MissingInput,
    InputTooLarge,
)
from eta_translator.core.validator import RequestValidator

JSON_HEADERS = {"Content-Type": "application/json"}


@pytest.fixture
def validator():
    return RequestValidator(
        max_text_length=2000, default_source="auto", default_target="vi"
    )


def _body(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_options_is_preflight(validator):
    assert validator.is_preflight("OPTIONS") is True
    assert validator.is_preflight("post") is False


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
def test_other_methods_are_rejected(validator, method):
    with pytest.raises(MethodNotAllowed):
        validator.is_preflight(method)


def test_defaults_are_applied(validator):
    request = validator.validate(JSON_HEADERS, _body({"text": "  Hello  "}))

    assert request.text == "Hello"
    assert request.source == "auto"
    assert request.target == "vi"


def test_languages_are_normalized(validator):
    request = validator.validate(
        JSON_HEADERS, _body({"text": "Hi", "source": " EN ", "target": "Vi"})
    )

    assert request.source == "en"
    assert request.target == "vi"


def test_blank_languages_fall_back_to_defaults(validator):
    request = validator.validate(
        JSON_HEADERS, _body({"text": "Hi", "source": "", "target": "   "})
    )

    assert (request.source, request.target) == ("auto", "vi")


def test_content_type_with_charset_is_accepted(validator):
    headers = {"Content-Type": "application/json; charset=utf-8"}
    assert validator.validate(headers, _body({"text": "Hi"})).text == "Hi"


@pytest.mark.parametrize("content_type", [None, "text/plain", "multipart/form-data"])
def test_non_json_content_type(validator, content_type):
    headers = {} if content_type is None else {"Content-Type": content_type}
    with pytest.raises(UnsupportedMediaType):
        validator.validate(headers, _body({"text": "Hi"}))


def test_invalid_json_carries_parser_message(validator):
    with pytest.raises(InvalidPayload) as e:
        validator.validate(JSON_HEADERS, b"{not json")

    assert e.value.message


def test_empty_body_is_invalid_payload(validator):
    with pytest.raises(InvalidPayload):
        validator.validate(JSON_HEADERS, b"")


@pytest.mark.parametrize(
    "payload", [{}, {"text": ""}, {"text": "   \n\t"}, {"text": None}, [1, 2], "x"]
)
def test_missing_text(validator, payload):
    with pytest.raises(MissingInput):
        validator.validate(JSON_HEADERS, _body(payload))


def test_non_string_text_is_coerced(validator):
    assert validator.validate(JSON_HEADERS, _body({"text": 42})).text == "42"


def test_length_boundary(validator):
    assert len(validator.validate(JSON_HEADERS, _body({"text": "a" * 2000})).text) == 2000

    with pytest.raises(InputTooLarge):
        validator.validate(JSON_HEADERS, _body({"text": "a" * 2001}))


def test_length_is_measured_after_trimming(validator):
    text = "  " + "a" * 2000 + "  "
    assert len(validator.validate(JSON_HEADERS, _body({"text": text})).text) == 2000
