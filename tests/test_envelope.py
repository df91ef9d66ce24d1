import json
from typing import Any

import pytest

from fieri.api_resources.model import Model
from fieri.core.envelope import Invalid, Valid, decode, decode_envelope, match_error
from fieri.errors import (
    APIError,
    AuthenticationError,
    BadRequestError,
    DecodeError,
    InternalServerError,
    NotFoundError,
    RateLimitError,
)
from fieri.types import Choice, Delete


def dumps(value):
    return json.dumps(value).encode("utf-8")


def test_success_body_decodes_to_valid():
    envelope = decode_envelope(dumps({"id": "text-babbage-001", "object": "model"}), Model)
    assert isinstance(envelope, Valid)
    assert envelope.value.id == "text-babbage-001"


def test_nested_error_wins_over_permissive_type():
    body = dumps({"error": {"message": "boom", "type": "server_error", "param": None, "code": None}})
    envelope = decode_envelope(body, Choice)
    assert isinstance(envelope, Invalid)
    assert envelope.error.message == "boom"
    assert envelope.error.type == "server_error"


def test_error_wins_even_with_any_type():
    with pytest.raises(APIError) as info:
        decode(dumps({"error": {"message": "nope", "type": "invalid_request_error"}}), Any)
    assert info.value.message == "nope"


def test_legacy_string_error():
    envelope = decode_envelope(dumps({"error": "Invalid API key"}), Choice)
    assert isinstance(envelope, Invalid)
    assert envelope.error.message == "Invalid API key"
    assert envelope.error.type is None


def test_legacy_top_level_error():
    body = dumps({"message": "bad", "type": "invalid_request_error", "param": "model", "code": 42})
    envelope = decode_envelope(body, Choice)
    assert isinstance(envelope, Invalid)
    assert envelope.error.param == "model"
    assert envelope.error.code == 42


def test_error_keeps_status_and_body():
    body = dumps({"error": {"message": "x", "type": "invalid_request_error", "code": "model_not_found"}})
    with pytest.raises(NotFoundError) as info:
        decode(body, Model, status_code=404)
    assert info.value.status_code == 404
    assert info.value.code == "model_not_found"
    assert info.value.body == body


@pytest.mark.parametrize(
    "status, error_class",
    [
        (400, BadRequestError),
        (401, AuthenticationError),
        (429, RateLimitError),
        (503, InternalServerError),
        (200, APIError),
        (418, APIError),
    ],
)
def test_error_class_follows_status(status, error_class):
    with pytest.raises(error_class):
        decode(dumps({"error": {"message": "m", "type": "t"}}), Model, status_code=status)


def test_structurally_wrong_body_is_decode_error():
    with pytest.raises(DecodeError) as info:
        decode(dumps({"object": "model"}), Model, status_code=200)
    assert info.value.status_code == 200
    assert "id" in str(info.value)


def test_unrelated_object_never_yields_default_value():
    with pytest.raises(DecodeError):
        decode(dumps({"foo": "bar"}), Delete)


def test_non_json_body():
    with pytest.raises(DecodeError) as info:
        decode(b"<html>502 Bad Gateway</html>", Model, status_code=502)
    assert "502 Bad Gateway" in str(info.value)


def test_decode_error_body_excerpt_is_bounded():
    body = b"x" * 5000
    with pytest.raises(DecodeError) as info:
        decode(body, Model)
    assert len(str(info.value)) < 1000


def test_nested_error_without_type_is_not_an_error_shape():
    assert match_error({"error": {"message": "only message"}}) is None


def test_non_object_values_are_not_errors():
    assert match_error([1, 2]) is None
    assert match_error("error") is None
