"""
Typed envelope decoding.

Every endpoint answers with one JSON document that is either the expected
payload or a structured error, and several endpoints report errors with a
200 status. Decoding therefore never trusts the status code: the body is
parsed once and matched against the error shapes first, then against the
expected type. A body matching neither is a ``DecodeError``.

Error shapes accepted (the API has used all of them over time)::

    {"error": {"message": "...", "type": "...", "param": null, "code": null}}
    {"error": "..."}
    {"message": "...", "type": "...", "param": null, "code": null}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, Optional, Type, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from ..errors import APIError, DecodeError, api_error_class


T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    """Success variant of the envelope."""

    value: T


@dataclass(frozen=True)
class Invalid:
    """Error variant of the envelope."""

    error: APIError


Envelope = Union[Valid[T], Invalid]


@lru_cache(maxsize=256)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def parse_json(body: Union[bytes, str], status_code: int = None) -> Any:
    """Parse raw bytes into an untyped JSON value."""
    try:
        return json.loads(body)
    except (ValueError, TypeError) as exc:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise DecodeError(f"Response is not valid JSON ({exc})", status_code=status_code, body=body) from exc


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _optional_code(value: Any) -> Union[int, str, None]:
    if value is None or (isinstance(value, (int, str)) and not isinstance(value, bool)):
        return value
    return str(value)


def match_error(value: Any, status_code: int = None, body: Any = None) -> Optional[APIError]:
    """Return an APIError when ``value`` has one of the error shapes, else None."""
    if not isinstance(value, dict):
        return None

    error_class = api_error_class(status_code)
    nested = value.get("error")

    if isinstance(nested, dict):
        message = nested.get("message")
        if isinstance(message, str) and "type" in nested:
            return error_class(
                message=message,
                type=_optional_str(nested.get("type")),
                param=_optional_str(nested.get("param")),
                code=_optional_code(nested.get("code")),
                status_code=status_code,
                body=body,
            )
        return None

    if isinstance(nested, str):
        return error_class(message=nested, status_code=status_code, body=body)

    if isinstance(value.get("message"), str) and isinstance(value.get("type"), str):
        return error_class(
            message=value["message"],
            type=value["type"],
            param=_optional_str(value.get("param")),
            code=_optional_code(value.get("code")),
            status_code=status_code,
            body=body,
        )

    return None


def validate(value: Any, response_type: Type[T], status_code: int = None, body: Any = None) -> T:
    """Validate an already-parsed JSON value as ``response_type``."""
    try:
        return _adapter(response_type).validate_python(value)
    except ValidationError as exc:
        name = getattr(response_type, "__name__", repr(response_type))
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()[:5]
        )
        raise DecodeError(
            f"Response matches neither the error shape nor {name} ({reason})",
            status_code=status_code,
            body=body,
        ) from exc


def decode_value(value: Any, response_type: Type[T], status_code: int = None, body: Any = None) -> Envelope:
    """Discriminate an already-parsed value: error shape first, then ``response_type``."""
    error = match_error(value, status_code=status_code, body=body)
    if error is not None:
        return Invalid(error)
    return Valid(validate(value, response_type, status_code=status_code, body=body))


def decode_envelope(body: Union[bytes, str], response_type: Type[T], status_code: int = None) -> Envelope:
    """Parse ``body`` once and return ``Valid(T)`` or ``Invalid(APIError)``.

    Raises DecodeError when the body is not JSON or matches neither shape.
    """
    value = parse_json(body, status_code=status_code)
    return decode_value(value, response_type, status_code=status_code, body=body)


def decode(body: Union[bytes, str], response_type: Type[T], status_code: int = None) -> T:
    """Like ``decode_envelope`` but raise the APIError of an ``Invalid`` envelope."""
    envelope = decode_envelope(body, response_type, status_code=status_code)
    if isinstance(envelope, Invalid):
        raise envelope.error
    return envelope.value
