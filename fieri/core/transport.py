"""
HTTP transport plumbing on top of ``requests``.

Builds the session a Client owns, joins resource paths onto the base URL,
encodes request parameters and maps ``requests`` failures onto fieri errors.
"""

from __future__ import annotations

import json
import mimetypes
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin, urlsplit

import requests
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from .. import __version__
from ..config import Configuration
from ..errors import APIConnectionError, APITimeoutError, InvalidURLError, SerializationError


USER_AGENT = f"fieri-python/{__version__}"

Param = Union[BaseModel, Mapping[str, Any], None]


def session_headers(config: Configuration) -> Dict[str, str]:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    headers.update(config.headers())
    return headers


def build_session(config: Configuration) -> requests.Session:
    """Create a session whose default headers are derived from ``config``."""
    session = requests.Session()
    session.headers.clear()
    session.headers.update(session_headers(config))
    return session


def join_url(base_url: str, path: str) -> str:
    """Join a relative resource path onto the base URL.

    Anything that would make ``urljoin`` discard part of the base URL is
    rejected instead of silently producing a different endpoint.
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidURLError(f"Resource path must be a non-empty string, got {path!r}")
    parts = urlsplit(path)
    if parts.scheme or parts.netloc or path.startswith("//"):
        raise InvalidURLError(f"Resource path must be relative, got {path!r}")
    if path.startswith("/"):
        raise InvalidURLError(f"Resource path must not start with '/', got {path!r}")
    if any(segment in (".", "..") for segment in parts.path.split("/")):
        raise InvalidURLError(f"Resource path must not contain dot segments, got {path!r}")
    if any(ch.isspace() for ch in path):
        raise InvalidURLError(f"Resource path must not contain whitespace, got {path!r}")
    return urljoin(base_url, path)


# =============================================================================
# Parameter encoding
# =============================================================================

def to_payload(param: Param) -> Optional[Dict[str, Any]]:
    """Turn a parameter value into a plain JSON-compatible dict."""
    if param is None:
        return None
    if isinstance(param, BaseModel):
        try:
            return param.model_dump(mode="json", by_alias=True, exclude_none=True)
        except PydanticSerializationError as exc:
            raise SerializationError(f"Cannot serialize {type(param).__name__}: {exc}") from exc
    if isinstance(param, Mapping):
        return {str(k): v for k, v in param.items() if v is not None}
    raise SerializationError(f"Unsupported parameter type {type(param).__name__}")


def encode_json(param: Param) -> Optional[bytes]:
    payload = to_payload(param)
    if payload is None:
        return None
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Parameter is not JSON serializable: {exc}") from exc


def _query_scalar(key: str, value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise SerializationError(f"Query parameter {key!r} has unsupported type {type(value).__name__}")


def encode_query(param: Param) -> List[Tuple[str, str]]:
    """Flatten a parameter into query pairs; lists repeat the key."""
    payload = to_payload(param)
    if not payload:
        return []
    pairs = []
    for key, value in payload.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_scalar(key, item)) for item in value)
        else:
            pairs.append((key, _query_scalar(key, value)))
    return pairs


# =============================================================================
# Multipart forms
# =============================================================================

@dataclass
class FilePart:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class MultipartForm:
    """A multipart/form-data body: named binary parts plus text fields."""

    files: Dict[str, FilePart] = field(default_factory=dict)
    fields: Dict[str, str] = field(default_factory=dict)

    def part(self, name: str, content: bytes, filename: str, content_type: str = None) -> "MultipartForm":
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        self.files[name] = FilePart(filename=filename, content=content, content_type=content_type)
        return self

    def file(self, name: str, path: Union[str, os.PathLike]) -> "MultipartForm":
        """Read ``path`` from disk into a binary part."""
        with open(path, "rb") as f:
            content = f.read()
        return self.part(name, content, os.path.basename(os.fspath(path)))

    def text(self, name: str, value: Any) -> "MultipartForm":
        if value is not None:
            self.fields[name] = _query_scalar(name, value)
        return self

    def requests_files(self) -> Dict[str, Tuple[str, bytes, str]]:
        return {name: (p.filename, p.content, p.content_type) for name, p in self.files.items()}


# =============================================================================
# Error translation
# =============================================================================

@contextmanager
def translate_errors(method: str, url: str) -> Iterator[None]:
    """Map ``requests`` exceptions raised inside the block onto fieri errors."""
    try:
        yield
    except requests.exceptions.Timeout as exc:
        raise APITimeoutError(f"{method} {url} timed out: {exc}") from exc
    except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as exc:
        raise InvalidURLError(f"Invalid request URL {url!r}: {exc}") from exc
    except requests.exceptions.RequestException as exc:
        raise APIConnectionError(f"Connection error on {method} {url}: {exc}") from exc
