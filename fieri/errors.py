"""
Exceptions raised by fieri.

Every error the library surfaces derives from ``ClientError``. Nothing is
retried or recovered locally; callers decide what to do with each kind.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union


_EXCERPT_LIMIT = 512


def excerpt(body: Union[bytes, str, None], limit: int = _EXCERPT_LIMIT) -> str:
    """Short, printable summary of a response body for error messages."""
    if body is None:
        return ""
    if isinstance(body, bytes):
        text = body.decode("utf-8", errors="replace")
    else:
        text = body
    if len(text) <= limit:
        return text
    return text[:limit] + f"... ({len(text) - limit} more chars)"


class ClientError(Exception):
    """Base exception for everything raised by the library."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


# =============================================================================
# Transport
# =============================================================================

class APIConnectionError(ClientError):
    """Raised when the HTTP transport fails (DNS, refused connection, TLS...)."""
    pass


class APITimeoutError(APIConnectionError):
    """Raised when the transport's configured timeout expires."""
    pass


# =============================================================================
# Programmer errors
# =============================================================================

class InvalidURLError(ClientError, ValueError):
    """Raised for a malformed base URL or resource path."""
    pass


class SerializationError(ClientError, TypeError):
    """Raised when a request parameter cannot be encoded."""
    pass


# =============================================================================
# Response decoding
# =============================================================================

class DecodeError(ClientError):
    """Raised when a body matches neither the success nor the error shape."""

    def __init__(self, message: str, status_code: int = None, body: Union[bytes, str, None] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        text = self.message
        if self.status_code:
            text = f"[{self.status_code}] {text}"
        if self.body:
            text = f"{text}: {excerpt(self.body)}"
        return text


# =============================================================================
# API errors
# =============================================================================

class APIError(ClientError):
    """Failure reported by the remote API itself."""

    def __init__(
        self,
        message: str,
        type: Optional[str] = None,
        param: Optional[str] = None,
        code: Union[int, str, None] = None,
        status_code: int = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.type = type
        self.param = param
        self.code = code
        self.status_code = status_code
        self.body = body

    def __str__(self):
        text = self.message
        if self.type:
            text = f"{self.type}: {text}"
        if self.status_code:
            text = f"[{self.status_code}] {text}"
        return text

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(message={self.message!r}, type={self.type!r}, "
            f"param={self.param!r}, code={self.code!r}, status_code={self.status_code!r})"
        )

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "type": self.type,
            "param": self.param,
            "code": self.code,
        }


class BadRequestError(APIError):
    """Raised for 400 errors."""
    pass


class AuthenticationError(APIError):
    """Raised for 401 errors."""
    pass


class PermissionDeniedError(APIError):
    """Raised for 403 errors."""
    pass


class NotFoundError(APIError):
    """Raised for 404 errors."""
    pass


class ConflictError(APIError):
    """Raised for 409 errors."""
    pass


class UnprocessableEntityError(APIError):
    """Raised for 422 errors."""
    pass


class RateLimitError(APIError):
    """Raised for 429 errors."""
    pass


class InternalServerError(APIError):
    """Raised for 500+ errors."""
    pass


_STATUS_ERRORS: Dict[int, Type[APIError]] = {
    400: BadRequestError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}


def api_error_class(status_code: Optional[int]) -> Type[APIError]:
    """Pick the APIError subclass matching an HTTP status.

    Errors embedded in a 2xx body (or in a stream frame) stay plain APIError.
    """
    if status_code is None:
        return APIError
    if status_code >= 500:
        return InternalServerError
    return _STATUS_ERRORS.get(status_code, APIError)
