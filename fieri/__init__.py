"""
fieri - a typed client for the OpenAI HTTP API.

Usage::

    from fieri import Client
    from fieri.api_resources import chat

    client = Client.from_credentials("sk-...")
    param = chat.ChatParam(model="gpt-3.5-turbo", messages=[chat.ChatMessage(role="user", content="Hello!")])
    print(chat.chat(client, param).choices[0].message.content)
"""

__version__ = "0.6.0"

from .config import DEFAULT_BASE_URL, Configuration
from .core.client import Client
from .core.envelope import Invalid, Valid, decode, decode_envelope
from .core.stream import EventStream, StreamState
from .errors import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    ClientError,
    ConflictError,
    DecodeError,
    InternalServerError,
    InvalidURLError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    SerializationError,
    UnprocessableEntityError,
)

__all__ = [
    "__version__",
    "Client",
    "Configuration",
    "DEFAULT_BASE_URL",
    "EventStream",
    "StreamState",
    "Valid",
    "Invalid",
    "decode",
    "decode_envelope",
    "ClientError",
    "APIConnectionError",
    "APITimeoutError",
    "InvalidURLError",
    "SerializationError",
    "DecodeError",
    "APIError",
    "BadRequestError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "RateLimitError",
    "InternalServerError",
]
