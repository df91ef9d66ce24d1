"""
The Client used to establish a connection and interact with the API.

Usage::

    from fieri import Client

    client = Client()                                   # reads OPENAI_API_KEY / .env
    client = Client.from_credentials("sk-...", organization="org-...")
    client = client.with_api_key("sk-other")            # new Client, new session

Every endpoint goes through the same small set of dispatch methods::

    model = client.get("models/text-babbage-001", response_type=Model)
    chat = client.post("chat/completions", param, response_type=Chat)
    response = client.stream("POST", "completions", param)
"""

from __future__ import annotations

from typing import Any, Type, TypeVar

import requests
import structlog

from ..config import DEFAULT_BASE_URL, Configuration
from ..errors import api_error_class
from .envelope import decode
from .stream import EventStream
from .transport import (
    MultipartForm,
    Param,
    build_session,
    encode_json,
    encode_query,
    join_url,
    translate_errors,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")

_QUERY_METHODS = ("GET", "DELETE", "HEAD")


class Client:
    """Owns a configuration and the HTTP session built from it.

    A Client is never mutated after construction. Changing credentials with
    ``with_api_key`` / ``with_organization`` returns a new Client whose
    session carries the new default headers, so concurrent calls on the old
    Client are unaffected.
    """

    __slots__ = ("_config", "_session")

    def __init__(self, config: Configuration = None):
        if config is None:
            config = Configuration.from_env()
        self._config = config
        self._session = build_session(config)

    @classmethod
    def from_credentials(
        cls,
        api_key: str,
        organization: str = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = None,
    ) -> "Client":
        """Create a Client from raw credentials, without reading the environment."""
        return cls(Configuration(api_key=api_key, organization=organization, base_url=base_url, timeout=timeout))

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def session(self) -> requests.Session:
        return self._session

    def with_api_key(self, api_key: str) -> "Client":
        """Return a new Client authorized with ``api_key``."""
        return Client(self._config.with_api_key(api_key))

    def with_organization(self, organization: str) -> "Client":
        """Return a new Client scoped to ``organization``.

        For users who belong to multiple organizations.
        """
        return Client(self._config.with_organization(organization))

    def url(self, path: str) -> str:
        return join_url(self._config.base_url, path)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _send(self, method: str, path: str, param: Param = None, stream: bool = False, **kwargs) -> requests.Response:
        method = method.upper()
        url = self.url(path)

        if "files" not in kwargs:
            if method in _QUERY_METHODS:
                kwargs["params"] = encode_query(param)
            else:
                body = encode_json(param)
                if body is not None:
                    kwargs["data"] = body
                    kwargs["headers"] = {"Content-Type": "application/json"}

        if stream:
            kwargs.setdefault("headers", {})["Accept"] = "text/event-stream"

        with translate_errors(method, url):
            response = self._session.request(
                method,
                url,
                stream=stream,
                timeout=self._config.timeout,
                **kwargs,
            )
        logger.debug("api_request", method=method, url=url, status=response.status_code, stream=stream)
        return response

    def _read(self, method: str, response: requests.Response) -> bytes:
        with translate_errors(method, response.url):
            return response.content

    def request(self, method: str, path: str, param: Param = None, response_type: Type[T] = Any) -> T:
        """Send one request and decode the body as ``response_type``.

        GET and DELETE send ``param`` as a query string, other methods as a
        JSON body. The body always goes through the envelope decoder, whatever
        the HTTP status.
        """
        response = self._send(method, path, param)
        return decode(self._read(method, response), response_type, status_code=response.status_code)

    def get(self, path: str, param: Param = None, response_type: Type[T] = Any) -> T:
        return self.request("GET", path, param, response_type)

    def post(self, path: str, param: Param = None, response_type: Type[T] = Any) -> T:
        return self.request("POST", path, param, response_type)

    def delete(self, path: str, param: Param = None, response_type: Type[T] = Any) -> T:
        return self.request("DELETE", path, param, response_type)

    def multipart(self, path: str, form: MultipartForm, response_type: Type[T] = Any) -> T:
        """POST a multipart form and decode the body as ``response_type``."""
        response = self._send("POST", path, files=form.requests_files(), data=form.fields)
        return decode(self._read("POST", response), response_type, status_code=response.status_code)

    def _raise_for_status(self, response: requests.Response, content: bytes) -> None:
        """Raise for an error status even when the body is not an error shape."""
        decode(content, Any, status_code=response.status_code)
        raise api_error_class(response.status_code)(
            f"HTTP {response.status_code} with a non-error body",
            status_code=response.status_code,
            body=content,
        )

    def get_bytes(self, path: str, param: Param = None) -> bytes:
        """GET a raw (non-JSON) resource such as file contents.

        Error statuses always raise, as the decoded API error when the body
        has one.
        """
        response = self._send("GET", path, param)
        content = self._read("GET", response)
        if response.status_code >= 400:
            self._raise_for_status(response, content)
        return content

    def stream(self, method: str, path: str, param: Param = None) -> requests.Response:
        """Send one request and return the still-open response.

        An error status is read and raised right away, since an error body is
        never an event stream.
        """
        response = self._send(method, path, param, stream=True)
        if response.status_code >= 400:
            try:
                content = self._read(method, response)
            finally:
                response.close()
            self._raise_for_status(response, content)
        return response

    def stream_events(self, method: str, path: str, param: Param = None, response_type: Type[T] = Any) -> EventStream[T]:
        """``stream`` followed by event decoding as ``response_type``."""
        return EventStream.from_response(self.stream(method, path, param), response_type)

    def close(self):
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self):
        return f"Client(config={self._config!r})"
