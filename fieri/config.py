"""Configuration needed to authorize against the API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit

from dotenv import find_dotenv, load_dotenv

from .errors import InvalidURLError


DEFAULT_BASE_URL = "https://api.openai.com/v1/"
ORGANIZATION_HEADER = "OpenAI-Organization"


def normalize_base_url(url: str) -> str:
    """Validate an absolute http(s) URL and make sure it ends with a slash.

    Without the trailing slash, joining ``models`` onto ``.../v1`` would
    silently replace the ``v1`` segment.
    """
    url = (url or "").strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURLError(f"Base URL must be an absolute http(s) URL, got {url!r}")
    if parts.query or parts.fragment:
        raise InvalidURLError(f"Base URL must not carry a query or fragment, got {url!r}")
    if not url.endswith("/"):
        url += "/"
    return url


@dataclass(frozen=True)
class Configuration:
    """Base URL, credentials and transport options for one Client.

    Instances are immutable; the ``with_*`` helpers return a new value.
    """

    api_key: str = ""
    organization: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    extra_headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    timeout: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "api_key", (self.api_key or "").strip())
        object.__setattr__(self, "organization", (self.organization or "").strip() or None)
        object.__setattr__(self, "base_url", normalize_base_url(self.base_url))
        object.__setattr__(self, "extra_headers", dict(self.extra_headers or {}))
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides) -> "Configuration":
        """Build a configuration from the environment.

        A ``.env`` file (by default the nearest one in or above the
        working directory) is loaded first, never overriding variables
        already set in the process. Recognised variables:

        - ``OPENAI_API_KEY``
        - ``OPENAI_ORGANIZATION`` (or ``OPENAI_ORG_ID``)
        - ``OPENAI_BASE_URL``
        - ``FIERI_TIMEOUT`` (seconds)

        Keyword overrides win over the environment.
        """
        if dotenv_path is None:
            dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)

        timeout = os.environ.get("FIERI_TIMEOUT", "").strip()
        values = {
            "api_key": os.environ.get("OPENAI_API_KEY", ""),
            "organization": os.environ.get("OPENAI_ORGANIZATION") or os.environ.get("OPENAI_ORG_ID"),
            "base_url": os.environ.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
            "timeout": float(timeout) if timeout else None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def headers(self) -> Dict[str, str]:
        """Headers sent with every request.

        Extra headers are applied first so they can never drop or replace the
        credential headers.
        """
        headers = dict(self.extra_headers)
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.organization:
            headers[ORGANIZATION_HEADER] = self.organization
        return headers

    def with_api_key(self, api_key: str) -> "Configuration":
        return replace(self, api_key=api_key)

    def with_organization(self, organization: str) -> "Configuration":
        return replace(self, organization=organization)

    def __repr__(self):
        return (
            f"Configuration(base_url={self.base_url!r}, api_key={'***' if self.api_key else None!r}, "
            f"organization={self.organization!r}, timeout={self.timeout!r})"
        )
