"""
Models shared by several endpoints.

Request models reject unknown fields so a typo fails at construction instead
of being silently dropped by the API. Response models keep any field the API
adds later (reachable through ``model_extra``).
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    """Base class for request parameters."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, use_enum_values=True)


class ResponseModel(BaseModel):
    """Base class for decoded response payloads."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TokenUsage(ResponseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Choice(ResponseModel):
    """One generated alternative of a completion or an edit."""

    text: Optional[str] = None
    index: Optional[int] = None
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


class Delete(ResponseModel):
    id: str
    object: str = ""
    deleted: bool
