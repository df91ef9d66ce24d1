"""Edits: rewrite an input following an instruction."""

from __future__ import annotations

from typing import List, Optional

from ..core.client import Client
from ..types import Choice, RequestModel, ResponseModel, TokenUsage


class EditParam(RequestModel):
    model: str
    instruction: str
    input: Optional[str] = None
    n: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None


class Edit(ResponseModel):
    object: str
    created: int
    choices: List[Choice]
    usage: Optional[TokenUsage] = None


def create(client: Client, param: EditParam) -> Edit:
    return client.post("edits", param, response_type=Edit)
