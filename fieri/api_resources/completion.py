"""
Text completions.

Given a prompt, the model returns one or more predicted completions.
"""

from __future__ import annotations

from typing import List, Optional, Union

from ..core.client import Client
from ..core.stream import EventStream
from ..types import Choice, RequestModel, ResponseModel, TokenUsage


class CompletionParam(RequestModel):
    model: str
    prompt: Union[str, List[str], None] = None
    suffix: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    stream: Optional[bool] = None
    logprobs: Optional[int] = None
    echo: Optional[bool] = None
    stop: Union[str, List[str], None] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    best_of: Optional[int] = None
    user: Optional[str] = None


class Completion(ResponseModel):
    id: str
    object: str
    created: int
    model: str
    choices: List[Choice]
    usage: Optional[TokenUsage] = None


def create(client: Client, param: CompletionParam) -> Completion:
    """Create a completion for the provided prompt."""
    return client.post("completions", param.model_copy(update={"stream": None}), response_type=Completion)


def create_with_stream(client: Client, param: CompletionParam) -> EventStream[Completion]:
    """Create a completion and stream back partial progress.

    Each event is a ``Completion`` carrying the newly generated text only.
    """
    return client.stream_events("POST", "completions", param.model_copy(update={"stream": True}), Completion)
