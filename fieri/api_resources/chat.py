"""
Chat completions.

Given a list of messages describing a conversation, the model returns a reply.

Usage::

    from fieri.api_resources.chat import ChatMessage, ChatParam, chat, chat_with_stream

    param = ChatParam(
        model="gpt-3.5-turbo",
        messages=[ChatMessage(role="user", content="Hello!")],
    )
    reply = chat(client, param)
    print(reply.choices[0].message.content)

    for chunk in chat_with_stream(client, param):
        print(chunk.choices[0].delta.content or "", end="")
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field

from ..core.client import Client
from ..core.stream import EventStream
from ..types import RequestModel, ResponseModel, TokenUsage


_NAME = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"

    def __str__(self):
        return self.value


class ChatMessage(RequestModel):
    role: ChatRole
    content: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def parse(cls, text: str, default_role: Union[ChatRole, str] = ChatRole.USER) -> "ChatMessage":
        """Parse the command-line form ``role:content[:name]``.

        Text without a known role prefix becomes the content of a
        ``default_role`` message. The trailing ``:name`` is only split off
        when it is a valid participant name, so content may contain colons.
        """
        head, sep, rest = text.partition(":")
        roles = {role.value for role in ChatRole}
        if not sep or head.strip().lower() not in roles:
            return cls(role=ChatRole(default_role), content=text)

        role = ChatRole(head.strip().lower())
        content, sep, name = rest.rpartition(":")
        if sep and _NAME.match(name):
            return cls(role=role, content=content, name=name)
        return cls(role=role, content=rest)


class ChatParam(RequestModel):
    model: str = "gpt-3.5-turbo"
    messages: List[ChatMessage] = Field(min_length=1)
    frequency_penalty: Optional[float] = None
    max_tokens: Optional[int] = None
    n: Optional[int] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    stop: Union[str, List[str], None] = None
    stream: Optional[bool] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    user: Optional[str] = None


class ChatResponseMessage(ResponseModel):
    role: Optional[str] = None
    content: Optional[str] = None
    name: Optional[str] = None


class ChatChoice(ResponseModel):
    index: int
    message: ChatResponseMessage
    finish_reason: Optional[str] = None


class Chat(ResponseModel):
    id: str
    object: str
    created: int
    model: Optional[str] = None
    choices: List[ChatChoice]
    usage: Optional[TokenUsage] = None


class ChatDelta(ResponseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class ChatChunkChoice(ResponseModel):
    index: int
    delta: ChatDelta
    finish_reason: Optional[str] = None


class ChatChunk(ResponseModel):
    """One streamed piece of a chat completion."""

    id: str
    object: str
    created: int
    model: Optional[str] = None
    choices: List[ChatChunkChoice]


def chat(client: Client, param: ChatParam) -> Chat:
    """Create a chat completion."""
    return client.post("chat/completions", param.model_copy(update={"stream": None}), response_type=Chat)


def chat_with_stream(client: Client, param: ChatParam) -> EventStream[ChatChunk]:
    """Create a chat completion and stream it back as it is generated."""
    return client.stream_events("POST", "chat/completions", param.model_copy(update={"stream": True}), ChatChunk)
