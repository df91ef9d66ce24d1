from __future__ import annotations

from typing import Dict, Generator, List, Optional

import structlog

from ..api_resources.chat import ChatMessage, ChatParam, ChatRole, chat, chat_with_stream
from .client import Client


logger = structlog.get_logger(__name__)


class Conversation:
    """Keeps the message history of one chat session"""

    def __init__(self, client: Client, model: str = "gpt-3.5-turbo", system: Optional[str] = None, **options):
        self.client = client
        self.model = model
        self.system = system
        self.options = options
        self.reset()

    def reset(self):
        if self.system:
            self.history: List[ChatMessage] = [ChatMessage(role=ChatRole.SYSTEM, content=self.system)]
        else:
            self.history = []

    def set_model(self, model: str):
        """Switch the model used for the next turns; history is kept."""
        self.model = model

    def _param(self) -> ChatParam:
        return ChatParam(model=self.model, messages=list(self.history), **self.options)

    def send(self, text: str) -> str:
        """Send one user turn and return the assistant's reply."""
        self.history.append(ChatMessage(role=ChatRole.USER, content=text))
        try:
            response = chat(self.client, self._param())
        except Exception:
            self.history.pop()
            raise

        reply = (response.choices[0].message.content or "") if response.choices else ""
        self.history.append(ChatMessage(role=ChatRole.ASSISTANT, content=reply))
        return reply

    def stream(self, text: str) -> Generator[str, None, None]:
        """Send one user turn and yield the reply as it is generated.

        The assembled reply joins the history only once the stream finished
        without error; on failure the user turn is dropped again.
        """
        self.history.append(ChatMessage(role=ChatRole.USER, content=text))
        parts = []
        try:
            with chat_with_stream(self.client, self._param()) as events:
                for chunk in events:
                    if not chunk.choices:
                        continue
                    content = chunk.choices[0].delta.content
                    if content:
                        parts.append(content)
                        yield content
        except BaseException:
            self.history.pop()
            raise

        self.history.append(ChatMessage(role=ChatRole.ASSISTANT, content="".join(parts)))
        logger.debug("conversation_turn", model=self.model, turns=len(self.history))

    def messages(self) -> List[Dict[str, str]]:
        return [m.model_dump(exclude_none=True) for m in self.history]
