"""In-memory chat history for one interactive session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Tuple

from doodlesolve.chat.responder import ChatResponder


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str


class ChatSession:
    """Keeps the turns of one chat view.

    History is only for display; each message is answered on its own and
    nothing is persisted.
    """

    def __init__(self, responder: ChatResponder) -> None:
        self.responder = responder
        self._messages: List[ChatMessage] = []

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    async def send(self, text: str) -> ChatMessage:
        self._messages.append(ChatMessage(role="user", content=text))
        reply = ChatMessage(role="assistant", content=await self.responder.respond(text))
        self._messages.append(reply)
        return reply

    def clear(self) -> None:
        self._messages.clear()
