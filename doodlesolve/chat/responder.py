"""Chat responder: knowledge table first, remote chat model second."""

from __future__ import annotations

import time
from typing import Dict, Mapping, Optional

from doodlesolve.chat.knowledge import KnowledgeTable
from doodlesolve.llm import GenerativeClient, RemoteUnavailable
from doodlesolve.utils.config_loader import AppConfig, render_prompt_template
from doodlesolve.utils.logger import get_logger

logger = get_logger("chat.responder")

EMPTY_REPLY_MESSAGE = (
    "# Error\nI apologize, but I'm having trouble processing your request right now. Please try again."
)
FAILURE_MESSAGE = (
    "# Technical Issue\nI'm sorry, I'm experiencing technical difficulties right now. "
    "Please try again later or contact the school directly for assistance."
)

_DEFAULT_SYSTEM = (
    "You are a helpful AI assistant for {{institution}}, created by {{creator}}.\n\n"
    "Available information:\n{{knowledge}}\n\n"
    "Help with academic and general knowledge questions when the information above does not cover them.\n"
    "Always format your response in markdown using # for main headings, ## for subheadings, "
    "**bold** for emphasis, *italic* for secondary emphasis, - for unordered lists and 1. for ordered lists."
)


class ChatResponder:
    """Answers one free-text message; `respond` always resolves to a displayable string."""

    def __init__(
        self,
        table: KnowledgeTable,
        llm_client: GenerativeClient,
        prompt_pack: Optional[Dict[str, str]] = None,
        persona: Optional[Mapping[str, str]] = None,
        static_first: bool = True,
    ) -> None:
        """Builds a responder around an injected chat client.

        Args:
            table: Static knowledge table.
            llm_client: Remote chat model client.
            prompt_pack: Chat prompt templates (`system`).
            persona: Values for persona placeholders in the system prompt.
            static_first: Answer table hits without calling the model.
        """
        self.table = table
        self.llm_client = llm_client
        self.prompt_pack = dict(prompt_pack or {})
        self.persona = dict(persona or {})
        self.static_first = static_first
        self._system_prompt = self._build_system_prompt()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        prompts: Dict[str, Dict[str, str]],
        table: KnowledgeTable,
        llm_client: Optional[GenerativeClient] = None,
    ) -> "ChatResponder":
        client = llm_client or GenerativeClient(config=config.chat_llm)
        return cls(
            table,
            client,
            prompt_pack=prompts.get("chat", {}),
            persona=config.chat.persona,
            static_first=config.chat.static_first,
        )

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def _build_system_prompt(self) -> str:
        context = dict(self.persona)
        context["knowledge"] = self.table.as_grounding()
        return render_prompt_template(self.prompt_pack.get("system", _DEFAULT_SYSTEM), context)

    async def respond(self, user_message: str) -> str:
        """Answers a chat message.

        Any failure of the remote call is absorbed. The table fallback after a
        failure can only hit when `static_first` is off, since otherwise the
        same partial match already ran before the call.

        Args:
            user_message: Raw text typed by the user.

        Returns:
            A canned answer, the model reply, or a fixed fallback message.
        """
        if self.static_first:
            answer = self.table.lookup(user_message)
            if answer is not None:
                logger.debug("Answered from knowledge table")
                return answer

        started = time.perf_counter()
        try:
            reply = await self.llm_client.complete(self._system_prompt, user_message)
        except Exception as exc:
            if isinstance(exc, RemoteUnavailable):
                logger.warning("Chat model unavailable, falling back to knowledge table: %s", exc)
            else:
                logger.error("Chat model call failed unexpectedly: %s", exc, exc_info=True)
            fallback = self.table.partial_match(user_message)
            if fallback is not None:
                logger.info("Answered from knowledge table after remote failure")
                return fallback
            return FAILURE_MESSAGE

        logger.debug("Chat model replied in %.3fs", time.perf_counter() - started)
        if not (reply or "").strip():
            return EMPTY_REPLY_MESSAGE
        return reply
