"""Free-form chat answered from the knowledge table or the remote chat model."""

from .knowledge import KnowledgeEntry, KnowledgeTable
from .responder import ChatResponder
from .session import ChatMessage, ChatSession

__all__ = ["KnowledgeEntry", "KnowledgeTable", "ChatResponder", "ChatMessage", "ChatSession"]
