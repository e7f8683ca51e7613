"""Static knowledge table answering canned questions without a model call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True)
class KnowledgeEntry:
    trigger: str
    canonical_answer: str


def normalize_message(message: str) -> str:
    return (message or "").strip().lower()


class KnowledgeTable:
    """Ordered, read-only mapping of trigger phrases to canned answers.

    Declaration order is the tie-break for partial matches: the first entry
    whose trigger overlaps the message wins, so shorter, more general
    triggers should be listed first.
    """

    def __init__(self, entries: Iterable[Tuple[str, str]]) -> None:
        table: Dict[str, KnowledgeEntry] = {}
        for trigger, answer in entries:
            key = normalize_message(trigger)
            if not key:
                raise ValueError("Knowledge triggers must be non-empty.")
            if key in table:
                raise ValueError("Duplicate knowledge trigger '{}'".format(key))
            table[key] = KnowledgeEntry(trigger=key, canonical_answer=str(answer))
        self._entries = table

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KnowledgeEntry]:
        return iter(self._entries.values())

    def exact_match(self, message: str) -> Optional[str]:
        entry = self._entries.get(normalize_message(message))
        return entry.canonical_answer if entry else None

    def partial_match(self, message: str) -> Optional[str]:
        """Returns the first entry, in table order, overlapping the message.

        An entry overlaps when the normalized message contains its trigger
        or the trigger contains the normalized message.
        """
        normalized = normalize_message(message)
        for entry in self._entries.values():
            if entry.trigger in normalized or normalized in entry.trigger:
                return entry.canonical_answer
        return None

    def lookup(self, message: str) -> Optional[str]:
        """Answers from the table: exact trigger first, then partial match."""
        answer = self.exact_match(message)
        if answer is not None:
            return answer
        return self.partial_match(message)

    def as_grounding(self) -> str:
        """Renders every entry as an inline instruction for the chat system prompt."""
        return "\n".join('- When asked "{}": {}'.format(e.trigger, e.canonical_answer) for e in self)
