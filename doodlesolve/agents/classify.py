"""Classification of interpreter and solver output into solve outcomes."""

from __future__ import annotations

from typing import Optional

from doodlesolve.agents.state import SolutionResult

# Wire constant agreed with the interpreter prompt; compare only through
# `is_no_problem_sentinel`.
NO_PROBLEM_SENTINEL = "No equation found"

NO_PROBLEM_MESSAGE = "Could not recognize an equation. Please draw more clearly."
ERROR_MESSAGE_TEMPLATE = "An error occurred during processing: {}"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class NoProblemDetected(Exception):
    """Raised when a transcription is empty or carries the no-problem sentinel."""

    def __init__(self, transcription: str = "") -> None:
        super().__init__(NO_PROBLEM_MESSAGE)
        self.transcription = transcription


def is_no_problem_sentinel(text: Optional[str]) -> bool:
    """Checks whether a transcription means "nothing to solve".

    Empty text counts as no problem. The sentinel matches case-insensitively
    anywhere in the text, since models often wrap it in punctuation or quotes.
    """
    normalized = (text or "").strip().lower()
    if not normalized:
        return True
    return NO_PROBLEM_SENTINEL.lower() in normalized


def ensure_problem(text: Optional[str]) -> str:
    """Returns the trimmed transcription or raises `NoProblemDetected`."""
    if is_no_problem_sentinel(text):
        raise NoProblemDetected(text or "")
    return (text or "").strip()


def classify_exception(exc: BaseException) -> SolutionResult:
    """Maps a stage failure to the typed result shown to the user."""
    if isinstance(exc, NoProblemDetected):
        return SolutionResult.no_problem(NO_PROBLEM_MESSAGE)
    message = str(exc).strip() or UNEXPECTED_ERROR_MESSAGE
    return SolutionResult.failure(ERROR_MESSAGE_TEMPLATE.format(message))
