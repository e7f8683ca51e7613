"""Typed state and result contracts for the solve pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, TypedDict

from doodlesolve.llm.images import ImageReference


class SolveStatus(str, Enum):
    OK = "ok"
    NO_PROBLEM = "no_problem"
    ERROR = "error"


@dataclass(frozen=True)
class InterpretationResult:
    text: str


@dataclass(frozen=True)
class SolutionResult:
    """Outcome of one solve request handed to the presentation layer.

    Either `error` is set, or both `interpreted` and `solution` are; never
    both. Callers must check `is_error` before reading the solution fields.
    """

    status: SolveStatus
    interpreted: Optional[str] = None
    solution: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is SolveStatus.OK:
            if self.error is not None or self.interpreted is None or self.solution is None:
                raise ValueError("A successful result carries interpreted text and solution only.")
        else:
            if not self.error or self.interpreted is not None or self.solution is not None:
                raise ValueError("A failed result carries a non-empty error only.")

    @classmethod
    def success(cls, interpreted: str, solution: str) -> "SolutionResult":
        return cls(status=SolveStatus.OK, interpreted=interpreted, solution=solution)

    @classmethod
    def no_problem(cls, message: str) -> "SolutionResult":
        return cls(status=SolveStatus.NO_PROBLEM, error=message)

    @classmethod
    def failure(cls, message: str) -> "SolutionResult":
        return cls(status=SolveStatus.ERROR, error=message)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_error:
            return {"status": self.status.value, "error": self.error}
        return {"status": self.status.value, "interpreted": self.interpreted, "solution": self.solution}


class SolveState(TypedDict, total=False):
    image: ImageReference
    interpreted: str
    solution: str
    status: str
