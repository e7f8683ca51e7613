"""Agent package entrypoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .graph import SolveOrchestrator

__all__ = ["SolveOrchestrator"]


def __getattr__(name: str) -> Any:
    if name == "SolveOrchestrator":
        from .graph import SolveOrchestrator

        return SolveOrchestrator
    raise AttributeError("module '{}' has no attribute '{}'".format(__name__, name))
