"""Solving stage: produces Markdown/LaTeX solutions from text or the raw drawing."""

from __future__ import annotations

import time
from typing import Dict, Optional

from doodlesolve.agents.classify import NO_PROBLEM_SENTINEL
from doodlesolve.llm import GenerativeClient, ImageReference
from doodlesolve.llm.schemas import CombinedSolutionPayload, SolutionPayload
from doodlesolve.utils.config_loader import render_prompt_template
from doodlesolve.utils.logger import get_logger

logger = get_logger("nodes.solver")

_DEFAULT_TEXT_SYSTEM = "You are an expert mathematician."
_DEFAULT_TEXT_USER = (
    "Solve the following equation and provide the solution in LaTeX format, including all steps. "
    "Return ONLY JSON: {\"solutionLaTeX\": string}.\n\nEquation: {{problem}}"
)
_DEFAULT_COMBINED_SYSTEM = (
    "You are a world-class mathematician and physics expert with a talent for clear, scientific communication."
)
_DEFAULT_COMBINED_USER = (
    "Solve the math problem in the image. Keep simple problems short; give complex ones "
    "'## Analysis', '## Derivation' and '## Conclusion' sections. Use LaTeX ($...$) for all math. "
    "If the image holds no problem, set interpretedText to '{{sentinel}}'. "
    "Return ONLY JSON: {\"interpretedText\": string, \"solution\": string}."
)


class EquationSolver:
    """Asks the model for a step-by-step solution.

    The returned markup is passed through untouched; LaTeX is neither
    rendered nor validated here.
    """

    def __init__(
        self,
        llm_client: GenerativeClient,
        prompt_pack: Optional[Dict[str, str]] = None,
        combined_prompt_pack: Optional[Dict[str, str]] = None,
    ) -> None:
        self.llm_client = llm_client
        self.prompt_pack = dict(prompt_pack or {})
        self.combined_prompt_pack = dict(combined_prompt_pack or {})

    async def solve_text(self, problem: str) -> str:
        """Solves an already-interpreted problem.

        Args:
            problem: Transcription produced by the interpreter.

        Returns:
            Solution markup.

        Raises:
            RemoteUnavailable: When the model cannot be reached.
            MalformedResponse: When the reply lacks a non-empty solution.
        """
        started = time.perf_counter()
        context = {"problem": problem}
        system = render_prompt_template(self.prompt_pack.get("system", _DEFAULT_TEXT_SYSTEM), context)
        user = render_prompt_template(self.prompt_pack.get("user", _DEFAULT_TEXT_USER), context)

        payload = await self.llm_client.complete_structured(system, user, SolutionPayload)
        logger.debug("Text solve finished in %.3fs", time.perf_counter() - started)
        return payload.solution

    async def solve_image(self, image: ImageReference) -> CombinedSolutionPayload:
        """Interprets and solves the drawing in one call.

        The adaptive verbosity policy lives entirely in the prompt.

        Returns:
            Transcription and solution. `solution` may be empty when the
            transcription is the no-problem sentinel.
        """
        started = time.perf_counter()
        context = {"sentinel": NO_PROBLEM_SENTINEL}
        system = render_prompt_template(
            self.combined_prompt_pack.get("system", _DEFAULT_COMBINED_SYSTEM), context
        )
        user = render_prompt_template(self.combined_prompt_pack.get("user", _DEFAULT_COMBINED_USER), context)

        payload = await self.llm_client.complete_structured(system, user, CombinedSolutionPayload, image=image)
        logger.debug("Combined solve finished in %.3fs", time.perf_counter() - started)
        return payload
