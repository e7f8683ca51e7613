"""Interpretation stage: transcribes a drawn problem into readable text."""

from __future__ import annotations

import time
from typing import Dict, Optional

from doodlesolve.agents.classify import NO_PROBLEM_SENTINEL
from doodlesolve.agents.state import InterpretationResult
from doodlesolve.llm import GenerativeClient, ImageReference
from doodlesolve.llm.schemas import InterpretationPayload
from doodlesolve.utils.config_loader import render_prompt_template
from doodlesolve.utils.logger import get_logger

logger = get_logger("nodes.interpreter")

_DEFAULT_SYSTEM = "You are an AI assistant specialized in interpreting handwritten math equations."
_DEFAULT_USER = (
    "Given an image of a math equation, accurately convert it into a readable text format. "
    "Do not attempt to solve, only interpret. If the image does not contain a math equation, "
    "respond with '{{sentinel}}'. Return ONLY JSON: {\"interpretedEquation\": string}."
)


class EquationInterpreter:
    """Asks the vision model for a transcription of the drawing."""

    def __init__(self, llm_client: GenerativeClient, prompt_pack: Optional[Dict[str, str]] = None) -> None:
        self.llm_client = llm_client
        self.prompt_pack = dict(prompt_pack or {})

    async def interpret(self, image: ImageReference) -> InterpretationResult:
        """Transcribes the problem depicted in `image`.

        Args:
            image: Drawing rendered by the canvas.

        Returns:
            The transcription, or the no-problem sentinel text.

        Raises:
            RemoteUnavailable: When the vision model cannot be reached.
            MalformedResponse: When the reply lacks `interpretedEquation`.
        """
        started = time.perf_counter()
        context = {"sentinel": NO_PROBLEM_SENTINEL}
        system = render_prompt_template(self.prompt_pack.get("system", _DEFAULT_SYSTEM), context)
        user = render_prompt_template(self.prompt_pack.get("user", _DEFAULT_USER), context)

        payload = await self.llm_client.complete_structured(system, user, InterpretationPayload, image=image)

        logger.debug(
            "Interpretation finished in %.3fs (%d chars)",
            time.perf_counter() - started,
            len(payload.interpreted_equation),
        )
        return InterpretationResult(text=payload.interpreted_equation)
