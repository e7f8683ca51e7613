"""LangGraph orchestration of the interpret/solve pipeline."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from doodlesolve.agents.classify import (
    NO_PROBLEM_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    classify_exception,
    ensure_problem,
    is_no_problem_sentinel,
)
from doodlesolve.agents.state import SolutionResult, SolveState
from doodlesolve.llm import GenerativeClient, ImageReference, MalformedResponse
from doodlesolve.nodes import EquationInterpreter, EquationSolver
from doodlesolve.utils.config_loader import AppConfig, normalize_pipeline
from doodlesolve.utils.logger import get_logger


class SolveOrchestrator:
    """Turns a drawing into a `SolutionResult`.

    Two interchangeable pipelines share this interface:

    - `two_stage`: interpreter -> (sentinel? stop) -> solver, two remote calls;
    - `combined`: one remote call returning transcription and solution.

    `solve` never raises; every stage failure becomes an error result.
    """

    def __init__(
        self,
        interpreter: Optional[EquationInterpreter],
        solver: EquationSolver,
        pipeline: str = "two_stage",
    ) -> None:
        """Compiles the graph for the selected pipeline.

        Args:
            interpreter: Transcription stage; required for `two_stage`.
            solver: Solving stage.
            pipeline: `two_stage` or `combined`.
        """
        self.logger = get_logger("agents.orchestrator")
        self.pipeline = normalize_pipeline(pipeline)
        if self.pipeline == "two_stage" and interpreter is None:
            raise ValueError("The two_stage pipeline requires an interpreter.")
        self.interpreter = interpreter
        self.solver = solver
        self._graph = self._build_langgraph()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        prompts: Dict[str, Dict[str, str]],
        llm_client: Optional[GenerativeClient] = None,
        pipeline: Optional[str] = None,
    ) -> "SolveOrchestrator":
        """Wires stages from loaded configuration.

        Args:
            config: Application configuration.
            prompts: Resolved prompt registry.
            llm_client: Vision client; built from `config.vision_llm` when omitted.
            pipeline: Overrides `config.solve.pipeline`.
        """
        client = llm_client or GenerativeClient(config=config.vision_llm)
        interpreter = EquationInterpreter(client, prompt_pack=prompts.get("interpreter", {}))
        solver = EquationSolver(
            client,
            prompt_pack=prompts.get("solver", {}),
            combined_prompt_pack=prompts.get("combined_solver", {}),
        )
        return cls(interpreter, solver, pipeline=pipeline or config.solve.pipeline)

    def _build_langgraph(self) -> Any:
        """Builds the compiled graph for the configured pipeline."""
        graph = StateGraph(SolveState)
        if self.pipeline == "combined":
            graph.add_node("combined", self._combined_node)
            graph.set_entry_point("combined")
            graph.add_edge("combined", END)
            return graph.compile()

        graph.add_node("interpreter", self._interpret_node)
        graph.add_node("solver", self._solve_node)
        graph.set_entry_point("interpreter")
        graph.add_conditional_edges(
            "interpreter",
            lambda st: END if st.get("status") == "no_problem" else "solver",
            {"solver": "solver", END: END},
        )
        graph.add_edge("solver", END)
        return graph.compile()

    async def solve(self, image: ImageReference) -> SolutionResult:
        """Runs one independent solve attempt.

        Args:
            image: Drawing to interpret and solve.

        Returns:
            Success with transcription and markup, or an error result.
        """
        started = time.perf_counter()
        try:
            final_state = await self._graph.ainvoke(SolveState(image=image, status="idle"))
        except Exception as exc:
            self.logger.warning("Solve failed in %s pipeline: %s", self.pipeline, exc, exc_info=True)
            return classify_exception(exc)

        result = _state_to_result(final_state)
        self.logger.info(
            "Solve finished",
            extra={
                "extra": {
                    "pipeline": self.pipeline,
                    "status": result.status.value,
                    "elapsed_seconds": round(time.perf_counter() - started, 3),
                }
            },
        )
        return result

    def describe(self) -> Dict[str, Any]:
        client = self.solver.llm_client
        return {"pipeline": self.pipeline, "vision_llm": client.describe()}

    async def _interpret_node(self, state: SolveState) -> Dict[str, Any]:
        assert self.interpreter is not None
        interpretation = await self.interpreter.interpret(state["image"])
        if is_no_problem_sentinel(interpretation.text):
            self.logger.info("Interpreter found no problem; skipping solver")
            return {"interpreted": interpretation.text, "status": "no_problem"}
        return {"interpreted": interpretation.text.strip(), "status": "interpreted"}

    async def _solve_node(self, state: SolveState) -> Dict[str, Any]:
        solution = await self.solver.solve_text(state["interpreted"])
        return {"solution": solution, "status": "solved"}

    async def _combined_node(self, state: SolveState) -> Dict[str, Any]:
        payload = await self.solver.solve_image(state["image"])
        interpreted = ensure_problem(payload.interpreted_text)
        if not payload.solution:
            raise MalformedResponse("Malformed model response: CombinedSolutionPayload is missing a solution")
        return {"interpreted": interpreted, "solution": payload.solution, "status": "solved"}


def _state_to_result(state: Dict[str, Any]) -> SolutionResult:
    """Maps a terminal graph state to the public result."""
    status = state.get("status")
    if status == "no_problem":
        return SolutionResult.no_problem(NO_PROBLEM_MESSAGE)
    if status == "solved":
        return SolutionResult.success(str(state.get("interpreted", "")), str(state.get("solution", "")))
    return SolutionResult.failure(UNEXPECTED_ERROR_MESSAGE)
