"""REST interface for the solve and chat services."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from doodlesolve.agents.graph import SolveOrchestrator
from doodlesolve.api.runtime import build_services
from doodlesolve.chat import ChatResponder
from doodlesolve.llm import ImageReference, InvalidImageReference
from doodlesolve.utils.logger import get_logger

logger = get_logger("api")


class SolveRequest(BaseModel):
    image: str = Field(description="Drawing as 'data:<mimetype>;base64,<encoded_data>'")


class SolveResponse(BaseModel):
    status: str
    interpreted: Optional[str] = None
    solution: Optional[str] = None
    error: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(default="", description="The user's message")


class ChatResponse(BaseModel):
    response: str = Field(description="Reply formatted in markdown")


def create_app(
    orchestrator: Optional[SolveOrchestrator] = None,
    responder: Optional[ChatResponder] = None,
) -> FastAPI:
    """Builds and configures the FastAPI application.

    Args:
        orchestrator: Solve service; loaded from config files when omitted.
        responder: Chat service; loaded from config files when omitted.

    Returns:
        Configured FastAPI app instance.
    """
    if orchestrator is None or responder is None:
        services = build_services()
        orchestrator = orchestrator or services.orchestrator
        responder = responder or services.responder

    app = FastAPI(title="DoodleSolve API", version="0.1.0")

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "solve": orchestrator.describe(),
            "chat_llm": responder.llm_client.describe(),
            "knowledge_entries": len(responder.table),
        }

    @app.post("/solve", response_model=SolveResponse, response_model_exclude_none=True)
    async def solve(payload: SolveRequest) -> Dict[str, Any]:
        try:
            image = ImageReference.from_data_url(payload.image)
        except InvalidImageReference as exc:
            logger.info("Rejected image reference: %s", exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        result = await orchestrator.solve(image)
        return result.to_dict()

    @app.post("/chat", response_model=ChatResponse)
    async def chat(payload: ChatRequest) -> Dict[str, str]:
        return {"response": await responder.respond(payload.message)}

    return app
