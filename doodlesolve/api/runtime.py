"""Runtime wiring shared by the API server and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from doodlesolve.agents.graph import SolveOrchestrator
from doodlesolve.chat import ChatResponder, KnowledgeTable
from doodlesolve.utils.config_loader import (
    AppConfig,
    load_app_config,
    load_knowledge_entries,
    load_prompts_registry,
)
from doodlesolve.utils.logger import get_logger

logger = get_logger("api.runtime")


@dataclass
class Services:
    config: AppConfig
    orchestrator: SolveOrchestrator
    responder: ChatResponder


def build_services(
    config_path: str = "configs/app_config.yml",
    prompts_path: str = "configs/prompts.yml",
    knowledge_path: str = "configs/knowledge.yml",
    pipeline: Optional[str] = None,
) -> Services:
    """Loads configuration files and builds the solve and chat services.

    Each service gets its own explicitly constructed remote client; nothing
    is stored at module level.

    Args:
        config_path: Application configuration file.
        prompts_path: Prompt registry file.
        knowledge_path: Knowledge table entries file.
        pipeline: Optional override of the configured solve pipeline.

    Returns:
        Wired services.
    """
    config = load_app_config(config_path)
    prompts = load_prompts_registry(prompts_path)
    table = KnowledgeTable(load_knowledge_entries(knowledge_path))

    orchestrator = SolveOrchestrator.from_config(config, prompts, pipeline=pipeline)
    responder = ChatResponder.from_config(config, prompts, table)
    logger.info(
        "Services ready",
        extra={"extra": {"pipeline": orchestrator.pipeline, "knowledge_entries": len(table)}},
    )
    return Services(config=config, orchestrator=orchestrator, responder=responder)
