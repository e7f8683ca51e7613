"""CLI/API entrypoint for DoodleSolve."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Optional

import uvicorn

from doodlesolve.api import create_app
from doodlesolve.api.runtime import build_services
from doodlesolve.llm import ImageReference
from doodlesolve.utils.config_loader import PIPELINES, load_app_config
from doodlesolve.utils.logger import configure_logging


def build_parser() -> argparse.ArgumentParser:
    """Builds CLI argument parser for app entrypoints.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(description="DoodleSolve")
    parser.add_argument("--mode", choices=["solve", "chat", "api"], default="solve")
    parser.add_argument("--image-path", type=str, default=None, help="Local image of the drawn problem")
    parser.add_argument("--image-data-url", type=str, default=None, help="Drawn problem as a base64 data URL")
    parser.add_argument("--message", type=str, default="", help="Chat message (chat mode)")
    parser.add_argument("--pipeline", choices=list(PIPELINES), default=None, help="Override configured pipeline")
    parser.add_argument("--config", type=str, default="configs/app_config.yml")
    parser.add_argument("--prompts", type=str, default="configs/prompts.yml")
    parser.add_argument("--knowledge", type=str, default="configs/knowledge.yml")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", type=str, default=None, help="Overrides logging.level from --config")
    return parser


def run_solve(args: argparse.Namespace, image_path: Optional[str], image_data_url: Optional[str]) -> int:
    """Solves one drawing and prints the result as JSON.

    Raises:
        ValueError: If no image is provided.
    """
    if not image_path and not image_data_url:
        raise ValueError("--image-path or --image-data-url is required in solve mode")

    services = build_services(args.config, args.prompts, args.knowledge, pipeline=args.pipeline)
    if image_path:
        max_bytes = int(services.config.vision_llm.get("max_image_bytes", 5242880))
        image = ImageReference.from_path(image_path, max_bytes=max_bytes)
    else:
        image = ImageReference.from_data_url(str(image_data_url))

    result = asyncio.run(services.orchestrator.solve(image))
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 1 if result.is_error else 0


def run_chat(args: argparse.Namespace, message: str) -> int:
    if not message.strip():
        raise ValueError("--message is required in chat mode")

    services = build_services(args.config, args.prompts, args.knowledge, pipeline=args.pipeline)
    response = asyncio.run(services.responder.respond(message))
    print(json.dumps({"response": response}, ensure_ascii=False, indent=2))
    return 0


def run_api(args: argparse.Namespace) -> int:
    """Runs FastAPI server using Uvicorn."""
    services = build_services(args.config, args.prompts, args.knowledge, pipeline=args.pipeline)
    app = create_app(orchestrator=services.orchestrator, responder=services.responder)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def main(argv: Optional[list] = None) -> int:
    """Application entrypoint for solve, chat, and API modes.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, settings=load_app_config(args.config).logging)

    if args.mode == "api":
        return run_api(args)
    if args.mode == "chat":
        return run_chat(args, args.message)
    return run_solve(args, args.image_path, args.image_data_url)


if __name__ == "__main__":
    raise SystemExit(main())
