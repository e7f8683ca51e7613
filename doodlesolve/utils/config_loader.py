"""Configuration loaders for YAML-based runtime settings, prompts, and knowledge entries."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

PIPELINES = ("two_stage", "combined")

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


@dataclass
class SolveSettings:
    pipeline: str = "two_stage"


@dataclass
class ChatSettings:
    static_first: bool = True
    persona: Dict[str, str] = field(default_factory=dict)


@dataclass
class AppConfig:
    version: str = "1.0.0"
    chat_llm: Dict[str, Any] = field(default_factory=dict)
    vision_llm: Dict[str, Any] = field(default_factory=dict)
    solve: SolveSettings = field(default_factory=SolveSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("Configuration file not found: {}".format(path))
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ConfigError("Configuration root must be a mapping in {}".format(path))
    return loaded


def normalize_pipeline(value: Any) -> str:
    """Validates a pipeline name.

    Args:
        value: Raw pipeline name from config, CLI, or caller.

    Returns:
        Lower-cased pipeline name.

    Raises:
        ConfigError: If the name is not a known pipeline.
    """
    pipeline = str(value or "two_stage").strip().lower().replace("-", "_")
    if pipeline not in PIPELINES:
        raise ConfigError("Unknown solve pipeline '{}'; expected one of {}".format(value, ", ".join(PIPELINES)))
    return pipeline


def load_app_config(path: str = "configs/app_config.yml") -> AppConfig:
    data = _load_yaml(Path(path))
    solve_data = data.get("solve", {}) or {}
    chat_data = data.get("chat", {}) or {}

    persona = chat_data.get("persona", {}) or {}
    if not isinstance(persona, dict):
        raise ConfigError("'chat.persona' must be a mapping in {}".format(path))

    return AppConfig(
        version=str(data.get("version", "1.0.0")),
        chat_llm=dict(data.get("chat_llm", {}) or {}),
        vision_llm=dict(data.get("vision_llm", {}) or {}),
        solve=SolveSettings(pipeline=normalize_pipeline(solve_data.get("pipeline", "two_stage"))),
        chat=ChatSettings(
            static_first=bool(chat_data.get("static_first", True)),
            persona={str(k): str(v) for k, v in persona.items()},
        ),
        logging=dict(data.get("logging", {}) or {}),
    )


_PROMPT_FIELDS = ("system", "user")


def _resolve_prompt(
    name: str,
    registry: Mapping[str, Any],
    resolved: Dict[str, Dict[str, str]],
    chain: Tuple[str, ...] = (),
) -> Dict[str, str]:
    """Flattens one registry node over its `extends` ancestors.

    Child fields override inherited ones; finished nodes are memoized in `resolved`.
    """
    if name in resolved:
        return resolved[name]
    if name in chain:
        raise ConfigError("Cyclic prompt inheritance: {}".format(" -> ".join(chain + (name,))))

    node = registry.get(name)
    if not isinstance(node, dict):
        if chain:
            raise ConfigError("Prompt '{}' extends unknown prompt '{}'".format(chain[-1], name))
        raise ConfigError("Prompt '{}' not found in registry".format(name))

    parent = node.get("extends")
    pack = dict(_resolve_prompt(str(parent), registry, resolved, chain + (name,))) if parent else {}
    pack.update({key: str(node[key]) for key in _PROMPT_FIELDS if key in node})
    resolved[name] = pack
    return pack


def load_prompts_registry(path: str = "configs/prompts.yml") -> Dict[str, Dict[str, str]]:
    """Loads the prompt registry with every `extends` chain flattened.

    Raises:
        ConfigError: On a non-mapping registry, an unknown parent, or an inheritance cycle.
    """
    registry = _load_yaml(Path(path)).get("registry", {})
    if not isinstance(registry, dict):
        raise ConfigError("'registry' must be a mapping in {}".format(path))

    resolved: Dict[str, Dict[str, str]] = {}
    for name in registry:
        _resolve_prompt(str(name), registry, resolved)
    return {str(name): resolved[str(name)] for name in registry}


def load_knowledge_entries(path: str = "configs/knowledge.yml") -> List[Tuple[str, str]]:
    """Reads the ordered trigger/answer pairs seeding the knowledge table.

    Args:
        path: YAML file with an `entries` list of `{trigger, answer}` mappings.

    Returns:
        Entries in file order with triggers normalized to lower-case.

    Raises:
        ConfigError: On a malformed entry, blank field, or duplicate trigger.
    """
    data = _load_yaml(Path(path))
    raw_entries = data.get("entries", [])
    if not isinstance(raw_entries, list):
        raise ConfigError("'entries' must be a list in {}".format(path))

    entries: List[Tuple[str, str]] = []
    seen: set = set()
    for index, item in enumerate(raw_entries):
        if not isinstance(item, dict):
            raise ConfigError("Knowledge entry #{} must be a mapping".format(index))
        trigger = str(item.get("trigger") or "").strip().lower()
        answer = str(item.get("answer") or "").strip()
        if not trigger or not answer:
            raise ConfigError("Knowledge entry #{} needs a non-empty trigger and answer".format(index))
        if trigger in seen:
            raise ConfigError("Duplicate knowledge trigger '{}'".format(trigger))
        seen.add(trigger)
        entries.append((trigger, answer))
    return entries


def render_prompt_template(template: str, context: Mapping[str, Any]) -> str:
    """Fills `{{name}}` placeholders from a context mapping.

    Mappings and lists are JSON-encoded; unknown placeholders are left intact.
    """

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key not in context:
            return match.group(0)
        value = context[key]
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)

    return _PLACEHOLDER.sub(_replace, template)
