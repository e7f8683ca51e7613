"""Decoding of structured model output into validated records."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

RecordT = TypeVar("RecordT", bound=BaseModel)


class MalformedResponse(ValueError):
    """Raised when a model reply does not satisfy the expected output schema."""


@dataclass(frozen=True)
class Valid(Generic[RecordT]):
    record: RecordT


@dataclass(frozen=True)
class Invalid:
    reason: str


DecodeResult = Union[Valid[RecordT], Invalid]


def extract_json_dict(text: str) -> Optional[Dict[str, Any]]:
    """Extracts a JSON object from free-form model output.

    Args:
        text: Raw model output, possibly wrapped in a code fence or prose.

    Returns:
        Parsed dictionary, or None when no JSON object can be recovered.
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = re.sub(r"^```(?:json)?", "", stripped).strip()
        stripped = re.sub(r"```$", "", stripped).strip()

    try:
        parsed = json.loads(stripped)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    match = re.search(r"\{.*\}", stripped, flags=re.DOTALL)
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def decode_payload(text: str, schema: Type[RecordT]) -> "DecodeResult[RecordT]":
    """Validates raw model text against an output schema.

    Args:
        text: Raw model output.
        schema: Pydantic model describing the required fields.

    Returns:
        `Valid(record)` on success, otherwise `Invalid(reason)`.
    """
    if not text or not text.strip():
        return Invalid("empty response")

    payload = extract_json_dict(text)
    if payload is None:
        return Invalid("response is not a JSON object")

    try:
        return Valid(schema.model_validate(payload))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) or "<root>" for err in exc.errors())
        return Invalid("{} failed validation: {}".format(schema.__name__, fields))


def require_valid(result: "DecodeResult[RecordT]") -> RecordT:
    """Unwraps a decode result.

    Raises:
        MalformedResponse: If the result is `Invalid`.
    """
    if isinstance(result, Invalid):
        raise MalformedResponse("Malformed model response: {}".format(result.reason))
    return result.record
