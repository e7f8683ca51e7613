"""Remote model clients and response decoding."""

from .client import GenerativeClient, LLMRuntimeConfig, RemoteUnavailable
from .decoding import Invalid, MalformedResponse, Valid, decode_payload
from .images import ImageReference, InvalidImageReference

__all__ = [
    "GenerativeClient",
    "LLMRuntimeConfig",
    "RemoteUnavailable",
    "Invalid",
    "MalformedResponse",
    "Valid",
    "decode_payload",
    "ImageReference",
    "InvalidImageReference",
]
