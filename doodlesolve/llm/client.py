"""Generative client facade for the remote chat and vision models."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type

from dotenv import load_dotenv
from groq import AsyncGroq
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_nvidia_ai_endpoints import ChatNVIDIA

from doodlesolve.llm.decoding import RecordT, decode_payload, require_valid
from doodlesolve.llm.images import ImageReference
from doodlesolve.utils.logger import get_logger

logger = get_logger("llm.client")

SUPPORTED_PROVIDERS = ("groq", "nvidia")

_PROVIDER_DEFAULTS: Dict[str, Dict[str, str]] = {
    "groq": {"model": "llama-3.1-8b-instant", "api_key_env": "GROQ_API_KEY"},
    "nvidia": {"model": "moonshotai/kimi-k2.5", "api_key_env": "NVIDIA_API_KEY"},
}


class RemoteUnavailable(RuntimeError):
    """Raised when a remote model cannot produce a reply (config, transport, timeout)."""


@dataclass
class LLMRuntimeConfig:
    """Runtime configuration for one remote model.

    Attributes:
        enabled: Enables or disables the client bootstrap.
        provider: Provider name, one of `SUPPORTED_PROVIDERS`.
        model: Provider model identifier.
        api_key_env: Preferred environment variable for the API key.
        temperature: Sampling temperature.
        top_p: Nucleus sampling parameter.
        max_tokens: Maximum number of output tokens.
        timeout_seconds: Per-call timeout; 0 leaves the transport default.
        thinking: Enables provider-specific reasoning mode when supported.
        multimodal_enabled: Allows image content in requests.
        max_image_bytes: Maximum image payload size accepted for local files.
    """

    enabled: bool = True
    provider: str = "groq"
    model: str = "llama-3.1-8b-instant"
    api_key_env: str = "GROQ_API_KEY"
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1000
    timeout_seconds: float = 0.0
    thinking: bool = False
    multimodal_enabled: bool = False
    max_image_bytes: int = 5242880

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]] = None) -> "LLMRuntimeConfig":
        raw = raw or {}
        provider = str(raw.get("provider", "groq")).strip().lower()
        defaults = _PROVIDER_DEFAULTS.get(provider, {})
        return cls(
            enabled=bool(raw.get("enabled", True)),
            provider=provider,
            model=str(raw.get("model") or defaults.get("model", "")),
            api_key_env=str(raw.get("api_key_env") or defaults.get("api_key_env", "")),
            temperature=float(raw.get("temperature", 0.7)),
            top_p=float(raw.get("top_p", 1.0)),
            max_tokens=int(raw.get("max_tokens", 1000)),
            timeout_seconds=float(raw.get("timeout_seconds", 0) or 0),
            thinking=bool(raw.get("thinking", False)),
            multimodal_enabled=bool(raw.get("multimodal_enabled", False)),
            max_image_bytes=int(raw.get("max_image_bytes", 5242880)),
        )


class GenerativeClient:
    """Facade over one hosted model with provider/runtime safeguards.

    This class centralizes:
    - provider bootstrap and key resolution;
    - text and multimodal invocation with timeout handling;
    - schema-checked decoding of structured replies.

    Every provider failure leaves this class as `RemoteUnavailable`.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        """Builds a client from runtime config and bootstraps provider access.

        Args:
            config: Optional runtime settings overriding defaults.
        """
        self.config = LLMRuntimeConfig.from_mapping(config)
        self._client: Optional[Any] = None
        self._unavailable_reason: Optional[str] = None
        self._bootstrap()

    @property
    def is_available(self) -> bool:
        """Indicates whether the provider client is ready for inference."""
        return self._client is not None

    def describe(self) -> Dict[str, Any]:
        """Returns diagnostics about provider and key availability.

        Returns:
            A serializable dictionary with provider/runtime metadata.
        """
        api_key_present = any(bool((os.getenv(name) or "").strip()) for name in self._key_candidates())
        return {
            "enabled": self.config.enabled,
            "provider": self.config.provider,
            "model": self.config.model,
            "available": self.is_available,
            "reason": self._unavailable_reason,
            "multimodal_enabled": self.config.multimodal_enabled,
            "api_key_env": self.config.api_key_env,
            "api_key_present": api_key_present,
        }

    def _bootstrap(self) -> None:
        """Initializes the provider client if runtime preconditions are met."""
        if not self.config.enabled:
            self._unavailable_reason = "disabled_by_config"
            return
        if self.config.provider not in SUPPORTED_PROVIDERS:
            self._unavailable_reason = "unsupported_provider"
            return
        _load_environment_variables()

        api_key = _resolve_api_key(self._key_candidates())
        if not api_key:
            self._unavailable_reason = "missing_api_key"
            return

        if self.config.provider == "groq":
            self._client = AsyncGroq(api_key=api_key)
        else:
            self._client = ChatNVIDIA(
                model=self.config.model,
                api_key=api_key,
                temperature=self.config.temperature,
                top_p=self.config.top_p,
                max_completion_tokens=self.config.max_tokens,
            )

    def _key_candidates(self) -> List[str]:
        """Returns key environment names ordered by lookup preference."""
        fallback = _PROVIDER_DEFAULTS.get(self.config.provider, {}).get("api_key_env", "")
        return [name for name in (self.config.api_key_env, fallback, fallback.lower()) if name]

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        image: Optional[ImageReference] = None,
    ) -> str:
        """Invokes the model and returns plain text.

        Args:
            system_prompt: System instruction.
            user_prompt: User message content.
            image: Optional image attached to the user turn.

        Returns:
            Assistant text, possibly empty when the provider returns no content.

        Raises:
            RemoteUnavailable: On missing configuration, transport failure, or timeout.
        """
        if not self.is_available:
            raise RemoteUnavailable(
                "Remote model '{}' is unavailable: {}".format(self.config.model, self._unavailable_reason)
            )
        if image is not None and not self.config.multimodal_enabled:
            raise RemoteUnavailable("Remote model '{}' is not configured for image input.".format(self.config.model))

        call = self._invoke_provider(system_prompt, user_prompt, image)
        try:
            if self.config.timeout_seconds > 0:
                return await asyncio.wait_for(call, timeout=self.config.timeout_seconds)
            return await call
        except asyncio.TimeoutError as exc:
            logger.warning("Remote call to %s timed out", self.config.model)
            raise RemoteUnavailable(
                "Remote model '{}' timed out after {}s".format(self.config.model, self.config.timeout_seconds)
            ) from exc
        except RemoteUnavailable:
            raise
        except Exception as exc:
            logger.warning("Remote call to %s failed: %s", self.config.model, exc)
            raise RemoteUnavailable("Remote model '{}' failed: {}".format(self.config.model, exc)) from exc

    async def complete_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Type[RecordT],
        image: Optional[ImageReference] = None,
    ) -> RecordT:
        """Invokes the model and decodes its reply into `schema`.

        Raises:
            RemoteUnavailable: When the call itself fails.
            MalformedResponse: When the reply does not satisfy `schema`.
        """
        text = await self.complete(system_prompt, user_prompt, image=image)
        return require_valid(decode_payload(text, schema))

    async def _invoke_provider(
        self,
        system_prompt: str,
        user_prompt: str,
        image: Optional[ImageReference],
    ) -> str:
        assert self._client is not None
        human_content = build_human_content(user_prompt, image)

        if self.config.provider == "groq":
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": human_content},
                ],
                temperature=self.config.temperature,
                top_p=self.config.top_p,
                max_tokens=self.config.max_tokens,
            )
            if not response.choices:
                return ""
            return str(response.choices[0].message.content or "")

        response = await self._client.ainvoke(
            [SystemMessage(content=system_prompt), HumanMessage(content=human_content)],
            chat_template_kwargs={"thinking": self.config.thinking},
        )
        return str(getattr(response, "content", "") or "")


def build_human_content(user_prompt: str, image: Optional[ImageReference]) -> Any:
    """Builds the user turn content, adding an `image_url` block when an image is attached.

    Args:
        user_prompt: User text content.
        image: Optional image reference.

    Returns:
        Plain text, or a list of text and image content blocks.
    """
    if image is None:
        return user_prompt
    return [
        {"type": "text", "text": user_prompt},
        {"type": "image_url", "image_url": {"url": image.data_url}},
    ]


def _load_environment_variables() -> None:
    """Loads environment variables from candidate `.env` files without overriding set values."""
    env_candidates = [
        Path.cwd() / ".env",
        Path(__file__).resolve().parents[2] / ".env",
    ]
    for env_path in env_candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)


def _resolve_api_key(candidates: List[str]) -> Optional[str]:
    """Finds the first non-empty API key among candidate env vars.

    Args:
        candidates: Environment variable names ordered by preference.

    Returns:
        First non-empty key value, or None when no candidate is set.
    """
    for name in candidates:
        if not name:
            continue
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None
