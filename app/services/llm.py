# =============================================================================
# Chat Completion Providers
# =============================================================================
#
# Every request to /api/chat makes one or two completion calls:
#   1. the relevance check ("true"/"false", temperature 0)
#   2. the answer (grounded at temperature 0, or general at the prompt
#      profile's temperature)
# Both go through the LLMProvider interface below, so the agents never
# touch an SDK directly.
#
# DESIGN DECISION: Protocol (structural typing) over ABC.
# The agents annotate against LLMProvider; the agent tests pass an AsyncMock
# or a small scripted class, and neither needs to inherit anything.
#
# DESIGN DECISION: Temperature is a required part of every call.
# The two call sites use different temperatures and the default profile's
# 0.5 must never be silently replaced, so there is no provider-level
# default to fall back to.
#
# PROVIDERS (selected with LLM_PROVIDER):
#   openai_compatible → OpenAICompatibleProvider (gpt-4o-mini by default;
#                       LLM_BASE_URL points it at any compatible vendor)
#   anthropic         → AnthropicProvider (system prompt as a kwarg)
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMResponse:
    """Provider-neutral completion result."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(Protocol):
    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Run one chat completion.

        Args:
            messages: "user"/"assistant" turns. The system prompt goes in
                ``system``, never as a message.
            system: Instructions for the model (relevance rubric or persona).
            temperature: Sampling temperature, used exactly as given.
            max_tokens: Output cap; settings.llm_max_tokens when None.
        """
        ...


def _require_key(*candidates: str | None, env_names: str) -> str:
    for key in candidates:
        if key:
            return key
    raise ValueError(f"No API key configured for the chat model. Set {env_names}")


# ---------------------------------------------------------------------------
# OpenAI-Compatible
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Chat completions over the OpenAI protocol.

    The default (OpenAI, gpt-4o-mini) needs only OPENAI_API_KEY. Another
    compatible vendor needs LLM_BASE_URL, LLM_API_KEY and LLM_MODEL.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        from openai import AsyncOpenAI

        key = _require_key(
            api_key, settings.llm_api_key, settings.openai_api_key,
            env_names="OPENAI_API_KEY or LLM_API_KEY",
        )
        self._base_url = base_url or settings.llm_base_url
        self._client = AsyncOpenAI(
            api_key=key,
            base_url=self._base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )
        self._model = model or settings.llm_model
        logger.info(
            "Chat model: %s via %s",
            self._model, self._base_url or "api.openai.com",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        prompt = [{"role": "system", "content": system}] if system else []
        prompt.extend(messages)

        completion = await self._client.chat.completions.create(
            model=self._model,
            messages=prompt,
            temperature=temperature,
            max_tokens=max_tokens or settings.llm_max_tokens,
        )

        usage = completion.usage
        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """Claude via the Messages API; the persona goes in the ``system`` kwarg."""

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        from anthropic import AsyncAnthropic

        key = _require_key(
            api_key, settings.llm_api_key, settings.anthropic_api_key,
            env_names="ANTHROPIC_API_KEY or LLM_API_KEY",
        )
        self._client = AsyncAnthropic(
            api_key=key,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )
        self._model = model or settings.llm_model
        logger.info("Chat model: %s via Anthropic", self._model)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        request: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens or settings.llm_max_tokens,
        }
        if system:
            request["system"] = system

        message = await self._client.messages.create(**request)

        # Answers are plain text; join in case the model split them
        text = "".join(
            block.text for block in message.content if block.type == "text"
        )
        return LLMResponse(
            content=text,
            model=message.model,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_FACTORIES: dict[str, Callable[[], LLMProvider]] = {
    "openai_compatible": OpenAICompatibleProvider,
    "anthropic": AnthropicProvider,
}

# Created on first use and shared by all requests
_provider: LLMProvider | None = None


def get_llm_provider() -> LLMProvider:
    """
    Return the provider named by settings.llm_provider.

    Raises:
        ValueError: If the provider is unknown or has no API key.
    """
    global _provider
    if _provider is None:
        factory = _FACTORIES.get(settings.llm_provider)
        if factory is None:
            raise ValueError(
                f"Unknown LLM_PROVIDER '{settings.llm_provider}'. "
                f"Supported: {', '.join(sorted(_FACTORIES))}"
            )
        _provider = factory()
    return _provider
