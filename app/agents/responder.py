# =============================================================================
# Responder — Grounded and General Answer Generation
# =============================================================================
#
# Produces the final chat answer in one of two modes:
#
#   grounded — answer ONLY from the retrieved FAQ chunks, temperature 0
#              → source "PDF Knowledge Base"
#   general  — persona system prompt from the active PromptProfile,
#              profile temperature (0.5) → source "OpenAI General Response"
#
# Both modes pass the reply through the link formatter when the profile
# enables it.
#
# DESIGN DECISION: No retries. A provider failure is wrapped in
# GenerationError and propagates to the request handler, which answers 500.
# =============================================================================

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.agents.prompts import PromptProfile
from app.services.formatting import format_links_as_html
from app.services.llm import LLMProvider, LLMResponse
from app.services.vectorstore import VectorSearchResult

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The completion call for the final answer failed."""


class ResponseSource(str, enum.Enum):
    KNOWLEDGE_BASE = "PDF Knowledge Base"
    GENERAL = "OpenAI General Response"


@dataclass
class GeneratedAnswer:
    """Final answer plus where it came from and what it cost."""

    message: str
    source: ResponseSource
    model: str
    input_tokens: int
    output_tokens: int


GROUNDED_SYSTEM_PROMPT = (
    "You are an AI assistant. Provide accurate answers based on the "
    "given context."
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def generate_grounded(
    question: str,
    chunks: Sequence[VectorSearchResult],
    llm: LLMProvider,
    profile: PromptProfile,
) -> GeneratedAnswer:
    """
    Answer ``question`` from the retrieved chunks only.

    Raises:
        GenerationError: If the completion call fails.
    """
    context = "\n".join(chunk.content for chunk in chunks)
    user_message = (
        "Answer the following question using the provided context:\n"
        f"Question: {question}\n"
        f"Context: {context}"
    )

    logger.info("Generating grounded answer from %d chunks", len(chunks))
    response = await _complete(
        llm,
        system=GROUNDED_SYSTEM_PROMPT,
        user_message=user_message,
        temperature=0.0,
    )
    return _to_answer(response, ResponseSource.KNOWLEDGE_BASE, profile)


async def generate_general(
    question: str,
    llm: LLMProvider,
    profile: PromptProfile,
) -> GeneratedAnswer:
    """
    Answer ``question`` with the profile's persona prompt, no retrieved context.

    Raises:
        GenerationError: If the completion call fails.
    """
    logger.info(
        "Generating general answer (profile=%s, temperature=%.1f)",
        profile.name, profile.temperature,
    )
    response = await _complete(
        llm,
        system=profile.system_prompt,
        user_message=question,
        temperature=profile.temperature,
    )
    return _to_answer(response, ResponseSource.GENERAL, profile)


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


async def _complete(
    llm: LLMProvider,
    system: str,
    user_message: str,
    temperature: float,
) -> LLMResponse:
    try:
        return await llm.complete(
            messages=[{"role": "user", "content": user_message}],
            system=system,
            temperature=temperature,
        )
    except Exception as exc:
        logger.error("Error getting LLM response: %s", exc)
        raise GenerationError(f"Completion failed: {exc}") from exc


def _to_answer(
    response: LLMResponse,
    source: ResponseSource,
    profile: PromptProfile,
) -> GeneratedAnswer:
    message = response.content
    if profile.url_formatting:
        message = format_links_as_html(message)

    logger.info(
        "Answer complete: source=%s, model=%s, tokens=%d+%d",
        source.value, response.model,
        response.input_tokens, response.output_tokens,
    )

    return GeneratedAnswer(
        message=message,
        source=source,
        model=response.model,
        input_tokens=response.input_tokens,
        output_tokens=response.output_tokens,
    )
