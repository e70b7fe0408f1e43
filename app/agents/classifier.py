# =============================================================================
# Relevance Classifier — Do the Retrieved Chunks Answer the Question?
# =============================================================================
#
# Similarity search always returns the nearest chunks, even for questions
# the FAQ knows nothing about. Before answering from the knowledge base we
# ask the LLM for a strict true/false judgment.
#
# DESIGN DECISION: Conservative parsing.
# The answer counts as relevant only if the lowercased reply contains
# "true". Empty, ambiguous or malformed replies send the question down the
# general-answer path, which is always safe to take.
#
# DESIGN DECISION: Fail open, as a value.
# A provider error is logged and returned inside the verdict as a
# ClassificationError (chained to the cause) rather than raised, so the
# orchestrator's fallback is an explicit branch.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.services.llm import LLMProvider
from app.services.vectorstore import VectorSearchResult

logger = logging.getLogger(__name__)


RELEVANCE_SYSTEM_PROMPT = (
    "Determine if the provided content contains relevant information to "
    'answer the question. Respond with only "true" or "false".'
)


class ClassificationError(Exception):
    """The relevance check could not be completed."""


@dataclass(frozen=True)
class RelevanceVerdict:
    """Result of the relevance check."""

    relevant: bool
    error: ClassificationError | None = None  # set when the check failed


async def is_relevant(
    chunks: Sequence[VectorSearchResult],
    question: str,
    llm: LLMProvider,
) -> RelevanceVerdict:
    """
    Ask the LLM whether ``chunks`` contain the answer to ``question``.

    No chunks means not relevant, without calling the model.
    """
    if not chunks:
        return RelevanceVerdict(relevant=False)

    content = "\n".join(chunk.content for chunk in chunks)

    try:
        response = await llm.complete(
            messages=[{
                "role": "user",
                "content": f"Question: {question}\nContent: {content}",
            }],
            system=RELEVANCE_SYSTEM_PROMPT,
            temperature=0.0,
        )
    except Exception as exc:
        logger.error("Error checking relevance: %s", exc)
        error = ClassificationError(f"Relevance check failed: {exc}")
        error.__cause__ = exc
        return RelevanceVerdict(relevant=False, error=error)

    relevant = "true" in response.content.lower()
    logger.info(
        "Relevance check: %s (reply=%r, chunks=%d)",
        relevant, response.content[:20], len(chunks),
    )
    return RelevanceVerdict(relevant=relevant)
