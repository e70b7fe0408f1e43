# =============================================================================
# Embeddings — FAQ Chunks and User Questions
# =============================================================================
#
# Two callers, one model:
#   embed_batch()  ← knowledge_base.build_index(), once per process
#   embed_query()  ← orchestrator.retrieve_node(), once per chat request
#
# Chunk and query vectors MUST come from the same model
# (settings.embedding_model) or cosine scores are meaningless.
#
# DESIGN DECISION: AsyncOpenAI on the request event loop.
# A slow embedding call only stalls the request awaiting it.
#
# DESIGN DECISION: No retries beyond the SDK's own (llm_max_retries).
# A failed build call fails the whole build; the next chat request
# starts a fresh one.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence

from openai import AsyncOpenAI

from app.config import settings

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    """Shared client, created on first use so imports never need a key."""
    global _client
    if _client is None:
        api_key = settings.openai_api_key or settings.llm_api_key
        if not api_key:
            raise ValueError(
                "No API key configured for embeddings. "
                "Set OPENAI_API_KEY or LLM_API_KEY"
            )
        _client = AsyncOpenAI(
            api_key=api_key,
            base_url=settings.embedding_base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )
        logger.info("Embedding model: %s", settings.embedding_model)
    return _client


async def embed_batch(
    texts: Sequence[str],
    batch_size: int | None = None,
) -> list[list[float]]:
    """
    Embed chunk texts, one API call per ``batch_size`` texts.

    The result lines up with ``texts``: result[i] is the vector for texts[i].

    Raises:
        ValueError: If no API key is configured.
        openai.OpenAIError: If any call fails. Nothing partial is returned.
    """
    if not texts:
        return []

    client = _get_client()
    step = batch_size or settings.embedding_batch_size
    vectors: list[list[float]] = []

    for start in range(0, len(texts), step):
        batch = list(texts[start:start + step])
        response = await client.embeddings.create(
            model=settings.embedding_model,
            input=batch,
        )
        # data[].index is the position within this call's input
        ordered = sorted(response.data, key=lambda item: item.index)
        vectors.extend(item.embedding for item in ordered)

    logger.info(
        "Embedded %d chunks in %d call(s) (model=%s)",
        len(texts), -(-len(texts) // step), settings.embedding_model,
    )
    return vectors


async def embed_query(text: str) -> list[float]:
    response = await _get_client().embeddings.create(
        model=settings.embedding_model,
        input=[text],
    )
    return response.data[0].embedding
