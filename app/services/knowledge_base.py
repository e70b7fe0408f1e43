# =============================================================================
# Knowledge Base — One-Shot Index Build and Application State
# =============================================================================
#
# Owns the in-memory vector index for the FAQ PDF.
#
# PIPELINE (build_index):
#   parse (Docling, in a thread) → chunk → embed (OpenAI) → InMemoryVectorIndex
#
# STATE MACHINE (KnowledgeBase):
#   UNINITIALIZED ──first ensure_ready()──▶ BUILDING ──ok──▶ READY
#                          ▲                    │
#                          └──────failed────────┘
#
# DESIGN DECISION: Cached build task instead of a check-then-build global.
# The first caller starts one asyncio.Task; every concurrent caller awaits
# that same task, so the PDF is parsed and embedded once no matter how many
# requests arrive before it finishes. A failed build is forgotten so the
# next request tries again (no failure caching, no backoff).
#
# DESIGN DECISION: ensure_ready() returns an IndexStatus instead of raising.
# An unavailable knowledge base is not a request failure: the orchestrator
# falls back to a general answer, and that fallback is an explicit branch
# on `status.ok` rather than a caught exception.
# =============================================================================

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import time
from dataclasses import dataclass

from app.config import settings
from app.services.chunker import chunk_document
from app.services.embedder import embed_batch
from app.services.parser import parse_pdf
from app.services.vectorstore import InMemoryVectorIndex

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """The knowledge base could not be built from the source document."""


class IndexState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    READY = "ready"


@dataclass(frozen=True)
class IndexStatus:
    """Outcome of KnowledgeBase.ensure_ready(): an index, or why there is none."""

    index: InMemoryVectorIndex | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.index is not None


# ---------------------------------------------------------------------------
# Ingestion Pipeline
# ---------------------------------------------------------------------------


async def build_index(source_path: str) -> InMemoryVectorIndex:
    """
    Build a vector index from the PDF at ``source_path``.

    All-or-nothing: if parsing or any embedding call fails, no index is
    returned.

    Raises:
        IngestionError: wrapping the underlying parse, chunk or embed failure.
    """
    start = time.monotonic()
    try:
        parsed = await asyncio.to_thread(parse_pdf, source_path)
        chunks = chunk_document(
            parsed,
            separator=settings.chunk_separator,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        )
        embeddings = await embed_batch([c.content for c in chunks])
        index = InMemoryVectorIndex(chunks, embeddings)
    except Exception as exc:
        logger.error("Error loading PDF '%s': %s", source_path, exc)
        raise IngestionError(
            f"Failed to build knowledge base from '{source_path}': {exc}"
        ) from exc

    logger.info(
        "PDF initialization complete: '%s' → %d chunks from %d pages in %.1fs",
        source_path,
        len(index),
        parsed.page_count,
        time.monotonic() - start,
    )
    return index


# ---------------------------------------------------------------------------
# Application State
# ---------------------------------------------------------------------------


class KnowledgeBase:
    """
    Process-wide holder of the FAQ vector index.

    One instance lives on ``app.state.knowledge_base``; request handlers get
    it through the ``get_knowledge_base`` dependency.
    """

    def __init__(self, source_path: str | None = None) -> None:
        self.source_path = source_path or settings.source_pdf_path
        self._index: InMemoryVectorIndex | None = None
        self._build_task: asyncio.Task[InMemoryVectorIndex] | None = None

    @property
    def state(self) -> IndexState:
        if self._index is not None:
            return IndexState.READY
        if self._build_task is not None:
            return IndexState.BUILDING
        return IndexState.UNINITIALIZED

    @property
    def index(self) -> InMemoryVectorIndex | None:
        return self._index

    async def ensure_ready(self) -> IndexStatus:
        """
        Return the index, building it first if needed.

        Never raises for ingestion failures; they come back as
        ``IndexStatus(error=...)``.
        """
        if self._index is not None:
            return IndexStatus(index=self._index)

        if self._build_task is None:
            logger.info("Knowledge base not ready, building from '%s'", self.source_path)
            self._build_task = asyncio.create_task(self._build())

        task = self._build_task
        try:
            # shield: a cancelled request must not cancel the shared build
            index = await asyncio.shield(task)
        except IngestionError as exc:
            return IndexStatus(error=str(exc))
        return IndexStatus(index=index)

    async def _build(self) -> InMemoryVectorIndex:
        try:
            index = await build_index(self.source_path)
        except BaseException:
            self._build_task = None
            raise
        self._index = index
        self._build_task = None
        return index

    async def aclose(self) -> None:
        """Cancel an in-flight build (application shutdown)."""
        task = self._build_task
        self._build_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
