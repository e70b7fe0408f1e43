# =============================================================================
# Vector Store — In-Memory Cosine Similarity Index
# =============================================================================
#
# Holds the FAQ chunks and their embeddings for the life of the process and
# answers nearest-neighbour queries by brute-force cosine similarity.
#
# DESIGN DECISION: Brute force over an ANN index.
# The knowledge base is a single FAQ document (tens of chunks). A single
# NumPy matrix-vector product is exact, deterministic, and faster than
# building any approximate index at this size.
#
# DESIGN DECISION: Immutable after construction.
# The index is built once and only ever read. Chunks are frozen dataclasses,
# the embedding matrix is marked read-only, and there are no add/delete
# methods. Rebuilding means restarting the process.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from app.services.chunker import ChunkResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VectorSearchResult:
    """A chunk returned by similarity search, with its score."""

    chunk: ChunkResult
    similarity_score: float  # cosine similarity, higher = more relevant

    @property
    def content(self) -> str:
        return self.chunk.content


# ---------------------------------------------------------------------------
# Implementation: In-Memory NumPy Index
# ---------------------------------------------------------------------------


class InMemoryVectorIndex:
    """
    Exact cosine-similarity index over an immutable set of chunks.

    Ties are broken by insertion order, so results are fully deterministic
    for a given index and query.
    """

    def __init__(
        self,
        chunks: Sequence[ChunkResult],
        embeddings: Sequence[Sequence[float]],
    ) -> None:
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Got {len(chunks)} chunks but {len(embeddings)} embeddings"
            )

        self._chunks: tuple[ChunkResult, ...] = tuple(chunks)

        if self._chunks:
            matrix = np.asarray(embeddings, dtype=np.float64)
            if matrix.ndim != 2:
                raise ValueError("Embeddings must all have the same length")
        else:
            matrix = np.zeros((0, 0), dtype=np.float64)

        # Pre-normalise rows so search is a single dot product.
        # Zero vectors stay zero and score 0.0 against everything.
        norms = np.linalg.norm(matrix, axis=1, keepdims=True) if matrix.size else None
        if norms is not None:
            matrix = np.divide(
                matrix, norms, out=np.zeros_like(matrix), where=norms > 0,
            )
        matrix.setflags(write=False)
        self._matrix = matrix

        logger.info(
            "Built in-memory vector index: %d chunks, %d dimensions",
            len(self._chunks),
            self.dimensions,
        )

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def dimensions(self) -> int:
        return int(self._matrix.shape[1]) if self._chunks else 0

    @property
    def chunks(self) -> tuple[ChunkResult, ...]:
        return self._chunks

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int = 2,
    ) -> list[VectorSearchResult]:
        """
        Cosine similarity search against every stored chunk.

        Raises:
            ValueError: If the query length differs from the index dimensions.
        """
        if not self._chunks or top_k <= 0:
            return []

        query = np.asarray(query_embedding, dtype=np.float64)
        if query.shape != (self.dimensions,):
            raise ValueError(
                f"Query has {query.size} dimensions, index has {self.dimensions}"
            )

        query_norm = np.linalg.norm(query)
        if query_norm == 0:
            scores = np.zeros(len(self._chunks))
        else:
            scores = self._matrix @ (query / query_norm)

        # Stable sort on negated scores = descending, ties in insertion order
        order = np.argsort(-scores, kind="stable")[:top_k]

        results = [
            VectorSearchResult(
                chunk=self._chunks[i],
                similarity_score=round(float(scores[i]), 4),
            )
            for i in order
        ]

        logger.debug(
            "Vector search returned %d results (top_k=%d, best=%.4f)",
            len(results), top_k, results[0].similarity_score,
        )
        return results
