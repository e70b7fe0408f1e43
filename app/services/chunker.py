# =============================================================================
# Sentence-Boundary Text Chunker
# =============================================================================
#
# Splits parsed pages into overlapping character-based chunks using
# LangChain's CharacterTextSplitter.
#
# ALGORITHM (delegated to the splitter):
# 1. Split the page text on the separator (". ")
# 2. Greedily re-merge the pieces until adding the next one would exceed
#    chunk_size characters
# 3. Start the next chunk from the trailing pieces of the previous one,
#    keeping up to chunk_overlap characters of shared tail
#
# DESIGN DECISION: Split each page separately.
# A chunk never spans two pages, so its page_number is unambiguous.
#
# DESIGN DECISION: Characters, not tokens.
# Sizes are measured with len() so chunking is purely local: ingestion
# needs no tokenizer files and gives the same chunks on every machine.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

from langchain_text_splitters import CharacterTextSplitter

from app.services.parser import ParsedDocument

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChunkResult:
    """
    A single chunk ready for embedding.

    Immutable: chunks are created once at ingestion and shared by every
    request for the lifetime of the process.
    """

    content: str  # The text content of this chunk
    page_number: int  # Page this chunk came from (1-indexed)
    chunk_index: int  # 0-indexed position within the document


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def chunk_document(
    parsed_doc: ParsedDocument,
    separator: str = ". ",
    chunk_size: int = 1000,
    chunk_overlap: int = 500,
) -> list[ChunkResult]:
    """
    Split a parsed document into overlapping chunks, page by page.

    Args:
        parsed_doc: The parsed document from the parser.
        separator: Literal string the text is split on.
        chunk_size: Target maximum characters per chunk. A single sentence
            longer than this becomes its own oversized chunk.
        chunk_overlap: Maximum characters shared by consecutive chunks.

    Returns:
        List of ChunkResult in document order. Deterministic: the same
        document always yields the same chunks.

    Raises:
        ValueError: If chunk_overlap is larger than chunk_size.
    """
    if not parsed_doc.pages:
        logger.warning("No pages to chunk in '%s'", parsed_doc.filename)
        return []

    splitter = CharacterTextSplitter(
        separator=separator,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
    )

    chunks: list[ChunkResult] = []
    for page in parsed_doc.pages:
        for text in splitter.split_text(page.text):
            chunks.append(ChunkResult(
                content=text,
                page_number=page.page_number,
                chunk_index=len(chunks),
            ))

    logger.info(
        "Chunked '%s' into %d chunks (chunk_size=%d, overlap=%d)",
        parsed_doc.filename, len(chunks), chunk_size, chunk_overlap,
    )

    return chunks
