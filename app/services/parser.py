# =============================================================================
# PDF Parser — Docling Document Intelligence
# =============================================================================
#
# Parses the FAQ PDF using IBM's Docling library and returns its text
# grouped by page.
#
# DESIGN DECISION: One text block per page.
# The knowledge base splits each page independently, so chunks never span
# a page break. Keeping page grouping here lets the chunker stay a thin
# wrapper over the splitter library.
#
# DESIGN DECISION: We iterate items (not export_to_markdown()) because
# export_to_markdown() loses page numbers entirely.
#
# DESIGN DECISION: Our own dataclasses (ParsedPage, ParsedDocument) rather
# than Docling types downstream. If we switch parsers, only this module
# changes.
# =============================================================================

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from docling.datamodel.base_models import InputFormat
from docling.datamodel.pipeline_options import PdfPipelineOptions
from docling.document_converter import DocumentConverter, PdfFormatOption
from docling_core.types.doc.labels import DocItemLabel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class ParsedPage:
    """The text of a single PDF page, in reading order."""

    page_number: int  # 1-indexed
    text: str


@dataclass
class ParsedDocument:
    """The complete result of parsing a PDF document."""

    pages: list[ParsedPage] = field(default_factory=list)
    filename: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)


_TEXT_LABELS = {
    DocItemLabel.TITLE,
    DocItemLabel.SECTION_HEADER,
    DocItemLabel.TEXT,
    DocItemLabel.LIST_ITEM,
    DocItemLabel.CAPTION,
    DocItemLabel.FOOTNOTE,
}


# ---------------------------------------------------------------------------
# Docling Converter — Lazy Singleton
# ---------------------------------------------------------------------------
# Initialization loads ML models into memory (~2-5 seconds on first use).
# ---------------------------------------------------------------------------

_converter: DocumentConverter | None = None


def _get_converter() -> DocumentConverter:
    """Lazily initialize and cache the Docling DocumentConverter."""
    global _converter
    if _converter is None:
        logger.info(
            "Initializing Docling DocumentConverter "
            "(first use, may take a few seconds)..."
        )

        # The FAQ is born-digital text; OCR only slows conversion down.
        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_table_structure = True
        pipeline_options.do_ocr = False

        _converter = DocumentConverter(
            format_options={
                InputFormat.PDF: PdfFormatOption(
                    pipeline_options=pipeline_options,
                ),
            }
        )
        logger.info("Docling DocumentConverter initialized")
    return _converter


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_pdf(file_path: str) -> ParsedDocument:
    """
    Parse a PDF file using Docling and return its text grouped by page.

    Args:
        file_path: Path to the PDF file on disk.

    Returns:
        ParsedDocument with one ParsedPage per page that contains text,
        ordered by page number.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: If Docling fails to convert the document.

    Synchronous and CPU-bound; async callers should run it with
    asyncio.to_thread().
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"PDF not found: {file_path}")

    logger.info("Parsing PDF: %s", path.name)
    converter = _get_converter()

    try:
        result = converter.convert(str(path))
    except Exception as exc:
        raise RuntimeError(
            f"Docling failed to parse '{path.name}': {exc}"
        ) from exc

    page_blocks: dict[int, list[str]] = defaultdict(list)

    for item, _level in result.document.iterate_items():
        # item.prov[0] is the primary location; items without provenance
        # are attributed to page 1.
        page_no = 1
        if getattr(item, "prov", None):
            page_no = item.prov[0].page_no or 1

        label = getattr(item, "label", None)
        if label == DocItemLabel.TABLE:
            text = _table_to_text(item)
        elif label in _TEXT_LABELS:
            text = getattr(item, "text", "").strip()
        else:
            continue

        if text:
            page_blocks[page_no].append(text)

    pages = [
        ParsedPage(page_number=page_no, text="\n".join(blocks))
        for page_no, blocks in sorted(page_blocks.items())
    ]

    logger.info(
        "Parsed '%s': %d pages with text, %d characters",
        path.name,
        len(pages),
        sum(len(p.text) for p in pages),
    )

    return ParsedDocument(pages=pages, filename=path.name)


def _table_to_text(table_item: object) -> str:
    """
    Convert a Docling TableItem to markdown text.

    Attempts export_to_dataframe() → pandas to_markdown(), falling back to
    the item's plain text.
    """
    try:
        if hasattr(table_item, "export_to_dataframe"):
            df = table_item.export_to_dataframe()
            return df.to_markdown(index=False)
    except Exception as exc:
        logger.warning("Table export to DataFrame failed: %s", exc)

    text = getattr(table_item, "text", "")
    return text.strip() if text else ""
