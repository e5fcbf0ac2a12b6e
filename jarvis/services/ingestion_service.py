"""
Document ingestion: load, clean and index the single document served by the agent.

Responsibility: Orchestrate reading the source (path or URL), per-page cleaning,
page-length bookkeeping and index building. Holds the process-wide index.
Called by the API startup and the CLI; no HTTP or FastAPI here.
"""

import asyncio
import logging
from pathlib import Path
from urllib.parse import urlparse

from jarvis.ingest.loader import is_url, load_pages
from jarvis.services.text_processing import clean_text
from jarvis.services.vector_store import DocumentIndex, build_index

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n"

_index: DocumentIndex = DocumentIndex()


def get_index() -> DocumentIndex:
    """The current document index (empty until a document is ingested)."""
    return _index


def set_index(index: DocumentIndex) -> None:
    global _index
    _index = index


def source_name(source: str) -> str:
    """Short display name for a path or URL (its file name)."""
    path = urlparse(source).path if is_url(source) else source
    return Path(path).name or source


def join_pages(pages: list[str]) -> tuple[str, list[int]]:
    """
    Join cleaned pages into one text and return cumulative page lengths.

    Each cumulative length counts the separator that follows its page, so every
    offset inside page k is below lengths[k].
    """
    lengths: list[int] = []
    total = 0
    for page in pages:
        total += len(page) + len(PAGE_SEPARATOR)
        lengths.append(total)
    return PAGE_SEPARATOR.join(pages), lengths


async def ingest_document(source: str) -> DocumentIndex:
    """
    Read, clean and index the document; the result replaces the process-wide index.
    """
    logger.info("[ingestion:ingest_document] IN  source=%r", source)
    # File and PDF parsing are blocking; keep them off the event loop.
    raw_pages = await asyncio.to_thread(load_pages, source)
    pages = [clean_text(p) for p in raw_pages]
    text, lengths = join_pages(pages)
    index = await build_index(text, lengths, source=source_name(source))
    set_index(index)
    logger.info(
        "[ingestion:ingest_document] OUT pages=%d chunks=%d windows=%d",
        len(pages), len(index.chunks), len(index),
    )
    return index


def describe_index() -> dict:
    """Summary of the current index for introspection."""
    index = get_index()
    return {
        "source": index.source,
        "pages": index.page_count,
        "chunks": len(index.chunks),
        "windows": len(index),
    }
