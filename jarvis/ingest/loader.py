# Minimal document loader. No embeddings, no chunking.
# Reads a local path or http(s) URL into per-page text: .pdf page by page, anything else as one page.

import io
import logging
from pathlib import Path
from urllib.parse import urlparse

import httpx
from pypdf import PdfReader

from jarvis.core.config import TOOLS_HTTP_TIMEOUT

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def bytes_to_pages(raw: bytes, filename: str) -> list[str]:
    """
    Convert raw file bytes to a list of page texts by extension.
    """
    ext = Path(filename).suffix.lower() if filename else ""
    if ext == ".pdf":
        return _read_pdf(raw)
    return [raw.decode("utf-8", errors="replace")]


def _read_pdf(raw: bytes) -> list[str]:
    reader = PdfReader(io.BytesIO(raw))
    return [page.extract_text() or "" for page in reader.pages]


def read_source(source: str) -> bytes:
    """Raw bytes of a local file or a URL."""
    if is_url(source):
        with httpx.Client(timeout=TOOLS_HTTP_TIMEOUT, follow_redirects=True) as client:
            response = client.get(source)
            response.raise_for_status()
            return response.content
    return Path(source).read_bytes()


def load_pages(source: str) -> list[str]:
    """
    Read a document into page texts.

    Raises OSError for unreadable paths and httpx.HTTPError for failed downloads.
    """
    source = (source or "").strip()
    if not source:
        raise ValueError("document source is required")
    raw = read_source(source)
    name = urlparse(source).path if is_url(source) else source
    pages = bytes_to_pages(raw, name)
    logger.info("[loader] %s -> %d pages", source, len(pages))
    return pages
