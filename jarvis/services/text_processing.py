"""
Text processing for RAG: cleaning and sentence chunking.

Cleaning reduces noise and encoding inconsistencies so embeddings and retrieval
focus on content. Chunks are the smallest sentence-bounded units; the indexer
groups them into overlapping windows.
"""

import unicodedata
from dataclasses import dataclass

SENTENCE_TERMINALS = frozenset(".!?")


@dataclass(frozen=True)
class Chunk:
    """A sentence-bounded span of the source text."""

    offset: int  # position of the span's first character in the source text
    text: str    # span text, trimmed


def clean_text(text: str) -> str:
    """
    Normalize and clean one page of raw document text.

    NFKC-normalizes, trims each line, collapses consecutive duplicate lines
    (running headers split across extraction) and keeps at most one blank line
    between paragraphs.
    """
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    lines = [line.strip() for line in text.splitlines()]
    result: list[str] = []
    for line in lines:
        if result and result[-1] == line:
            continue
        result.append(line)
    return "\n".join(result).strip()


def split_chunks(text: str) -> list[Chunk]:
    """
    Split text into sentence chunks with their source offsets.

    A boundary falls right after '.', '!' or '?' when the next character is
    whitespace. The terminal stays in the closing chunk and the next chunk
    starts at the following character. Trailing text without a terminal is
    kept as the last chunk.
    """
    if not text:
        return []

    chunks: list[Chunk] = []
    start = 0
    last = len(text) - 1
    for pos, char in enumerate(text):
        if char in SENTENCE_TERMINALS and pos < last and text[pos + 1].isspace():
            _append_chunk(chunks, text, start, pos + 1)
            start = pos + 1
    _append_chunk(chunks, text, start, len(text))
    return chunks


def _append_chunk(chunks: list[Chunk], text: str, start: int, end: int) -> None:
    piece = text[start:end].strip()
    if piece:
        chunks.append(Chunk(offset=start, text=piece))
