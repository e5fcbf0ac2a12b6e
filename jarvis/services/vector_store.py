"""
Vector store: embeddings (HF Inference API) and the in-memory document index.

Responsibility: Embed texts via the feature-extraction pipeline, group chunks
into overlapping windows, attach page numbers, and rank windows by cosine
similarity. The index is built once per document and never mutated.
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Sequence

import httpx
import numpy as np

from jarvis.core.config import (
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    WINDOW_SIZE,
)
from jarvis.core.errors import ModelUnavailableError, ServiceUnavailableError
from jarvis.services.text_processing import Chunk, split_chunks

logger = logging.getLogger(__name__)

HF_API_URL = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)


@dataclass(frozen=True)
class Window:
    """An embedded, page-attributed group of consecutive chunks."""

    index: int               # position of the first chunk in the chunk sequence
    offset: int              # source offset of the first chunk
    sentence: str            # this chunk and the next WINDOW_SIZE - 1, space-joined
    vector: tuple[float, ...]
    page: int                # 0-based page index


@dataclass(frozen=True)
class Match:
    window: Window
    score: float


@dataclass(frozen=True)
class DocumentIndex:
    """Windows for exactly one ingested document, in chunk order."""

    source: str = ""
    chunks: tuple[Chunk, ...] = ()
    windows: tuple[Window, ...] = ()
    page_count: int = 0
    window_size: int = field(default=WINDOW_SIZE)

    def __len__(self) -> int:
        return len(self.windows)

    def covered_chunks(self, window: Window) -> range:
        """Chunk indices whose text makes up the window's sentence."""
        return range(window.index, min(window.index + self.window_size, len(self.chunks)))


def _pool(item) -> np.ndarray:
    """Reduce one feature-extraction output to a single unit vector (mean over tokens)."""
    arr = np.asarray(item, dtype=np.float64)
    while arr.ndim > 1:
        arr = arr.mean(axis=0)
    norm = float(np.linalg.norm(arr))
    if norm == 0:
        norm = 1.0
    return arr / norm


async def embed_texts(
    texts: list[str], batch_size: int | None = None
) -> list[list[float]]:
    """
    Batch embed texts using the Hugging Face feature-extraction pipeline.

    Each input is embedded independently; token-level outputs are mean-pooled.
    Returns unit-normalized vectors, one per input.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if not HF_API_KEY:
        raise ServiceUnavailableError(
            "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens"
        )

    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    all_embeddings: list[list[float]] = []

    async with httpx.AsyncClient(timeout=EMBED_API_TIMEOUT) as client:
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            payload = {"inputs": batch, "options": {"wait_for_model": True}}
            try:
                response = await client.post(HF_API_URL, json=payload, headers=headers)
                response.raise_for_status()
                result = response.json()
            except httpx.TimeoutException as e:
                logger.error("[vector_store:embed_texts] timeout after %.0fs batch=%d", EMBED_API_TIMEOUT, len(batch))
                raise ModelUnavailableError("Embedding request timed out.") from e
            except httpx.HTTPStatusError as e:
                logger.error(
                    "[vector_store:embed_texts] HF error %s: %s",
                    e.response.status_code,
                    e.response.text[:200],
                )
                raise ModelUnavailableError(f"Embedding API error: HTTP {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.error("[vector_store:embed_texts] request failed: %s", e)
                raise ModelUnavailableError(f"Embedding request failed: {e}") from e

            if not isinstance(result, list) or len(result) != len(batch):
                raise ModelUnavailableError("Embedding API returned an unexpected payload.")
            all_embeddings.extend(_pool(item).tolist() for item in result)

    logger.info("[vector_store:embed_texts] OUT vectors=%d", len(all_embeddings))
    return all_embeddings


async def embed_text(text: str) -> list[float]:
    """Embed a single text (e.g. a query)."""
    vectors = await embed_texts([text])
    return vectors[0]


def _content_start(text: str, offset: int) -> int:
    """First non-whitespace position at or after offset."""
    while offset < len(text) and text[offset].isspace():
        offset += 1
    return offset


def page_for_offset(offset: int, page_lengths: Sequence[int]) -> int:
    """
    Index of the first cumulative page length exceeding offset.

    Offsets past the end of the table belong to the last page.
    """
    if not page_lengths:
        return 0
    page = bisect.bisect_right(page_lengths, offset)
    return min(page, len(page_lengths) - 1)


async def build_index(
    text: str,
    page_lengths: Sequence[int],
    source: str = "",
    window_size: int = WINDOW_SIZE,
) -> DocumentIndex:
    """
    Chunk the text, group chunks into overlapping windows and embed each window.

    page_lengths holds cumulative character counts, one entry per page.
    A text without chunks yields an empty index and no embedding call.
    """
    chunks = split_chunks(text)
    logger.info("[vector_store:build_index] IN  source=%r text_len=%d chunks=%d", source, len(text), len(chunks))
    if not chunks:
        logger.warning("[vector_store:build_index] no chunks; index is empty")
        return DocumentIndex(source=source, page_count=len(page_lengths), window_size=window_size)

    sentences = [
        " ".join(c.text for c in chunks[i : i + window_size])
        for i in range(len(chunks))
    ]
    vectors = await embed_texts(sentences)
    windows = tuple(
        Window(
            index=i,
            offset=chunk.offset,
            sentence=sentence,
            vector=tuple(vector),
            page=page_for_offset(_content_start(text, chunk.offset), page_lengths),
        )
        for i, (chunk, sentence, vector) in enumerate(zip(chunks, sentences, vectors))
    )
    logger.info("[vector_store:build_index] OUT windows=%d pages=%d", len(windows), len(page_lengths))
    return DocumentIndex(
        source=source,
        chunks=tuple(chunks),
        windows=windows,
        page_count=len(page_lengths),
        window_size=window_size,
    )


def rank(query_vector: Sequence[float], windows: Sequence[Window], top_k: int) -> list[Match]:
    """Top-k windows by cosine similarity, descending; ties keep index order."""
    if not windows or top_k <= 0:
        return []
    matrix = np.asarray([w.vector for w in windows], dtype=np.float64)
    query = np.asarray(query_vector, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    norms[norms == 0] = 1.0
    scores = matrix @ query / norms
    order = np.argsort(-scores, kind="stable")[:top_k]
    return [Match(window=windows[i], score=float(scores[i])) for i in order]
