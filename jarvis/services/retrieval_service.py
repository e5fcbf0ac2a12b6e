"""
Retrieval: semantic search over the document index and passage-grounded answers.

Responsibility: Rank windows for a query, fall back to the model's own memory
when nothing is relevant enough, otherwise answer from the assembled passage
and cite the single window that best supports that answer.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from jarvis.agent.llm import complete
from jarvis.agent.parser import parse
from jarvis.core.config import RELEVANCE_THRESHOLD, SEARCH_TOP_K
from jarvis.core.errors import EmptyIndexError
from jarvis.services.vector_store import DocumentIndex, Match, Window, embed_text, rank

logger = logging.getLogger(__name__)

FROM_MEMORY = "From memory"

PASSAGE_PROMPT = """You are an expert in retrieving information.
You are given a passage, and then you respond to a question.
Avoid stating your personal opinion. Avoid making other commentary.

Here is the passage:

{passage}

(End of passage)

Now use the above passage exclusively to answer this.

Question: {question}
Thought: Let me use the above passage to find the answer.
Answer:"""


@dataclass(frozen=True)
class RetrievalResult:
    result: str     # answer text
    source: str     # page/score provenance, or FROM_MEMORY
    reference: str  # passage text the answer was drawn from, or FROM_MEMORY


async def search(query: str, windows: Sequence[Window], top_k: int = SEARCH_TOP_K) -> list[Match]:
    """
    Embed the query and return the top_k windows by cosine similarity.
    """
    logger.info("[retrieval:search] IN  query=%r windows=%d top_k=%d", query, len(windows), top_k)
    if not windows:
        return []
    query_vector = await embed_text(query)
    matches = rank(query_vector, windows, top_k)
    logger.info(
        "[retrieval:search] OUT indices=%s scores=%s",
        [m.window.index for m in matches],
        [round(m.score, 4) for m in matches],
    )
    return matches


def assemble_passage(index: DocumentIndex, matches: Sequence[Match]) -> str:
    """Join the text of every chunk covered by the matches, once each, in document order."""
    covered: set[int] = set()
    for m in matches:
        covered.update(index.covered_chunks(m.window))
    return " ".join(index.chunks[i].text for i in sorted(covered))


def format_source(index: DocumentIndex, match: Match) -> str:
    """Human-readable citation: page (1-indexed) and relevance as a percentage."""
    location = f"page {match.window.page + 1} (relevance {round(match.score * 100)}%)"
    if index.source:
        return f"{index.source}, {location}"
    return location


async def retrieve(question: str, hint: str, index: DocumentIndex) -> RetrievalResult:
    """
    Answer the question from the document, or return the hint when no window is relevant.

    hint is the model's own guess; it sharpens the query and is the fallback answer.
    """
    if len(index) == 0:
        logger.warning("[retrieval:retrieve] no document indexed")
        raise EmptyIndexError()

    query = f"{question} {hint}".strip()
    logger.info("[retrieval:retrieve] IN  question=%r hint=%r", question, hint)
    matches = await search(query, index.windows)
    best = matches[0] if matches else None
    if best is None or best.score < RELEVANCE_THRESHOLD:
        logger.info(
            "[retrieval:retrieve] best score %s below %.2f; answering from memory",
            None if best is None else round(best.score, 4),
            RELEVANCE_THRESHOLD,
        )
        return RetrievalResult(result=hint, source=FROM_MEMORY, reference=FROM_MEMORY)

    passage = assemble_passage(index, matches)
    prompt = PASSAGE_PROMPT.format(passage=passage, question=question)
    response = await complete(prompt)
    answer = parse(f"{prompt} {response}").get("answer", "")
    logger.info("[retrieval:retrieve] passage_len=%d answer=%r", len(passage), answer)

    # Re-rank the windows already used, by the answer, to pick the citation.
    cited = await search(answer or hint, [m.window for m in matches], top_k=1)
    citation = cited[0] if cited else best
    source = format_source(index, citation)
    logger.info("[retrieval:retrieve] OUT source=%r", source)
    return RetrievalResult(result=answer, source=source, reference=passage)
