#!/usr/bin/env python3
"""
Ask the agent questions from the command line.

Indexes the document (if given), then answers each question in order,
sharing one conversation history so follow-ups can refer to earlier answers.

Run from project root:

    python scripts/ask.py --document data/manual.pdf "How do I reset the device?"
    python scripts/ask.py "What is the capital of France?" "And of Italy?"

Requires the completion service (LLAMA_API_URL) and, with --document,
HF_API_KEY for embeddings.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Project root on path so "jarvis" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from jarvis.agent.graph import run_agent
from jarvis.core.config import HISTORY_MAX_TURNS, LOG_LEVEL
from jarvis.core.errors import ServiceUnavailableError
from jarvis.services.ingestion_service import ingest_document


async def _run(document: str | None, questions: list[str]) -> int:
    if document:
        index = await ingest_document(document)
        print(f"Indexed {index.source}: {index.page_count} pages, {len(index)} windows.")

    history = []
    for question in questions:
        try:
            result = await run_agent(question, history=history)
        except ServiceUnavailableError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        history = (history + [result.turn])[-HISTORY_MAX_TURNS:]
        print(f"Q: {question}")
        print(f"A: {result.answer}")
        print(f"   source: {result.source}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask the retrieval-augmented agent.")
    parser.add_argument(
        "--document",
        help="PDF or text file (path or URL) to index before answering.",
    )
    parser.add_argument("questions", nargs="+", help="One or more questions, answered in order.")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    sys.exit(asyncio.run(_run(args.document, args.questions)))


if __name__ == "__main__":
    main()
