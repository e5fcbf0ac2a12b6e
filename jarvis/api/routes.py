"""
API route aggregator: register endpoints; no logic — only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from jarvis.api.handlers import handle_query
from jarvis.core.config import DEFAULT_SESSION_ID
from jarvis.schemas.query import QueryRequest, QueryResponse
from jarvis.services.ingestion_service import describe_index

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "pico-jarvis running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Document ---

@router.get("/document", tags=["document"], summary="Describe the indexed document")
def get_document() -> dict:
    """Source name and page/chunk/window counts of the current index."""
    return describe_index()


# --- Query ---

@router.get(
    "/chat",
    response_class=PlainTextResponse,
    tags=["query"],
    summary="Ask a question (plain-text answer, shared session)",
    description="Answer as plain text. Uses the default session's history. 503 when the model or document is unavailable.",
)
async def chat(question: str = Query(..., min_length=1)) -> str:
    response = await handle_query(question, DEFAULT_SESSION_ID)
    return response.answer


@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Query the agent",
    description="Send a question; receive answer, thought, action, observation and provenance. 400 on invalid input, 503 when the model or document is unavailable, 500 on agent failure.",
)
async def post_query(body: QueryRequest) -> QueryResponse:
    logger.info("[api:post_query] IN  question=%r session_id=%s", body.question, body.session_id)
    return await handle_query(body.question, body.session_id)
