"""
API handlers: call the agent for a session, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging

from fastapi import HTTPException

from jarvis.agent.graph import run_agent
from jarvis.core.errors import ServiceUnavailableError
from jarvis.core.session_store import append_turn, get_history, session_lock
from jarvis.schemas.query import QueryResponse

logger = logging.getLogger(__name__)


async def handle_query(question: str, session_id: str) -> QueryResponse:
    """
    Run the agent with the session's history and record the turn.
    Queries in one session are handled one at a time.
    """
    async with session_lock(session_id):
        history = get_history(session_id)
        logger.info("[api:handle_query] IN  question=%r session_id=%s history_len=%d", question, session_id, len(history))
        try:
            result = await run_agent(question, history=history)
        except ServiceUnavailableError as e:
            logger.warning("[api:handle_query] service unavailable: %s", e.message)
            raise HTTPException(status_code=503, detail=e.message) from e
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except Exception as e:
            logger.exception("Agent failed")
            raise HTTPException(status_code=500, detail=str(e)) from e
        append_turn(session_id, result.turn)

    logger.info("[api:handle_query] OUT answer_len=%d source=%r", len(result.answer), result.source)
    return QueryResponse(
        answer=result.answer,
        thought=result.turn.thought,
        action=result.turn.action,
        observation=result.turn.observation,
        source=result.source,
        reference=result.reference,
    )
