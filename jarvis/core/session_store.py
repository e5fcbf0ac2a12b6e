"""
In-memory conversation store. Keyed by session_id; history is never persisted.

Each session keeps at most HISTORY_MAX_TURNS turns (oldest dropped first) and
owns an asyncio.Lock so queries within one session are handled one at a time.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass

from jarvis.core.config import HISTORY_MAX_TURNS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTurn:
    """One completed Question/Thought/Action/Observation/Answer exchange."""

    question: str
    thought: str = ""
    action: str = ""
    observation: str = ""
    answer: str = ""


# session_id -> list of turns, oldest first
_sessions: dict[str, list[ConversationTurn]] = {}
_session_locks: dict[str, asyncio.Lock] = {}
_lock = threading.Lock()


def get_history(session_id: str) -> list[ConversationTurn]:
    """Return conversation history for the session (copy so caller cannot mutate store)."""
    if not session_id or not isinstance(session_id, str):
        logger.info("[session_store:get_history] IN  session_id=%r -> empty", session_id)
        return []
    with _lock:
        out = list(_sessions.get(session_id) or [])
    logger.info("[session_store:get_history] IN  session_id=%s OUT turns=%d", session_id[:16], len(out))
    return out


def append_turn(session_id: str, turn: ConversationTurn, max_turns: int = HISTORY_MAX_TURNS) -> None:
    """Append one turn to the session's history, dropping the oldest beyond max_turns."""
    if not session_id or not isinstance(session_id, str):
        logger.info("[session_store:append_turn] skip invalid session_id=%r", session_id)
        return
    with _lock:
        turns = _sessions.setdefault(session_id, [])
        turns.append(turn)
        if len(turns) > max_turns:
            del turns[: len(turns) - max_turns]
        kept = len(turns)
    logger.info("[session_store:append_turn] session_id=%s turns=%d", session_id[:16], kept)


def session_lock(session_id: str) -> asyncio.Lock:
    """Lock serializing query handling for one session."""
    with _lock:
        lock = _session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            _session_locks[session_id] = lock
    return lock


def clear_sessions() -> None:
    """Drop every session and its history."""
    with _lock:
        _sessions.clear()
        _session_locks.clear()
