"""
Agent actions: parsing the model's Action line and executing it.

Actions: lookup (search the indexed document), exchange (currency rate via
open.er-api.com). Anything else parses as UNKNOWN and is left to the reasoner.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

import httpx

from jarvis.core.config import EXCHANGE_API_URL, TOOLS_HTTP_TIMEOUT
from jarvis.services.retrieval_service import RetrievalResult, retrieve
from jarvis.services.vector_store import DocumentIndex

logger = logging.getLogger(__name__)

EXCHANGE_SOURCE = "open.er-api.com exchange rates"


class ActionKind(str, Enum):
    LOOKUP = "lookup"
    EXCHANGE = "exchange"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Action:
    """A parsed `name: argument` action line."""

    kind: ActionKind
    argument: str
    name: str = ""  # verb as written by the model

    @classmethod
    def lookup(cls, terms: str) -> "Action":
        return cls(kind=ActionKind.LOOKUP, argument=terms, name=ActionKind.LOOKUP.value)


def parse_action(text: str) -> Action | None:
    """
    Parse an action value such as "lookup: capital of France".

    Returns None when there is no `name:` prefix. Verbs other than lookup and
    exchange map to ActionKind.UNKNOWN.
    """
    text = (text or "").strip()
    name, sep, argument = text.partition(":")
    name = name.strip()
    if not sep or not name:
        return None
    verb = name.lower()
    if verb == ActionKind.LOOKUP.value:
        kind = ActionKind.LOOKUP
    elif verb == ActionKind.EXCHANGE.value:
        kind = ActionKind.EXCHANGE
    else:
        kind = ActionKind.UNKNOWN
    return Action(kind=kind, argument=argument.strip(), name=name)


def _currency_pair(argument: str) -> tuple[str, str] | None:
    """"USD EUR", "USD to EUR" or "USD/EUR" -> ("USD", "EUR")."""
    tokens = [t for t in argument.replace("/", " ").split() if t.lower() != "to"]
    if len(tokens) < 2:
        return None
    return tokens[0].strip(" .,").upper(), tokens[1].strip(" .,").upper()


async def _fetch_rates(base: str) -> dict:
    """GET the latest rates for base; returns the decoded JSON body."""
    url = f"{EXCHANGE_API_URL}/{base}"
    logger.info("[tools:exchange] fetching %s", url)
    async with httpx.AsyncClient(timeout=TOOLS_HTTP_TIMEOUT) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()


async def exchange(from_currency: str, to_currency: str) -> str:
    """Current rate from one currency to another as a sentence, rate rounded up."""
    from_currency = (from_currency or "").strip().upper()
    to_currency = (to_currency or "").strip().upper()
    if not from_currency or not to_currency:
        return "Error: two currency codes are required."
    try:
        data = await _fetch_rates(from_currency)
    except httpx.TimeoutException:
        return "Exchange API request timed out."
    except httpx.HTTPStatusError as e:
        return f"Exchange API error: returned {e.response.status_code}."
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[tools:exchange] failed: %s", e)
        return f"Exchange lookup failed: {e}"

    rate = (data.get("rates") or {}).get(to_currency)
    if rate is None:
        return f"No exchange rate found for {from_currency} to {to_currency}."
    updated = data.get("time_last_update_utc") or "the latest update"
    return f"As per {updated}, 1 {from_currency} is equal to {math.ceil(rate)} {to_currency}."


async def execute_action(
    action: Action, question: str, hint: str, index: DocumentIndex
) -> RetrievalResult:
    """
    Run one action and return its observation with provenance.

    lookup answers from the document (or the hint, when nothing is relevant);
    exchange queries the rate service. UNKNOWN yields an observation saying so.
    """
    logger.info("[tools] execute_action kind=%s argument=%r", action.kind.value, action.argument)

    if action.kind is ActionKind.LOOKUP:
        # The query is the user's question plus the hint; the model's lookup terms are
        # only recorded in the turn.
        return await retrieve(question, hint, index)

    if action.kind is ActionKind.EXCHANGE:
        pair = _currency_pair(action.argument)
        if pair is None:
            result = f"Error: expected two currency codes, got {action.argument!r}."
            return RetrievalResult(result=result, source=EXCHANGE_SOURCE, reference="")
        result = await exchange(*pair)
        logger.info("[tools] exchange pair=%s result=%r", pair, result)
        return RetrievalResult(
            result=result,
            source=EXCHANGE_SOURCE,
            reference=f"{EXCHANGE_API_URL}/{pair[0]}",
        )

    return RetrievalResult(result=f"Unknown action: {action.name}", source="", reference="")
