"""
Unit tests for agent actions: parsing, currency exchange, dispatch.

The exchange-rate API and retrieval are mocked.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from jarvis.agent.tools import (
    EXCHANGE_SOURCE,
    Action,
    ActionKind,
    _currency_pair,
    exchange,
    execute_action,
    parse_action,
)
from jarvis.services.retrieval_service import RetrievalResult
from jarvis.services.vector_store import DocumentIndex

RATES = {"rates": {"EUR": 0.92, "JPY": 149.3}, "time_last_update_utc": "Mon, 01 Jan 2024 00:02:31 +0000"}


class TestParseAction:
    def test_lookup(self) -> None:
        action = parse_action("lookup: capital of France.")
        assert action == Action(kind=ActionKind.LOOKUP, argument="capital of France.", name="lookup")

    def test_exchange(self) -> None:
        action = parse_action("exchange: USD EUR")
        assert action.kind is ActionKind.EXCHANGE
        assert action.argument == "USD EUR"

    def test_verb_is_case_insensitive(self) -> None:
        assert parse_action("Lookup: x").kind is ActionKind.LOOKUP

    def test_unknown_verb(self) -> None:
        action = parse_action("search: warranty terms")
        assert action.kind is ActionKind.UNKNOWN
        assert action.name == "search"

    def test_without_separator_is_none(self) -> None:
        assert parse_action("none") is None
        assert parse_action("") is None
        assert parse_action(": orphan") is None

    def test_lookup_constructor(self) -> None:
        assert Action.lookup("q") == Action(kind=ActionKind.LOOKUP, argument="q", name="lookup")


class TestCurrencyPair:
    @pytest.mark.parametrize("argument", ["USD EUR", "usd to eur", "USD/EUR", "USD EUR."])
    def test_accepted_forms(self, argument: str) -> None:
        assert _currency_pair(argument) == ("USD", "EUR")

    def test_single_code_is_rejected(self) -> None:
        assert _currency_pair("USD") is None


class TestExchange:
    @pytest.mark.asyncio
    async def test_rate_is_rounded_up(self) -> None:
        with patch("jarvis.agent.tools._fetch_rates", new=AsyncMock(return_value=RATES)) as fetch:
            result = await exchange("usd", "jpy")
        assert result == "As per Mon, 01 Jan 2024 00:02:31 +0000, 1 USD is equal to 150 JPY."
        fetch.assert_awaited_once_with("USD")

    @pytest.mark.asyncio
    async def test_unknown_target_currency(self) -> None:
        with patch("jarvis.agent.tools._fetch_rates", new=AsyncMock(return_value=RATES)):
            result = await exchange("USD", "XYZ")
        assert result == "No exchange rate found for USD to XYZ."

    @pytest.mark.asyncio
    async def test_timeout_is_reported_as_observation(self) -> None:
        fetch = AsyncMock(side_effect=httpx.ConnectTimeout("slow"))
        with patch("jarvis.agent.tools._fetch_rates", new=fetch):
            assert await exchange("USD", "EUR") == "Exchange API request timed out."

    @pytest.mark.asyncio
    async def test_http_error_is_reported_as_observation(self) -> None:
        request = httpx.Request("GET", "https://open.er-api.com/v6/latest/ABC")
        response = httpx.Response(404, request=request)
        fetch = AsyncMock(side_effect=httpx.HTTPStatusError("not found", request=request, response=response))
        with patch("jarvis.agent.tools._fetch_rates", new=fetch):
            assert await exchange("ABC", "EUR") == "Exchange API error: returned 404."

    @pytest.mark.asyncio
    async def test_missing_code(self) -> None:
        assert await exchange("", "EUR") == "Error: two currency codes are required."


class TestExecuteAction:
    @pytest.mark.asyncio
    async def test_lookup_delegates_to_retrieve(self) -> None:
        index = DocumentIndex()
        expected = RetrievalResult(result="Two years.", source="manual.pdf, page 3 (relevance 81%)", reference="...")
        retrieve = AsyncMock(return_value=expected)
        with patch("jarvis.agent.tools.retrieve", new=retrieve):
            result = await execute_action(Action.lookup("warranty"), "How long?", "a year", index)
        assert result == expected
        retrieve.assert_awaited_once_with("How long?", "a year", index)

    @pytest.mark.asyncio
    async def test_lookup_terms_do_not_replace_the_question(self) -> None:
        index = DocumentIndex()
        retrieve = AsyncMock(return_value=RetrievalResult(result="r", source="s", reference="ref"))
        with patch("jarvis.agent.tools.retrieve", new=retrieve):
            await execute_action(parse_action("lookup: battery life"), "How long is the warranty?", "", index)
        query_args = retrieve.await_args.args
        assert query_args[0] == "How long is the warranty?"
        assert "battery life" not in query_args

    @pytest.mark.asyncio
    async def test_exchange_cites_the_rate_service(self) -> None:
        with patch("jarvis.agent.tools._fetch_rates", new=AsyncMock(return_value=RATES)):
            result = await execute_action(parse_action("exchange: USD EUR"), "q", "", DocumentIndex())
        assert result.result.endswith("1 USD is equal to 1 EUR.")
        assert result.source == EXCHANGE_SOURCE
        assert result.reference == "https://open.er-api.com/v6/latest/USD"

    @pytest.mark.asyncio
    async def test_exchange_with_bad_argument(self) -> None:
        fetch = AsyncMock()
        with patch("jarvis.agent.tools._fetch_rates", new=fetch):
            result = await execute_action(parse_action("exchange: dollars"), "q", "", DocumentIndex())
        assert result.result.startswith("Error: expected two currency codes")
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_action_is_reported(self) -> None:
        result = await execute_action(parse_action("dance: now"), "q", "", DocumentIndex())
        assert result.result == "Unknown action: dance"
