"""SearchSession: blank-query short circuit, stale response handling, errors."""

from __future__ import annotations

import asyncio

import pytest

from zaplanje.client.api import ContentStoreError
from zaplanje.client.search import ERRORED, IDLE, RESULTS, SEARCHING, SearchSession


class FakeSearchClient:
    """Answers each query when its gate is opened."""

    def __init__(self):
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.answers: dict[str, object] = {}

    def answer(self, query: str, result, wait: bool = False) -> None:
        self.answers[query] = result
        if wait:
            self.gates[query] = asyncio.Event()

    async def search(self, query: str):
        self.calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        result = self.answers[query]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.mark.asyncio
async def test_blank_query_issues_no_request():
    client = FakeSearchClient()
    session = SearchSession(client)

    assert await session.search("   ") == []
    assert client.calls == []
    assert session.state == IDLE
    assert session.loading is False


@pytest.mark.asyncio
async def test_results_kept_in_server_order():
    client = FakeSearchClient()
    client.answer("gusle", ["b", "a", "c"])
    session = SearchSession(client)

    results = await session.search("gusle")

    assert results == ["b", "a", "c"]
    assert session.state == RESULTS
    assert client.calls == ["gusle"]


@pytest.mark.asyncio
async def test_failure_clears_results_and_records_message():
    client = FakeSearchClient()
    client.answer("ok", ["x"])
    client.answer("boom", ContentStoreError("Došlo je do greške."))
    session = SearchSession(client)
    await session.search("ok")

    await session.search("boom")

    assert session.results == []
    assert session.error == "Došlo je do greške."
    assert session.state == ERRORED
    assert session.loading is False


@pytest.mark.asyncio
async def test_stale_response_does_not_overwrite_newer_one():
    client = FakeSearchClient()
    client.answer("spor", ["stari"], wait=True)
    client.answer("brz", ["novi"])
    session = SearchSession(client)

    slow = asyncio.create_task(session.search("spor"))
    await asyncio.sleep(0)
    assert session.state == SEARCHING

    await session.search("brz")
    client.gates["spor"].set()
    await slow

    assert session.results == ["novi"]
    assert session.query == "brz"
    assert session.state == RESULTS


@pytest.mark.asyncio
async def test_clear_discards_in_flight_response():
    client = FakeSearchClient()
    client.answer("vodenica", ["rezultat"], wait=True)
    session = SearchSession(client)

    pending = asyncio.create_task(session.search("vodenica"))
    await asyncio.sleep(0)
    session.clear()
    client.gates["vodenica"].set()
    await pending

    assert session.results == []
    assert session.state == IDLE
