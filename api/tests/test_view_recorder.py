"""ViewRecorder: deferred, cancellable, at most one request."""

from __future__ import annotations

import asyncio
import uuid
from types import SimpleNamespace

import pytest

from zaplanje.client.api import ContentStoreError
from zaplanje.client.views import ARMED, RECORDED, UNRECORDED, ViewRecorder

DELAY = 0.05


class FakeViewClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple] = []

    async def increment_view(self, post_id, user_agent=None, referrer=None):
        self.calls.append((post_id, user_agent, referrer))
        if self.fail:
            raise ContentStoreError("Sadržaj nije pronađen.")
        return 42


@pytest.fixture
def post():
    return SimpleNamespace(id=uuid.uuid4())


@pytest.mark.asyncio
async def test_records_once_after_delay(post):
    client = FakeViewClient()
    recorder = ViewRecorder(client, delay=DELAY, user_agent="pytest", referrer="https://zaplanje.rs/")

    recorder.on_post_loaded(post)
    assert recorder.state == ARMED
    assert client.calls == []

    await recorder.wait()

    assert recorder.state == RECORDED
    assert recorder.view_count == 42
    assert client.calls == [(post.id, "pytest", "https://zaplanje.rs/")]

    recorder.on_post_loaded(post)
    await asyncio.sleep(DELAY * 2)
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_teardown_before_delay_sends_nothing(post):
    client = FakeViewClient()
    recorder = ViewRecorder(client, delay=DELAY)

    recorder.on_post_loaded(post)
    await asyncio.sleep(DELAY * 0.5)
    await recorder.teardown()
    await asyncio.sleep(DELAY * 2)

    assert client.calls == []
    assert recorder.state == UNRECORDED


@pytest.mark.asyncio
async def test_rerender_while_armed_does_not_rearm(post):
    client = FakeViewClient()
    recorder = ViewRecorder(client, delay=DELAY)

    recorder.on_post_loaded(post)
    recorder.on_post_loaded(post)
    await recorder.wait()

    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_failure_is_swallowed_and_not_retried(post):
    client = FakeViewClient(fail=True)
    recorder = ViewRecorder(client, delay=DELAY)

    recorder.on_post_loaded(post)
    await recorder.wait()

    assert recorder.state == UNRECORDED
    recorder.on_post_loaded(post)
    await asyncio.sleep(DELAY * 2)
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_new_recorder_counts_again(post):
    client = FakeViewClient()

    for _ in range(2):
        recorder = ViewRecorder(client, delay=DELAY)
        recorder.on_post_loaded(post)
        await recorder.wait()

    assert len(client.calls) == 2


def test_default_delay_is_two_seconds():
    assert ViewRecorder(FakeViewClient()).delay == 2.0
