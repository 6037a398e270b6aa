# tests/v1/test_changes_stream.py
"""Tests for the change stream endpoint's task handling."""

import asyncio

import pytest
from fastapi import WebSocketDisconnect

from quorum.api.v1.endpoints.changes import watch_topic
from quorum.services.changes import QUESTIONS_TOPIC, ChangeFeed


class FakeSocket:
    """Minimal WebSocket stand-in driven by the test."""

    def __init__(self, *, fail_after: int | None = None) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail_after = fail_after
        self.closed_by_client = asyncio.Event()

    async def accept(self) -> None:
        return None

    async def send_json(self, data: dict[str, str]) -> None:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def receive_text(self) -> str:
        await self.closed_by_client.wait()
        raise WebSocketDisconnect(code=1000)


async def _wait_subscribed(feed: ChangeFeed, socket: FakeSocket) -> None:
    for _ in range(100):
        if feed.subscriber_count(QUESTIONS_TOPIC) == 1 and socket.sent:
            return
        await asyncio.sleep(0.01)
    raise AssertionError("stream never subscribed")


@pytest.mark.asyncio
async def test_stream_forwards_events_until_client_leaves() -> None:
    feed = ChangeFeed()
    socket = FakeSocket()
    stream = asyncio.create_task(watch_topic(socket, QUESTIONS_TOPIC, feed))
    await _wait_subscribed(feed, socket)

    feed.publish(QUESTIONS_TOPIC, "created")
    for _ in range(100):
        if len(socket.sent) == 2:
            break
        await asyncio.sleep(0.01)
    socket.closed_by_client.set()
    await asyncio.wait_for(stream, timeout=1)

    assert socket.sent == [
        {"topic": "questions", "kind": "subscribed"},
        {"topic": "questions", "kind": "created"},
    ]
    assert feed.subscriber_count(QUESTIONS_TOPIC) == 0


@pytest.mark.asyncio
async def test_stream_ends_when_sending_fails() -> None:
    feed = ChangeFeed()
    socket = FakeSocket(fail_after=1)
    stream = asyncio.create_task(watch_topic(socket, QUESTIONS_TOPIC, feed))
    await _wait_subscribed(feed, socket)

    feed.publish(QUESTIONS_TOPIC, "created")

    # Returns without the client disconnecting and without raising.
    await asyncio.wait_for(stream, timeout=1)
    assert feed.subscriber_count(QUESTIONS_TOPIC) == 0
