"""Tests for the active-stream registry."""

import asyncio

import pytest

from helpdesk.adapters.streaming.sse_channel import SseChannel
from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.domain.entities.progress_event import ProgressEvent
from helpdesk.domain.value_objects.enums import EventType


def _event():
    return ProgressEvent(type=EventType.COMMUNICATION, data={"message": "hi"})


@pytest.mark.asyncio
async def test_publish_to_missing_stream_is_not_an_error():
    registry = StreamRegistry()
    assert await registry.publish("42", _event()) is False


@pytest.mark.asyncio
async def test_publish_delivers_to_registered_channel():
    registry = StreamRegistry()
    channel = SseChannel()
    registry.register("42", channel)

    assert "42" in registry
    assert await registry.publish("42", _event()) is True

    await channel.close()
    frames = [frame async for frame in channel.stream()]
    assert len(frames) == 1


@pytest.mark.asyncio
async def test_publish_to_gone_subscriber_unregisters_it():
    registry = StreamRegistry()
    channel = SseChannel()
    registry.register("42", channel)
    channel.disconnect()

    assert await registry.publish("42", _event()) is False
    assert "42" not in registry


def test_unregister_only_removes_the_same_sink():
    registry = StreamRegistry()
    old, new = SseChannel(), SseChannel()
    registry.register("42", old)
    registry.register("42", new)

    registry.unregister("42", old)
    assert registry.get("42") is new

    registry.unregister("42", new)
    assert len(registry) == 0


def test_unregister_unknown_id_is_ignored():
    StreamRegistry().unregister("nope")


@pytest.mark.asyncio
async def test_shutdown_closes_streams_and_cancels_tasks():
    registry = StreamRegistry()
    channel = SseChannel()
    registry.register("1", channel)

    task = asyncio.create_task(asyncio.sleep(10))
    registry.track(task)

    await registry.shutdown()

    assert channel.closed
    assert task.cancelled()
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_finished_tasks_are_released():
    registry = StreamRegistry()

    async def work():
        return 1

    task = asyncio.create_task(work())
    registry.track(task)
    await task
    await asyncio.sleep(0)

    assert task not in registry._tasks
