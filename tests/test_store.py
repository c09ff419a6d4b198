"""Tests for rad.tui.store."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from rad.tui.channel import Channel
from rad.tui.store import Exit, Store, StateValue
from rad.tui.task import Terminator


class Recorder:
    """A state that records every message and quits on ``"quit"``."""

    def __init__(self) -> None:
        self.messages: list[Any] = []
        self.ticks = 0

    def update(self, message: Any) -> Exit[Any] | None:
        if message == "quit":
            return Exit(list(self.messages))
        self.messages.append(message)
        return None


class Ticking(Recorder):
    def tick(self) -> None:
        self.ticks += 1


def make_store(tick_rate: float = 1.0) -> tuple[Store, list[Any]]:
    published: list[Any] = []
    return Store(published.append, tick_rate=tick_rate), published


class TestStoreRun:
    @pytest.mark.asyncio
    async def test_applies_messages_in_order_and_exits(self) -> None:
        channel: Channel[Any] = Channel()
        for message in ("a", "b", "c", "quit", "ignored"):
            channel.tx.send(message)
        store, published = make_store()
        terminator = Terminator()

        interrupted = await store.run(Recorder(), channel.receiver(), terminator)

        assert interrupted is not None
        assert not interrupted.by_signal
        assert interrupted.payload == ["a", "b", "c"]
        assert terminator.reason == interrupted
        assert store.applied == 4

    @pytest.mark.asyncio
    async def test_publishes_initial_state_and_each_change(self) -> None:
        channel: Channel[Any] = Channel()
        channel.tx.send(1)
        channel.tx.send(2)
        channel.tx.send("quit")
        store, published = make_store()

        await store.run(Recorder(), channel.receiver(), Terminator())

        assert [p.messages for p in published] == [[], [1], [1, 2]]

    @pytest.mark.asyncio
    async def test_snapshots_are_independent_copies(self) -> None:
        channel: Channel[Any] = Channel()
        channel.tx.send("x")
        channel.tx.send("quit")
        store, published = make_store()
        state = Recorder()

        await store.run(state, channel.receiver(), Terminator())

        assert published[0] is not state
        assert published[0].messages == []
        assert state.messages == ["x"]

    @pytest.mark.asyncio
    async def test_closed_channel_stops_store(self) -> None:
        channel: Channel[Any] = Channel()
        channel.tx.send("a")
        channel.close()
        store, _ = make_store()
        terminator = Terminator()

        assert await store.run(Recorder(), channel.receiver(), terminator) is None
        assert not terminator.terminated

    @pytest.mark.asyncio
    async def test_tick_is_called_when_idle(self) -> None:
        channel: Channel[Any] = Channel()
        store, published = make_store(tick_rate=0.01)
        state = Ticking()

        task = asyncio.create_task(store.run(state, channel.receiver(), Terminator()))
        await asyncio.sleep(0.08)
        channel.tx.send("quit")
        await asyncio.wait_for(task, timeout=1)

        assert state.ticks >= 2
        assert len(published) == 1 + state.ticks

    @pytest.mark.asyncio
    async def test_tick_keeps_schedule_on_busy_channel(self) -> None:
        channel: Channel[Any] = Channel()
        store, _ = make_store(tick_rate=0.05)
        state = Ticking()

        task = asyncio.create_task(store.run(state, channel.receiver(), Terminator()))
        for i in range(20):
            channel.tx.send(i)
            await asyncio.sleep(0.03)
        channel.tx.send("quit")
        await asyncio.wait_for(task, timeout=1)

        # about twelve tick periods went by with a message every 0.03s
        assert state.messages == list(range(20))
        assert state.ticks >= 6

    @pytest.mark.asyncio
    async def test_none_is_never_a_message(self) -> None:
        channel: Channel[Any] = Channel()
        channel.tx.send("a")
        with pytest.raises(ValueError):
            channel.tx.send(None)
        channel.tx.send("b")
        channel.tx.send("quit")
        store, _ = make_store()

        interrupted = await store.run(Recorder(), channel.receiver(), Terminator())

        assert interrupted is not None
        assert interrupted.payload == ["a", "b"]

    @pytest.mark.asyncio
    async def test_reducer_exception_propagates(self) -> None:
        class Broken:
            def update(self, message: Any) -> None:
                raise RuntimeError("boom")

        channel: Channel[Any] = Channel()
        channel.tx.send("anything")
        store, _ = make_store()

        with pytest.raises(RuntimeError, match="boom"):
            await store.run(Broken(), channel.receiver(), Terminator())


class TestStateValue:
    def test_read_prefers_buffer(self) -> None:
        value = StateValue(1)
        value.write(2)
        assert value.read() == 2

    def test_apply_commits(self) -> None:
        value = StateValue("a")
        value.write("b")
        value.apply()
        value.reset()
        assert value.read() == "b"

    def test_reset_discards(self) -> None:
        value = StateValue(10)
        value.write(20)
        value.reset()
        assert value.read() == 10
