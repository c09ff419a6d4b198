"""Tests for rad.tui.channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from rad.tui.channel import Channel, send_quietly
from rad.tui.errors import ChannelClosed, ReceiverTaken


class TestOrdering:
    def test_fifo_across_senders(self) -> None:
        channel: Channel[int] = Channel()
        a = channel.sender()
        b = a.clone()
        receiver = channel.receiver()

        a.send(1)
        b.send(2)
        a.send(3)

        assert [receiver.try_recv() for _ in range(3)] == [1, 2, 3]
        assert receiver.try_recv() is None

    @pytest.mark.asyncio
    async def test_recv_waits_for_message(self) -> None:
        channel: Channel[str] = Channel()
        receiver = channel.receiver()
        sender = channel.sender()

        async def produce() -> None:
            await asyncio.sleep(0.01)
            sender.send("hello")

        task = asyncio.create_task(produce())
        assert await asyncio.wait_for(receiver.recv(), timeout=1) == "hello"
        await task

    @pytest.mark.asyncio
    async def test_each_message_delivered_once(self) -> None:
        channel: Channel[int] = Channel()
        receiver = channel.receiver()
        sender = channel.sender()
        for i in range(50):
            sender.send(i)
        channel.close()

        received = []
        while (message := await receiver.recv()) is not None:
            received.append(message)
        assert received == list(range(50))


class TestReceiver:
    def test_single_receiver(self) -> None:
        channel: Channel[int] = Channel()
        channel.receiver()
        with pytest.raises(ReceiverTaken):
            channel.receiver()

    def test_len_counts_pending(self) -> None:
        channel: Channel[int] = Channel()
        receiver = channel.receiver()
        channel.tx.send(1)
        channel.tx.send(2)
        assert len(receiver) == 2

    def test_none_rejected(self) -> None:
        channel: Channel[Any] = Channel()
        receiver = channel.receiver()
        with pytest.raises(ValueError):
            channel.tx.send(None)
        assert len(receiver) == 0

    @pytest.mark.asyncio
    async def test_wait_does_not_consume(self) -> None:
        channel: Channel[str] = Channel()
        receiver = channel.receiver()

        assert not await receiver.wait(0.01)
        channel.tx.send("x")
        assert await receiver.wait(0.01)
        assert receiver.try_recv() == "x"

    @pytest.mark.asyncio
    async def test_wait_wakes_on_close(self) -> None:
        channel: Channel[str] = Channel()
        receiver = channel.receiver()
        waiter = asyncio.create_task(receiver.wait(1))
        await asyncio.sleep(0)
        channel.close()
        assert await asyncio.wait_for(waiter, timeout=1)
        assert receiver.try_recv() is None


class TestClose:
    def test_send_after_close_raises(self) -> None:
        channel: Channel[int] = Channel()
        sender = channel.sender()
        channel.close()
        assert sender.closed
        with pytest.raises(ChannelClosed):
            sender.send(1)

    @pytest.mark.asyncio
    async def test_queued_messages_survive_close(self) -> None:
        channel: Channel[int] = Channel()
        receiver = channel.receiver()
        channel.tx.send(7)
        channel.close()

        assert await receiver.recv() == 7
        assert await receiver.recv() is None

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_receiver(self) -> None:
        channel: Channel[int] = Channel()
        receiver = channel.receiver()

        waiter = asyncio.create_task(receiver.recv())
        await asyncio.sleep(0)
        channel.close()
        assert await asyncio.wait_for(waiter, timeout=1) is None

    def test_close_is_idempotent(self) -> None:
        channel: Channel[int] = Channel()
        channel.close()
        channel.close()
        assert channel.closed

    def test_bounded_channel_full(self) -> None:
        channel: Channel[int] = Channel(maxsize=1)
        channel.tx.send(1)
        with pytest.raises(asyncio.QueueFull):
            channel.tx.send(2)


class TestSendQuietly:
    def test_returns_true_when_queued(self) -> None:
        channel: Channel[str] = Channel()
        receiver = channel.receiver()
        assert send_quietly(channel.sender(), "x", shutting_down=False)
        assert receiver.try_recv() == "x"

    def test_closed_during_shutdown_is_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        channel: Channel[str] = Channel()
        sender = channel.sender()
        channel.close()
        with caplog.at_level(logging.DEBUG, logger="rad.tui.channel"):
            assert not send_quietly(sender, "late", shutting_down=True)
        assert [r.levelno for r in caplog.records if "late" in r.getMessage()] == [logging.DEBUG]

    def test_closed_while_running_is_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        channel: Channel[str] = Channel()
        sender = channel.sender()
        channel.close()
        with caplog.at_level(logging.DEBUG, logger="rad.tui.channel"):
            assert not send_quietly(sender, "late", shutting_down=False)
        assert any(r.levelno == logging.WARNING for r in caplog.records)
