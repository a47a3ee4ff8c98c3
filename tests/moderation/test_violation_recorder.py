import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.datatypes.link_edit_datatypes import ActionTaken, UrlChangeType
from gigglesd.moderation.violation_recorder import ViolationRecorder

NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def _args(old="Hello", new="Hello https://x.com", action=ActionTaken.MESSAGE_DELETED):
    return (
        GuildID(1),
        UserID(2),
        "poster",
        ChannelID(3),
        MessageID(4),
        UrlChangeType.ADDED,
        old,
        new,
        action,
    )


@pytest.mark.asyncio
async def test_record_persists_truncated_content():
    db = SimpleNamespace(log_link_violation=AsyncMock())
    recorder = ViolationRecorder(db, clock=lambda: NOW)

    ok = await recorder.record(*_args(old="a" * 1500, new="b" * 999))

    assert ok is True
    record = db.log_link_violation.await_args.args[0]
    assert record.old_content == "a" * 1000
    assert record.new_content == "b" * 999
    assert record.action_taken is ActionTaken.MESSAGE_DELETED
    assert record.violation_type is UrlChangeType.ADDED
    assert record.username == "poster"
    assert record.created_at == NOW


@pytest.mark.asyncio
async def test_record_failure_returns_false_without_raising():
    db = SimpleNamespace(log_link_violation=AsyncMock(side_effect=RuntimeError("disk full")))
    recorder = ViolationRecorder(db)

    assert await recorder.record(*_args()) is False


@pytest.mark.asyncio
async def test_record_in_background_does_not_block_and_drains():
    gate = asyncio.Event()

    async def slow_write(record):
        await gate.wait()

    db = SimpleNamespace(log_link_violation=AsyncMock(side_effect=slow_write))
    recorder = ViolationRecorder(db)

    task = recorder.record_in_background(*_args(action=ActionTaken.ALLOWED_WITHIN_GRACE_PERIOD))
    assert recorder.pending == 1
    assert not task.done()

    gate.set()
    await recorder.drain()

    assert recorder.pending == 0
    assert task.result() is True
    db.log_link_violation.assert_awaited_once()


@pytest.mark.asyncio
async def test_background_failure_is_swallowed():
    db = SimpleNamespace(log_link_violation=AsyncMock(side_effect=RuntimeError("boom")))
    recorder = ViolationRecorder(db)

    task = recorder.record_in_background(*_args())
    await recorder.drain()

    assert task.result() is False
    assert recorder.pending == 0


@pytest.mark.asyncio
async def test_drain_without_pending_writes_returns():
    recorder = ViolationRecorder(SimpleNamespace(log_link_violation=AsyncMock()))
    await recorder.drain()
