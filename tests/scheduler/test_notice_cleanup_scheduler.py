import asyncio
from unittest.mock import AsyncMock

import pytest

from gigglesd.scheduler.notice_cleanup_scheduler import NoticeCleanupScheduler


@pytest.mark.asyncio
async def test_action_runs_after_delay():
    scheduler = NoticeCleanupScheduler()
    action = AsyncMock()

    await scheduler.schedule("notice-1", 0.05, action)
    assert scheduler.pending_count == 1
    action.assert_not_awaited()

    await asyncio.sleep(0.2)
    action.assert_awaited_once()
    assert scheduler.pending_count == 0
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_non_positive_delay_runs_immediately():
    scheduler = NoticeCleanupScheduler()
    action = AsyncMock()

    await scheduler.schedule("notice-now", 0, action)

    action.assert_awaited_once()
    assert scheduler.runner_task is None
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_cancelled_job_never_runs():
    scheduler = NoticeCleanupScheduler()
    action = AsyncMock()

    await scheduler.schedule("notice-2", 0.05, action)
    assert await scheduler.cancel("notice-2") is True
    assert await scheduler.cancel("notice-2") is False

    await asyncio.sleep(0.2)
    action.assert_not_awaited()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_rescheduling_a_key_replaces_the_job():
    scheduler = NoticeCleanupScheduler()
    first = AsyncMock()
    second = AsyncMock()

    await scheduler.schedule("notice-3", 0.05, first)
    await scheduler.schedule("notice-3", 0.05, second)

    await asyncio.sleep(0.2)
    first.assert_not_awaited()
    second.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_failing_action_is_logged_and_runner_survives():
    scheduler = NoticeCleanupScheduler()
    failing = AsyncMock(side_effect=RuntimeError("Unknown Message"))
    later = AsyncMock()

    await scheduler.schedule("bad", 0.02, failing)
    await scheduler.schedule("good", 0.08, later)

    await asyncio.sleep(0.3)
    failing.assert_awaited_once()
    later.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_shutdown_drops_pending_jobs_and_is_idempotent():
    scheduler = NoticeCleanupScheduler()
    action = AsyncMock()

    await scheduler.schedule("notice-4", 10, action)
    await scheduler.shutdown()
    await scheduler.shutdown()

    assert scheduler.pending_count == 0
    assert scheduler.runner_task is None
    action.assert_not_awaited()
