"""
Delayed cleanup of warning notices.

Warnings posted after a link-edit violation are removed again after a short
delay. Jobs are kept in a min-heap and executed by a single runner task; a
job can be cancelled or replaced by scheduling the same key again.
"""
import asyncio
import heapq
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Hashable

from gigglesd.util.logger import get_logger

logger = get_logger("notice_cleanup_scheduler")

CleanupAction = Callable[[], Awaitable[None]]


@dataclass
class CleanupJob:
    """
    A single scheduled cleanup.

    Attributes:
        key (Hashable): Identifies the notice; scheduling the same key replaces the job.
        action (CleanupAction): Coroutine factory performing the cleanup.
    """
    key: Hashable
    action: CleanupAction


class NoticeCleanupScheduler:
    """
    Runs cleanup actions once their delay has elapsed.

    Attributes:
        heap (list): Min-heap of (run_at, job_id, job) tuples.
        pending_keys (Dict): Maps job keys to their current job_id.
        cancelled_ids (set): Job IDs that must be skipped when popped.
        counter (int): Monotonically increasing job ID counter.
        runner_task (asyncio.Task | None): Background task processing the heap.
        condition (asyncio.Condition): Wakes the runner when the heap changes.
    """

    def __init__(self) -> None:
        self.heap: list[tuple[float, int, CleanupJob]] = []
        self.pending_keys: Dict[Hashable, int] = {}
        self.cancelled_ids: set[int] = set()
        self.counter: int = 0
        self.runner_task: asyncio.Task[None] | None = None
        self.condition: asyncio.Condition = asyncio.Condition()

    def ensure_runner(self) -> None:
        """Create the background runner task if it is not already running."""
        loop = asyncio.get_running_loop()
        if self.runner_task is None or self.runner_task.done():
            self.runner_task = loop.create_task(self.run(), name="gigglesd-notice-cleanup")

    @property
    def pending_count(self) -> int:
        return len(self.pending_keys)

    async def schedule(self, key: Hashable, delay_seconds: float, action: CleanupAction) -> None:
        """
        Schedule ``action`` to run after ``delay_seconds``.

        Non-positive delays run the action immediately. An existing job for
        the same key is cancelled and replaced.

        Args:
            key (Hashable): Identifier of the notice being cleaned up.
            delay_seconds (float): Delay before the action runs.
            action (CleanupAction): Coroutine factory performing the cleanup.
        """
        job = CleanupJob(key=key, action=action)

        if delay_seconds <= 0:
            await self.cancel(key)
            await self.execute(job)
            return

        loop = asyncio.get_running_loop()
        run_at = loop.time() + delay_seconds

        async with self.condition:
            self.ensure_runner()
            if key in self.pending_keys:
                self.cancelled_ids.add(self.pending_keys[key])

            self.counter += 1
            job_id = self.counter
            heapq.heappush(self.heap, (run_at, job_id, job))
            self.pending_keys[key] = job_id
            self.condition.notify_all()

    async def cancel(self, key: Hashable) -> bool:
        """
        Cancel the pending job for ``key``.

        Returns:
            bool: True if a pending job was cancelled.
        """
        async with self.condition:
            job_id = self.pending_keys.pop(key, None)
            if job_id is None:
                return False

            self.cancelled_ids.add(job_id)
            self.condition.notify_all()
            return True

    async def shutdown(self) -> None:
        """Stop the runner and drop every pending job. Safe to call more than once."""
        async with self.condition:
            if self.runner_task:
                self.runner_task.cancel()
            dropped = len(self.pending_keys)
            self.heap.clear()
            self.pending_keys.clear()
            self.cancelled_ids.clear()
            self.condition.notify_all()

        if dropped:
            logger.info("[NOTICE CLEANUP] Dropped %d pending cleanup(s) on shutdown", dropped)

        if self.runner_task:
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None

    async def run(self) -> None:
        """Process jobs from the heap as their timers elapse, until cancelled."""
        loop = asyncio.get_running_loop()
        while True:
            async with self.condition:
                while self.heap and self.heap[0][1] in self.cancelled_ids:
                    _, job_id, _ = heapq.heappop(self.heap)
                    self.cancelled_ids.discard(job_id)

                if not self.heap:
                    await self.condition.wait()
                    continue

                run_at, _, _ = self.heap[0]
                delay = run_at - loop.time()

                if delay > 0:
                    try:
                        await asyncio.wait_for(self.condition.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
                    continue

                _, job_id, job = heapq.heappop(self.heap)
                if self.pending_keys.get(job.key) == job_id:
                    del self.pending_keys[job.key]

            await self.execute(job)

    async def execute(self, job: CleanupJob) -> None:
        """Run a cleanup action, logging failures instead of raising."""
        try:
            await job.action()
            logger.debug("[NOTICE CLEANUP] Cleanup for %s completed", job.key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[NOTICE CLEANUP] Cleanup for %s failed: %s", job.key, exc)


NOTICE_CLEANUP_SCHEDULER = NoticeCleanupScheduler()
