"""
Persists evaluated link edits without ever blocking or failing enforcement.

Every edit that added or changed a link and was evaluated by the grace
period (allowed or not) becomes one append-only ``link_edit_violations`` row.
Writes are submitted as background tasks; failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from gigglesd.database.database import Database, get_db
from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.datatypes.link_edit_datatypes import (
    ActionTaken,
    LinkViolationRecord,
    UrlChangeType,
    truncate_content,
)
from gigglesd.util.logger import get_logger

logger = get_logger("violation_recorder")


class ViolationRecorder:
    """Writes link edit records through the database, logging instead of raising."""

    def __init__(
        self,
        db: Optional[Database] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._db = db
        self._clock = clock
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def db(self) -> Database:
        return self._db or get_db()

    @property
    def pending(self) -> int:
        return len(self._background_tasks)

    async def record(
        self,
        guild_id: GuildID,
        actor_id: UserID,
        actor_name: str,
        channel_id: ChannelID,
        message_id: Optional[MessageID],
        classification: UrlChangeType,
        old_content: Optional[str],
        new_content: Optional[str],
        action_taken: ActionTaken,
    ) -> bool:
        """Persist one link edit.

        Returns:
            bool: True if the row was written, False if the write failed.
        """
        record = LinkViolationRecord(
            guild_id=guild_id,
            user_id=actor_id,
            username=actor_name,
            channel_id=channel_id,
            message_id=message_id,
            violation_type=classification,
            old_content=truncate_content(old_content),
            new_content=truncate_content(new_content),
            action_taken=action_taken,
            created_at=self._clock(),
        )

        try:
            await self.db.log_link_violation(record)
        except Exception as exc:
            logger.error(
                "[RECORDER] Failed to log link edit (%s/%s) for user %s in guild %s, channel %s, message %s: %s",
                classification.value,
                action_taken.value,
                actor_id,
                guild_id,
                channel_id,
                message_id,
                exc,
            )
            return False

        logger.info(
            "[RECORDER] Logged link edit for %s (%s): %s, %s",
            actor_name,
            actor_id,
            classification.value,
            action_taken.value,
        )
        return True

    def record_in_background(
        self,
        guild_id: GuildID,
        actor_id: UserID,
        actor_name: str,
        channel_id: ChannelID,
        message_id: Optional[MessageID],
        classification: UrlChangeType,
        old_content: Optional[str],
        new_content: Optional[str],
        action_taken: ActionTaken,
    ) -> asyncio.Task:
        """Submit :meth:`record` as a task and return immediately.

        The task is referenced until it completes so it cannot be garbage
        collected mid-write.
        """
        task = asyncio.create_task(
            self.record(
                guild_id,
                actor_id,
                actor_name,
                channel_id,
                message_id,
                classification,
                old_content,
                new_content,
                action_taken,
            ),
            name=f"gigglesd-record-{message_id}",
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            logger.warning("[RECORDER] Link edit write %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[RECORDER] Link edit write %s failed: %s", task.get_name(), exc)

    async def drain(self) -> None:
        """Wait for every submitted write to finish."""
        if not self._background_tasks:
            return
        logger.debug("[RECORDER] Waiting for %d pending write(s)", len(self._background_tasks))
        await asyncio.gather(*list(self._background_tasks), return_exceptions=True)


# Process-wide recorder shared by the message listener and shutdown
violation_recorder = ViolationRecorder()
