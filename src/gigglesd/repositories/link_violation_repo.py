"""
Persistent storage for evaluated link edits.

The ``link_edit_violations`` table is append-only: rows are inserted for
edits allowed within the grace period and for deleted messages, and are
never updated or deleted by the bot.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import aiosqlite

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.datatypes.link_edit_datatypes import (
    ActionTaken,
    LinkViolationRecord,
    LinkViolationStats,
    UrlChangeType,
    truncate_content,
)
from gigglesd.util.logger import get_logger

logger = get_logger("link_violation_repo")

_COLUMNS = (
    "guild_id, user_id, username, channel_id, message_id, "
    "violation_type, old_content, new_content, action_taken, created_at"
)


def _row_to_record(row: aiosqlite.Row) -> LinkViolationRecord:
    message_id = row["message_id"]
    return LinkViolationRecord(
        guild_id=GuildID(row["guild_id"]),
        user_id=UserID(row["user_id"]),
        username=row["username"],
        channel_id=ChannelID(row["channel_id"]),
        message_id=MessageID(message_id) if message_id else None,
        violation_type=UrlChangeType(row["violation_type"]),
        old_content=row["old_content"],
        new_content=row["new_content"],
        action_taken=ActionTaken(row["action_taken"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class LinkViolationRepo:
    """Low-level access to the ``link_edit_violations`` table."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def insert(conn: aiosqlite.Connection, record: LinkViolationRecord) -> None:
        """Append a record. Content columns are capped at 1000 characters."""
        await conn.execute(
            f"INSERT INTO link_edit_violations ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                str(record.guild_id),
                str(record.user_id),
                record.username,
                str(record.channel_id),
                str(record.message_id) if record.message_id is not None else None,
                record.violation_type.value,
                truncate_content(record.old_content),
                truncate_content(record.new_content),
                record.action_taken.value,
                record.created_at.astimezone(timezone.utc).isoformat(),
            ),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_recent(
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        limit: int = 50,
        action_filter: Optional[ActionTaken] = None,
    ) -> List[LinkViolationRecord]:
        """Return the newest records for a guild, optionally only one action type."""
        query = f"SELECT {_COLUMNS} FROM link_edit_violations WHERE guild_id = ?"
        params: list = [str(guild_id)]
        if action_filter is not None:
            query += " AND action_taken = ?"
            params.append(action_filter.value)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(max(int(limit), 0))

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    @staticmethod
    async def get_stats(
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        days: int = 30,
        now: Optional[datetime] = None,
    ) -> LinkViolationStats:
        """Count records for a guild created in the last ``days`` days."""
        reference = now or datetime.now(timezone.utc)
        cutoff = (reference - timedelta(days=days)).astimezone(timezone.utc).isoformat()

        cursor = await conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(action_taken = ?), 0) AS deleted,
                COALESCE(SUM(action_taken = ?), 0) AS allowed,
                COALESCE(SUM(violation_type = ?), 0) AS added,
                COALESCE(SUM(violation_type = ?), 0) AS modified
            FROM link_edit_violations
            WHERE guild_id = ? AND created_at >= ?
            """,
            (
                ActionTaken.MESSAGE_DELETED.value,
                ActionTaken.ALLOWED_WITHIN_GRACE_PERIOD.value,
                UrlChangeType.ADDED.value,
                UrlChangeType.MODIFIED.value,
                str(guild_id),
                cutoff,
            ),
        )
        row = await cursor.fetchone()
        return LinkViolationStats(
            total=row["total"] if row else 0,
            deleted=row["deleted"] if row else 0,
            allowed=row["allowed"] if row else 0,
            added=row["added"] if row else 0,
            modified=row["modified"] if row else 0,
            period_days=days,
        )
