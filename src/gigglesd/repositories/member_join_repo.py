"""Append-only log of member joins (``member_joins`` table)."""

from __future__ import annotations

from datetime import datetime, timezone

import aiosqlite

from gigglesd.datatypes.discord_datatypes import GuildID, UserID


class MemberJoinRepo:

    @staticmethod
    async def insert(
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        user_id: UserID,
        username: str,
        joined_at: datetime,
    ) -> None:
        await conn.execute(
            "INSERT INTO member_joins (guild_id, user_id, username, joined_at, created_at) VALUES (?, ?, ?, ?, ?)",
            (
                str(guild_id),
                str(user_id),
                username,
                joined_at.astimezone(timezone.utc).isoformat(),
                datetime.now(timezone.utc).isoformat(),
            ),
        )

