"""Persistent storage for per-guild onboarding settings (``guilds`` table)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import aiosqlite

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID
from gigglesd.datatypes.guild_settings import GuildSettings


class GuildSettingsRepo:
    """Low-level CRUD for the ``guilds`` table."""

    @staticmethod
    async def get(conn: aiosqlite.Connection, guild_id: GuildID) -> Optional[GuildSettings]:
        """Return the stored settings, or None when the guild has no row yet."""
        cursor = await conn.execute(
            "SELECT guild_id, guild_name, welcome_channel_id, welcome_message, is_active "
            "FROM guilds WHERE guild_id = ?",
            (str(guild_id),),
        )
        row = await cursor.fetchone()
        if row is None:
            return None

        welcome_channel_id = row["welcome_channel_id"]
        return GuildSettings(
            guild_id=GuildID(row["guild_id"]),
            guild_name=row["guild_name"],
            welcome_channel_id=ChannelID(welcome_channel_id) if welcome_channel_id else None,
            welcome_message=row["welcome_message"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    async def upsert(conn: aiosqlite.Connection, settings: GuildSettings) -> None:
        """Insert or replace a guild row (primary key = guild_id)."""
        now = datetime.now(timezone.utc).isoformat()
        await conn.execute(
            """
            INSERT INTO guilds (guild_id, guild_name, welcome_channel_id, welcome_message, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                guild_name         = excluded.guild_name,
                welcome_channel_id = excluded.welcome_channel_id,
                welcome_message    = excluded.welcome_message,
                is_active          = excluded.is_active,
                updated_at         = excluded.updated_at
            """,
            (
                str(settings.guild_id),
                settings.guild_name,
                str(settings.welcome_channel_id) if settings.welcome_channel_id is not None else None,
                settings.welcome_message,
                int(settings.is_active),
                now,
                now,
            ),
        )
