"""
Central database coordinator.

The Database class owns the aiosqlite connection and delegates to the
repositories for each table:
- schema: table/index creation and version tracking
- link_edit_violations: append-only audit log of evaluated link edits
- guilds: per-guild onboarding settings
- member_joins: append-only log of member joins

SQLite's WAL mode handles concurrent readers; writes are serialised by the
connection manager.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from gigglesd.database.db_connection import ConnectionManager
from gigglesd.database.db_schema import SchemaManager
from gigglesd.datatypes.discord_datatypes import GuildID, UserID
from gigglesd.datatypes.guild_settings import GuildSettings
from gigglesd.datatypes.link_edit_datatypes import ActionTaken, LinkViolationRecord, LinkViolationStats
from gigglesd.repositories.guild_settings_repo import GuildSettingsRepo
from gigglesd.repositories.link_violation_repo import LinkViolationRepo
from gigglesd.repositories.member_join_repo import MemberJoinRepo
from gigglesd.util.logger import get_logger

logger = get_logger("database")

# Database file path
DB_PATH = Path("./data/app.db").resolve()


class Database:
    """
    Central database coordinator for all database operations.

    Lifecycle:
        1. Call initialize() at program startup
        2. Use the various methods for database operations
        3. Call shutdown() at program end
    """

    def __init__(self, db_path: Path = DB_PATH):
        """
        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._connection = ConnectionManager()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self._connection.open(self.db_path)
            async with self._connection.transaction() as db:
                await SchemaManager.initialize_schema(db)
        except Exception as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self._connection.close()
            return False

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        """Close the connection. Safe to call more than once."""
        if not self._initialized:
            return

        await self._connection.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")

    # ------------------------------------------------------------------
    # Link edit violations
    # ------------------------------------------------------------------

    async def log_link_violation(self, record: LinkViolationRecord) -> None:
        """
        Append a link edit record.

        Raises:
            RuntimeError: If the database is not initialized.
            aiosqlite.Error: If the insert fails.
        """
        async with self._connection.transaction() as db:
            await LinkViolationRepo.insert(db, record)

        logger.debug(
            "[DATABASE] Logged link edit %s (%s) for user %s in guild %s",
            record.action_taken.value,
            record.violation_type.value,
            record.user_id,
            record.guild_id,
        )

    async def get_recent_link_violations(
        self,
        guild_id: GuildID,
        limit: int = 50,
        action_filter: Optional[ActionTaken] = None,
    ) -> List[LinkViolationRecord]:
        """Return the newest link edit records for a guild."""
        async with self._connection.read() as db:
            return await LinkViolationRepo.get_recent(db, guild_id, limit, action_filter)

    async def get_link_violation_stats(
        self,
        guild_id: GuildID,
        days: int = 30,
        now: Optional[datetime] = None,
    ) -> LinkViolationStats:
        """Return link edit counts for the last ``days`` days."""
        async with self._connection.read() as db:
            return await LinkViolationRepo.get_stats(db, guild_id, days, now)

    # ------------------------------------------------------------------
    # Guild settings
    # ------------------------------------------------------------------

    async def get_guild_settings(self, guild_id: GuildID) -> Optional[GuildSettings]:
        async with self._connection.read() as db:
            return await GuildSettingsRepo.get(db, guild_id)

    async def upsert_guild_settings(self, settings: GuildSettings) -> None:
        async with self._connection.transaction() as db:
            await GuildSettingsRepo.upsert(db, settings)
        logger.debug("[DATABASE] Upserted settings for guild %s (active=%s)", settings.guild_id, settings.is_active)

    # ------------------------------------------------------------------
    # Member joins
    # ------------------------------------------------------------------

    async def log_member_join(self, guild_id: GuildID, user_id: UserID, username: str, joined_at: datetime) -> None:
        async with self._connection.transaction() as db:
            await MemberJoinRepo.insert(db, guild_id, user_id, username, joined_at)
        logger.debug("[DATABASE] Logged member join: %s (%s) in guild %s", username, user_id, guild_id)


# Global Database instance
database = Database()


def get_db() -> Database:
    """Return the process-wide Database instance."""
    return database
