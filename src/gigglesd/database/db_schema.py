"""
Database schema initialization and version tracking.

IDs are stored as TEXT snowflakes and timestamps as UTC ISO-8601 strings, so
range filters on ``created_at`` compare lexicographically.
"""

import aiosqlite
from gigglesd.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates tables and indexes and records the schema version."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all tables and indexes if they do not exist.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized (version %d)", SCHEMA_VERSION)

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS guilds (
                guild_id TEXT PRIMARY KEY,
                guild_name TEXT NOT NULL DEFAULT '',
                welcome_channel_id TEXT,
                welcome_message TEXT NOT NULL DEFAULT 'Welcome to {guild}, {user}! 🎉',
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS member_joins (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                username TEXT NOT NULL,
                joined_at TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS link_edit_violations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                username TEXT NOT NULL,
                channel_id TEXT NOT NULL,
                message_id TEXT,
                violation_type TEXT NOT NULL,
                old_content TEXT,
                new_content TEXT,
                action_taken TEXT NOT NULL DEFAULT 'message_deleted',
                created_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute("CREATE INDEX IF NOT EXISTS idx_member_joins_guild_id ON member_joins(guild_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_member_joins_user_id ON member_joins(user_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_member_joins_joined_at ON member_joins(joined_at)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_link_violations_guild_created ON link_edit_violations(guild_id, created_at DESC)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_link_violations_user_id ON link_edit_violations(user_id)")

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
