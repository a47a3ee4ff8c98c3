"""
Per-guild onboarding settings with an in-memory cache over the database.

Responsibilities:
- Load guild settings from the ``guilds`` table on first access
- Create active default settings when the bot joins a guild
- Deactivate (never delete) settings when the bot leaves a guild
"""

from typing import Dict, Optional

from gigglesd.database.database import Database, get_db
from gigglesd.datatypes.discord_datatypes import GuildID
from gigglesd.datatypes.guild_settings import GuildSettings
from gigglesd.util.logger import get_logger

logger = get_logger("guild_settings_manager")


class GuildSettingsManager:
    """Cache of :class:`GuildSettings` keyed by guild, backed by the database.

    Missing guilds are cached as ``None`` so repeated member joins in an
    unconfigured guild do not hit the database every time.
    """

    def __init__(self, db: Optional[Database] = None):
        self._db = db
        self.guilds: Dict[GuildID, Optional[GuildSettings]] = {}
        logger.info("[GUILD SETTINGS MANAGER] Guild settings manager initialized")

    @property
    def db(self) -> Database:
        return self._db or get_db()

    async def get(self, guild_id: GuildID) -> Optional[GuildSettings]:
        """Return the settings for a guild, or None when the guild was never set up."""
        if guild_id in self.guilds:
            return self.guilds[guild_id]

        settings = await self.db.get_guild_settings(guild_id)
        self.guilds[guild_id] = settings
        return settings

    async def save(self, settings: GuildSettings) -> None:
        """Persist settings and refresh the cache."""
        await self.db.upsert_guild_settings(settings)
        self.guilds[settings.guild_id] = settings

    async def activate(self, guild_id: GuildID, guild_name: str, welcome_message: Optional[str] = None) -> GuildSettings:
        """Mark a guild active, creating default settings the first time.

        ``welcome_message`` only seeds new settings; a guild that re-adds the
        bot keeps its stored welcome channel and message.
        """
        settings = await self.get(guild_id)
        if settings is None:
            settings = GuildSettings(guild_id=guild_id)
            if welcome_message:
                settings.welcome_message = welcome_message
        settings.guild_name = guild_name
        settings.is_active = True

        await self.save(settings)
        logger.info("[GUILD SETTINGS MANAGER] Activated settings for %s (%s)", guild_name, guild_id)
        return settings

    async def deactivate(self, guild_id: GuildID, guild_name: str) -> GuildSettings:
        """Mark a guild inactive, keeping its data for a later re-join."""
        settings = await self.get(guild_id) or GuildSettings(guild_id=guild_id)
        settings.guild_name = guild_name or settings.guild_name
        settings.is_active = False

        await self.save(settings)
        logger.info("[GUILD SETTINGS MANAGER] Deactivated settings for %s (%s)", guild_name, guild_id)
        return settings


guild_settings_manager = GuildSettingsManager()
