"""
Persistent per-guild configuration for onboarding.

Database schema:
- guilds table with columns: guild_id, guild_name, welcome_channel_id,
  welcome_message, is_active, created_at, updated_at
"""
from dataclasses import dataclass
from typing import Optional

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID

DEFAULT_WELCOME_MESSAGE = "Welcome to {guild}, {user}! 🎉"


@dataclass(slots=True)
class GuildSettings:
    """Persistent per-guild configuration values."""

    guild_id: GuildID
    guild_name: str = ""
    welcome_channel_id: Optional[ChannelID] = None
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    is_active: bool = True
