"""Event listener Cog for GigglesD.

This cog handles bot lifecycle events: presence and static announcements on
ready, and guild settings on guild join/remove. Member joins are handled by
the MemberListenerCog.
"""

import discord
from discord.ext import commands

from gigglesd.configuration.app_configuration import app_config
from gigglesd.configuration.guild_settings import guild_settings_manager
from gigglesd.datatypes.discord_datatypes import GuildID
from gigglesd.onboarding.announcements import send_static_announcement
from gigglesd.onboarding.welcome import send_setup_message
from gigglesd.util.logger import get_logger

logger = get_logger("events_listener")


def guild_welcome_message(guild_name: str) -> str:
    return f"Welcome to {guild_name}, {{user}}! 🎉 We're glad to have you here!"


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and guild membership handlers."""

    def __init__(self, discord_bot_instance):
        """
        Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        """
        self.bot = discord_bot_instance
        self._announced = False
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """
        Handle bot startup.

        This method:
        1. Sets the "watching" presence
        2. Posts the static announcements once per process (each guild is
           additionally deduplicated against its recent messages)
        """
        if self.bot.user:
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name=app_config.presence_text),
            )
            logger.info(
                "[EVENTS LISTENER] Bot connected as %s (ID: %s), serving %d guild(s)",
                self.bot.user,
                self.bot.user.id,
                len(self.bot.guilds),
            )
        else:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")

        if self._announced:
            return
        self._announced = True

        announcements = app_config.announcements
        if not announcements.enabled:
            logger.debug("[EVENTS LISTENER] Static announcements disabled")
            return

        for guild in list(self.bot.guilds):
            await send_static_announcement(guild, announcements)

    @commands.Cog.listener(name='on_guild_join')
    async def on_guild_join(self, guild: discord.Guild):
        """
        Handle the bot joining a new server.

        This method:
        1. Creates (or re-activates) the guild's settings
        2. Posts the setup message
        """
        logger.info(
            "[EVENTS LISTENER] Joined new guild: %s (ID: %s) with %s members",
            guild.name,
            guild.id,
            guild.member_count,
        )

        try:
            await guild_settings_manager.activate(
                GuildID.from_guild(guild),
                guild.name,
                welcome_message=guild_welcome_message(guild.name),
            )
        except Exception as exc:
            logger.error("[EVENTS LISTENER] Failed to store settings for %s (ID: %s): %s", guild.name, guild.id, exc)

        await send_setup_message(guild, app_config.onboarding)
        logger.info("[EVENTS LISTENER] Now serving %d guild(s)", len(self.bot.guilds))

    @commands.Cog.listener(name='on_guild_remove')
    async def on_guild_remove(self, guild: discord.Guild):
        """
        Handle the bot leaving or being removed from a server.

        Settings are deactivated rather than deleted so a later re-join keeps
        the guild's welcome configuration.
        """
        logger.info("[EVENTS LISTENER] Removed from guild: %s (ID: %s)", guild.name, guild.id)

        try:
            await guild_settings_manager.deactivate(GuildID.from_guild(guild), guild.name)
        except Exception as exc:
            logger.error("[EVENTS LISTENER] Failed to deactivate settings for %s (ID: %s): %s", guild.name, guild.id, exc)


def setup(discord_bot_instance):
    """
    Register the EventsListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    """
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
