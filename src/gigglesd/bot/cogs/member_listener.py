"""Member listener Cog for GigglesD: greets members as they join."""

import discord
from discord.ext import commands

from gigglesd.configuration.app_configuration import app_config
from gigglesd.configuration.guild_settings import guild_settings_manager
from gigglesd.database.database import get_db
from gigglesd.onboarding.welcome import welcome_member
from gigglesd.util.logger import get_logger

logger = get_logger("member_listener_cog")


class MemberListenerCog(commands.Cog):
    """Cog handling member join events."""

    def __init__(self, discord_bot_instance):
        self.bot = discord_bot_instance
        logger.info("[MEMBER LISTENER] Member listener cog loaded")

    @commands.Cog.listener(name='on_member_join')
    async def on_member_join(self, member: discord.Member):
        try:
            await welcome_member(
                member,
                db=get_db(),
                settings_manager=guild_settings_manager,
                onboarding=app_config.onboarding,
            )
        except Exception:
            logger.exception(
                "[MEMBER LISTENER] Error welcoming %s in %s",
                getattr(member, "name", "unknown"),
                getattr(getattr(member, "guild", None), "name", "unknown guild"),
            )


def setup(discord_bot_instance):
    """Register the MemberListenerCog with the bot."""
    discord_bot_instance.add_cog(MemberListenerCog(discord_bot_instance))
