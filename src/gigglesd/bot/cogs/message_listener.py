"""Message listener Cog for GigglesD.

This cog turns ``on_message_edit`` notifications into edit events and runs
them through the link-edit policy.
"""

from typing import Optional

import discord
from discord.ext import commands

from gigglesd.configuration.app_configuration import app_config
from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.datatypes.link_edit_datatypes import EditEvent, ModerationActor
from gigglesd.moderation.discord_gateway import DiscordModerationGateway
from gigglesd.moderation.link_edit_enforcer import LinkEditEnforcer
from gigglesd.moderation.link_edit_policy import LinkEditPolicy
from gigglesd.moderation.permission_classifier import granted_permissions
from gigglesd.moderation.violation_recorder import violation_recorder
from gigglesd.scheduler.notice_cleanup_scheduler import NOTICE_CLEANUP_SCHEDULER
from gigglesd.util import discord_utils
from gigglesd.util.logger import get_logger

logger = get_logger("message_listener_cog")


def build_edit_event(before: discord.Message, after: discord.Message) -> EditEvent:
    """Snapshot an edit. The grace period is anchored to ``before.created_at``."""
    author = after.author
    actor = ModerationActor(
        user_id=UserID.from_user(author),
        display_name=author.name,
        mention=author.mention,
        permissions=granted_permissions(author),
    )
    return EditEvent(
        actor=actor,
        guild_id=GuildID.from_guild(after.guild),
        channel_id=ChannelID.from_channel(after.channel),
        message_id=MessageID.from_message(after),
        original_content=before.content,
        edited_content=after.content,
        original_posted_at=before.created_at,
    )


def build_link_edit_policy(discord_bot_instance) -> LinkEditPolicy:
    """Wire the link-edit policy against the live bot and configuration."""
    settings = app_config.link_edit
    enforcer = LinkEditEnforcer(
        DiscordModerationGateway(discord_bot_instance),
        violation_recorder,
        NOTICE_CLEANUP_SCHEDULER,
        settings,
    )
    return LinkEditPolicy(enforcer, grace_period_minutes=settings.grace_period_minutes)


class MessageListenerCog(commands.Cog):
    """Cog responsible for handling message edit events."""

    def __init__(self, discord_bot_instance, policy: Optional[LinkEditPolicy] = None):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        policy:
            Link-edit policy to use; built from the app configuration when omitted.
        """
        self.bot = discord_bot_instance
        self.policy = policy or build_link_edit_policy(discord_bot_instance)
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    @commands.Cog.listener(name='on_message_edit')
    async def on_message_edit(self, before: discord.Message, after: discord.Message):
        """
        Handle message edits by checking them against the link-edit rule.
        """
        try:
            if not app_config.link_edit.enabled:
                return
            if not discord_utils.should_process_edit(before, after):
                return

            await self.policy.handle(build_edit_event(before, after))
        except Exception:
            logger.exception(
                "[MESSAGE LISTENER] Error handling edit of message %s in channel %s",
                getattr(after, "id", "unknown"),
                getattr(getattr(after, "channel", None), "id", "unknown"),
            )


def setup(discord_bot_instance):
    """
    Register the MessageListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    """
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance))
