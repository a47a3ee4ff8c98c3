"""
Outbound chat operations used by the link-edit enforcer.

The enforcer only talks to a :class:`ModerationGateway`, so the policy can be
exercised without a Discord connection. :class:`DiscordModerationGateway` is
the py-cord implementation; every method raises on failure and leaves the
fallback handling to the caller.
"""

from __future__ import annotations

from typing import Any, Protocol

import discord

from gigglesd.datatypes.discord_datatypes import ChannelID, MessageID
from gigglesd.util.logger import get_logger

logger = get_logger("discord_gateway")


class ModerationGateway(Protocol):
    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> None:
        ...

    async def send_message(self, channel_id: ChannelID, text: str) -> Any:
        """Send ``text`` and return a handle that :meth:`delete_notice` accepts."""
        ...

    async def delete_notice(self, handle: Any) -> None:
        ...


class DiscordModerationGateway:
    """ModerationGateway backed by a py-cord bot."""

    def __init__(self, bot: discord.Bot) -> None:
        self.bot = bot

    async def _resolve_channel(self, channel_id: ChannelID) -> discord.abc.Messageable:
        channel = self.bot.get_channel(channel_id.to_int())
        if channel is None:
            channel = await self.bot.fetch_channel(channel_id.to_int())
        if not isinstance(channel, discord.abc.Messageable):
            raise TypeError(f"Channel {channel_id} cannot hold messages")
        return channel

    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> None:
        channel = await self._resolve_channel(channel_id)
        await channel.get_partial_message(message_id.to_int()).delete()  # type: ignore[attr-defined]
        logger.debug("[GATEWAY] Deleted message %s in channel %s", message_id, channel_id)

    async def send_message(self, channel_id: ChannelID, text: str) -> discord.Message:
        channel = await self._resolve_channel(channel_id)
        return await channel.send(
            content=text,
            allowed_mentions=discord.AllowedMentions(users=True, roles=False, everyone=False),
        )

    async def delete_notice(self, handle: discord.Message) -> None:
        await handle.delete()
