"""
Static announcements posted once per guild.

The main embed goes into the guild's announcement channel; every configured
section goes into the channel its ``channel_key`` names. An embed is only
posted when none of the bot's recent messages in that channel already
carries the same title.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

import discord

from gigglesd.configuration.onboarding_settings import (
    AnnouncementChannel,
    AnnouncementSection,
    AnnouncementSettings,
)
from gigglesd.util import discord_utils
from gigglesd.util.logger import get_logger

logger = get_logger("announcements")

# How many recent messages are scanned for an earlier copy of an embed
DEDUPE_HISTORY_LIMIT = 20


def resolve_channel(guild: discord.Guild, entry: AnnouncementChannel):
    """Return the channel an entry points to, by id first and then by exact name."""
    if entry.id:
        channel = guild.get_channel(entry.id)
        if channel is not None:
            return channel
    return discord_utils.find_text_channel_by_name(guild, entry.name)


def resolve_channel_mentions(guild: discord.Guild, channels: Dict[str, AnnouncementChannel]) -> Dict[str, str]:
    """Map each channel key to a mention, or to ``#name`` when the channel is missing."""
    mentions: Dict[str, str] = {}
    for key, entry in channels.items():
        channel = resolve_channel(guild, entry)
        mentions[key] = f"<#{channel.id}>" if channel is not None else f"#{entry.name}"
    return mentions


def render_paragraphs(paragraphs: Iterable[str], mentions: Dict[str, str]) -> str:
    text = "\n".join(paragraphs)
    for key, mention in mentions.items():
        text = text.replace(f"{{{key}}}", mention)
    return text


def build_announcement_embed(
    section: AnnouncementSection,
    mentions: Dict[str, str],
    color: int,
    banner_url: Optional[str] = None,
) -> discord.Embed:
    embed = discord.Embed(
        title=section.title,
        description=render_paragraphs(section.paragraphs, mentions),
        color=color,
        timestamp=datetime.now(timezone.utc),
    )
    if banner_url:
        embed.set_image(url=banner_url)
    return embed


async def already_posted(channel: discord.TextChannel, me: discord.abc.Snowflake, title: str) -> bool:
    """Return True if one of the bot's recent messages has an embed titled ``title``."""
    async for message in channel.history(limit=DEDUPE_HISTORY_LIMIT):
        if message.author.id != me.id or not message.embeds:
            continue
        if message.embeds[0].title == title:
            return True
    return False


def find_announcement_channel(guild: discord.Guild, settings: AnnouncementSettings) -> Optional[discord.TextChannel]:
    return discord_utils.find_channel_by_hints(guild, settings.channel_name_hints)


async def send_static_announcement(guild: discord.Guild, settings: AnnouncementSettings) -> int:
    """
    Post the main announcement and its sections in ``guild``.

    Returns:
        int: Number of embeds posted. Zero when the guild was already announced
        to or has no announcement channel.
    """
    try:
        me = guild.me
        channel = find_announcement_channel(guild, settings)
        if channel is None or me is None:
            logger.info("[ANNOUNCEMENTS] No announcement channel found in %s, skipping", guild.name)
            return 0

        if await already_posted(channel, me, settings.marker_title):
            logger.info("[ANNOUNCEMENTS] Announcement already exists in %s, skipping", guild.name)
            return 0

        mentions = resolve_channel_mentions(guild, settings.channels)
        main_embed = build_announcement_embed(settings.main, mentions, settings.embed_color, settings.banner_url)
        await channel.send(embed=main_embed)
        logger.info("[ANNOUNCEMENTS] Static announcement sent in %s (#%s)", guild.name, channel.name)
        sent = 1

        channels = settings.channels
        for section in settings.sections:
            entry = channels.get(section.channel_key or "")
            target = resolve_channel(guild, entry) if entry else None
            if target is None:
                continue

            try:
                if await already_posted(target, me, section.title):
                    continue
                await target.send(embed=build_announcement_embed(section, mentions, settings.embed_color))
            except Exception as exc:
                logger.warning("[ANNOUNCEMENTS] Failed to send section '%s' in #%s: %s", section.title, target.name, exc)
                continue

            sent += 1
            logger.info("[ANNOUNCEMENTS] Section '%s' sent in #%s", section.title, target.name)

        return sent
    except Exception:
        logger.exception("[ANNOUNCEMENTS] Failed to send announcements in %s", getattr(guild, "name", "unknown guild"))
        return 0
