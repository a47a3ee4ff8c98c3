"""
discord_utils.py
================

Low-level Discord helpers for GigglesD.

Stateless functions for event filtering and channel selection. Channel
lookups only consider text channels the bot can both view and send to.
"""

from typing import Iterable, Optional, Union

import discord

from gigglesd.util.logger import get_logger

logger = get_logger("discord_utils")


def is_ignored_author(author: Union[discord.User, discord.Member]) -> bool:
    """
    Check if an author should be ignored by event handlers (bots or non-members).

    Args:
        author (discord.User | discord.Member): The user or member to check.

    Returns:
        bool: True if the author is a bot or not a guild member.
    """
    return author.bot or not isinstance(author, discord.Member)


def should_process_edit(before: discord.Message, after: discord.Message) -> bool:
    """
    Decide whether an edit reaches the link-edit rule.

    Ignores edits outside guilds, edits by bots or non-members, system
    messages, and edits that leave the text untouched (embed unfurls,
    pins).
    """
    if after.guild is None:
        return False
    if is_ignored_author(after.author):
        return False
    if after.is_system():
        return False
    return before.content != after.content


def is_text_channel(channel) -> bool:
    return getattr(channel, "type", None) == discord.ChannelType.text


def is_channel_suitable(channel, me: Optional[discord.Member]) -> bool:
    """
    Check whether the bot can post in ``channel``.

    Args:
        channel: Candidate guild channel.
        me (discord.Member | None): The bot's own member object in the guild.

    Returns:
        bool: True for text channels where the bot can view and send messages.
    """
    if channel is None or me is None or not is_text_channel(channel):
        return False

    try:
        permissions = channel.permissions_for(me)
    except Exception as exc:  # pragma: no cover - discord internals guard
        logger.debug("Could not resolve permissions for %s: %s", getattr(channel, "name", "unknown"), exc)
        return False

    return bool(permissions and permissions.view_channel and permissions.send_messages)


def find_text_channel_by_name(guild: discord.Guild, name: str) -> Optional[discord.TextChannel]:
    """Return the first text channel whose name equals ``name`` (case-insensitive)."""
    wanted = name.lower()
    for channel in getattr(guild, "channels", []):
        if is_text_channel(channel) and channel.name.lower() == wanted:
            return channel
    return None


def find_channel_by_hints(
    guild: discord.Guild,
    name_hints: Iterable[str],
    *,
    require_suitable: bool = True,
) -> Optional[discord.TextChannel]:
    """
    Return the first text channel whose name contains one of ``name_hints``.

    Hints are tried in order, so earlier hints win over later ones.
    """
    me = getattr(guild, "me", None)
    channels = list(getattr(guild, "channels", []))
    for hint in name_hints:
        hint = hint.lower()
        for channel in channels:
            if not is_text_channel(channel) or hint not in channel.name.lower():
                continue
            if require_suitable and not is_channel_suitable(channel, me):
                continue
            return channel
    return None


def first_suitable_channel(guild: discord.Guild) -> Optional[discord.TextChannel]:
    me = getattr(guild, "me", None)
    for channel in getattr(guild, "channels", []):
        if is_channel_suitable(channel, me):
            return channel
    return None


def find_best_welcome_channel(
    guild: discord.Guild,
    preferred_channel_id: Optional[int] = None,
    name_hints: Iterable[str] = (),
) -> Optional[discord.TextChannel]:
    """
    Pick the channel new members are greeted in.

    Order: the preferred channel, the guild's system channel, the first
    channel matching a name hint, then any channel the bot can post in.

    Args:
        guild (discord.Guild): Guild the member joined.
        preferred_channel_id (int | None): Configured welcome channel.
        name_hints (Iterable[str]): Substrings of common welcome channel names.

    Returns:
        discord.TextChannel | None: The chosen channel, or None if the bot can post nowhere.
    """
    me = getattr(guild, "me", None)
    if guild is None or me is None:
        return None

    if preferred_channel_id:
        preferred = guild.get_channel(int(preferred_channel_id))
        if is_channel_suitable(preferred, me):
            return preferred

    system_channel = getattr(guild, "system_channel", None)
    if is_channel_suitable(system_channel, me):
        return system_channel

    return find_channel_by_hints(guild, name_hints) or first_suitable_channel(guild)


def find_setup_channel(guild: discord.Guild, name_hints: Iterable[str] = ()) -> Optional[discord.TextChannel]:
    """
    Pick the channel the setup message is posted in after joining a guild.

    The system channel is used as-is; name hints only need a text channel,
    and the final fallback is the first channel the bot can post in.
    """
    system_channel = getattr(guild, "system_channel", None)
    if system_channel is not None:
        return system_channel
    return find_channel_by_hints(guild, name_hints, require_suitable=False) or first_suitable_channel(guild)
