"""
Member greeting and guild setup messages.

welcome_member() is the whole member-join flow: log the join, check that the
guild is active, greet the member in the best channel and send the welcome
DM. Every step logs its own failures so one broken step does not skip the
rest of the event.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import discord

from gigglesd.configuration.guild_settings import GuildSettingsManager
from gigglesd.configuration.onboarding_settings import OnboardingSettings
from gigglesd.database.database import Database
from gigglesd.datatypes.discord_datatypes import GuildID, UserID
from gigglesd.datatypes.guild_settings import GuildSettings
from gigglesd.util import discord_utils
from gigglesd.util.format_utils import random_welcome_emoji
from gigglesd.util.logger import get_logger

logger = get_logger("welcome")

FALLBACK_WELCOME_MESSAGE = "Welcome to the server! 🎉"


def format_welcome_message(template: Optional[str], member, guild) -> str:
    """Fill ``{user}``, ``{username}``, ``{guild}``/``{server}`` and ``{membercount}``.

    Returns a generic greeting when the template or the member/guild is missing.
    """
    if not template or member is None or guild is None:
        return FALLBACK_WELCOME_MESSAGE

    guild_name = getattr(guild, "name", None) or "this server"
    username = getattr(member, "name", None) or getattr(member, "display_name", None) or "Unknown"
    member_count = getattr(guild, "member_count", None) or 0

    return (
        template
        .replace("{user}", f"<@{member.id}>")
        .replace("{username}", str(username))
        .replace("{guild}", guild_name)
        .replace("{server}", guild_name)
        .replace("{membercount}", str(member_count))
    )


def build_welcome_embed(member: discord.Member, guild: discord.Guild, description: str, color: int) -> discord.Embed:
    embed = discord.Embed(
        title=f"{random_welcome_emoji()} Welcome to the Server!",
        description=description,
        color=color,
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(
        name="👤 Member Info",
        value=f"**Username:** {member.name}\n**ID:** {member.id}",
        inline=True,
    )
    embed.add_field(
        name="📊 Server Stats",
        value=f"**Total Members:** {guild.member_count}\n**Server:** {guild.name}",
        inline=True,
    )
    icon_url = guild.icon.url if guild.icon else None
    embed.set_footer(text=f"Welcome #{guild.member_count}", icon_url=icon_url)
    return embed


def choose_welcome_channel(guild: discord.Guild, guild_settings: GuildSettings, onboarding: OnboardingSettings):
    """Prefer the exact-name onboarding channel, then the usual welcome channel search."""
    preferred = discord_utils.find_text_channel_by_name(guild, onboarding.preferred_channel_name)
    if discord_utils.is_channel_suitable(preferred, guild.me):
        return preferred

    preferred_id = guild_settings.welcome_channel_id.to_int() if guild_settings.welcome_channel_id else None
    return discord_utils.find_best_welcome_channel(guild, preferred_id, onboarding.welcome_channel_names)


async def send_member_welcome(
    member: discord.Member,
    guild_settings: GuildSettings,
    onboarding: OnboardingSettings,
) -> bool:
    """Post the welcome embed for ``member``.

    Returns:
        bool: True if the greeting was posted.
    """
    guild = member.guild
    channel = choose_welcome_channel(guild, guild_settings, onboarding)
    if channel is None:
        logger.warning("[WELCOME] No suitable welcome channel found in %s", guild.name)
        return False

    template = guild_settings.welcome_message or onboarding.default_welcome_message
    description = format_welcome_message(template, member, guild)
    embed = build_welcome_embed(member, guild, description, onboarding.embed_color)

    try:
        await channel.send(content=f"{member.mention} just joined us! 🎉", embed=embed)
    except Exception as exc:
        logger.error("[WELCOME] Failed to send welcome for %s in #%s (%s): %s", member.name, channel.name, guild.name, exc)
        return False

    logger.info("[WELCOME] Welcome message sent for %s in %s", member.name, guild.name)
    return True


async def send_welcome_dm(member: discord.Member, text: str) -> bool:
    """DM the welcome text. Closed DMs are expected and only logged."""
    if not text:
        return False
    try:
        await member.send(text)
    except (discord.Forbidden, discord.HTTPException) as exc:
        logger.warning("[WELCOME] Could not send DM to %s: %s", member.name, exc)
        return False

    logger.info("[WELCOME] DM welcome message sent to %s", member.name)
    return True


async def welcome_member(
    member: discord.Member,
    *,
    db: Database,
    settings_manager: GuildSettingsManager,
    onboarding: OnboardingSettings,
) -> None:
    guild = member.guild
    logger.info("[WELCOME] New member joined: %s in %s", member.name, guild.name)

    joined_at = member.joined_at or datetime.now(timezone.utc)
    try:
        await db.log_member_join(GuildID.from_guild(guild), UserID.from_user(member), member.name, joined_at)
    except Exception as exc:
        logger.error("[WELCOME] Failed to log join of %s in %s: %s", member.name, guild.name, exc)

    guild_settings = await settings_manager.get(GuildID.from_guild(guild))
    if guild_settings is None or not guild_settings.is_active:
        logger.info("[WELCOME] Skipping welcome for %s (not active or no settings)", guild.name)
        return

    await send_member_welcome(member, guild_settings, onboarding)

    if onboarding.send_welcome_dm:
        await send_welcome_dm(member, onboarding.welcome_dm_message)


def build_setup_message(guild_name: str) -> str:
    return (
        f"🤖 **Thanks for adding Giggles to {guild_name}!**\n\n"
        "I'm here to welcome new members with customizable messages. Here's what I can do:\n\n"
        "✅ **Automatic welcome messages** when new members join\n"
        "📝 **Customizable welcome text** with placeholders like {user}, {guild}, {membercount}\n"
        "🎯 **Flexible channel selection** - I'll find the best channel or you can set one specifically\n"
        "📊 **Member join logging** to keep track of your community growth\n"
        "🔗 **Link edit protection** - links added to old messages are removed\n\n"
        "**Quick Setup:**\n"
        "• I'm already active and will welcome new members automatically!\n"
        "• I'll use channels like #welcome, #general, or your server's system channel\n"
        "• Moderators can review link edits with `/link-violations` and `/link-violation-stats`\n\n"
        "**Need help?** Contact the bot administrator for advanced configuration options.\n\n"
        "Ready to welcome your next member! 🎉"
    )


async def send_setup_message(guild: discord.Guild, onboarding: OnboardingSettings) -> bool:
    """Post the setup message after the bot joined ``guild``.

    Returns:
        bool: True if the message was posted.
    """
    channel = discord_utils.find_setup_channel(guild, onboarding.setup_channel_names)
    if channel is None:
        logger.warning("[SETUP] No suitable channel found for setup message in %s", guild.name)
        return False

    try:
        await channel.send(build_setup_message(guild.name))
    except Exception as exc:
        logger.warning("[SETUP] Could not send setup message in %s: %s", guild.name, exc)
        return False

    logger.info("[SETUP] Setup message sent to #%s in %s", channel.name, guild.name)
    return True
