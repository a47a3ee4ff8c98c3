"""
Link violation review cog.

Slash commands for moderators to inspect the link edit audit log:
- /link-violations: newest link edits, optionally filtered by action
- /link-violation-stats: counts over the last N days

Both commands require the Manage Messages permission and respond ephemerally.
"""

from datetime import datetime, timezone
from typing import List

import discord
from discord import Option
from discord.ext import commands

from gigglesd.database.database import get_db
from gigglesd.datatypes.discord_datatypes import GuildID
from gigglesd.datatypes.link_edit_datatypes import ActionTaken, LinkViolationRecord, LinkViolationStats
from gigglesd.util.format_utils import get_time_ago, truncate_text, escape_markdown
from gigglesd.util.logger import get_logger

logger = get_logger("link_violation_cmds")

ACTION_FILTERS = {
    "all": None,
    "deleted": ActionTaken.MESSAGE_DELETED,
    "allowed": ActionTaken.ALLOWED_WITHIN_GRACE_PERIOD,
}

# Embeds hold at most 25 fields
MAX_LISTED_VIOLATIONS = 25

# Discord rejects embeds whose text totals more than 6000 characters
EMBED_CHAR_LIMIT = 6000
# Room kept for the description and the overflow footer
EMBED_SUMMARY_RESERVE = 200


def build_violations_embed(records: List[LinkViolationRecord], action: str, now: datetime) -> discord.Embed:
    embed = discord.Embed(
        title="🔗 Recent Link Edits",
        color=discord.Color.orange(),
        timestamp=now,
    )
    if not records:
        embed.description = "No link edits recorded."
        return embed

    shown = 0
    for record in records[:MAX_LISTED_VIOLATIONS]:
        icon = "🗑️" if record.action_taken is ActionTaken.MESSAGE_DELETED else "✅"
        name = f"{icon} {record.violation_type.value} · {record.action_taken.value}"
        value = truncate_text(
            f"<@{record.user_id}> in <#{record.channel_id}> · {get_time_ago(record.created_at, now)}\n"
            f"**Before:** {escape_markdown(truncate_text(record.old_content, 200)) or '*empty*'}\n"
            f"**After:** {escape_markdown(truncate_text(record.new_content, 200)) or '*empty*'}",
            1024,
        )
        if len(embed) + len(name) + len(value) > EMBED_CHAR_LIMIT - EMBED_SUMMARY_RESERVE:
            break
        embed.add_field(name=name, value=value, inline=False)
        shown += 1

    embed.description = f"Showing {shown} record(s) (filter: {action})"
    hidden = len(records) - shown
    if hidden > 0:
        embed.set_footer(text=f"… {hidden} more record(s) not shown")
    return embed


def build_stats_embed(stats: LinkViolationStats, now: datetime) -> discord.Embed:
    embed = discord.Embed(
        title=f"📊 Link Edit Stats (last {stats.period_days} days)",
        color=discord.Color.blurple(),
        timestamp=now,
    )
    embed.add_field(name="Total", value=str(stats.total), inline=True)
    embed.add_field(name="Deleted", value=str(stats.deleted), inline=True)
    embed.add_field(name="Allowed (grace)", value=str(stats.allowed), inline=True)
    embed.add_field(name="Links added", value=str(stats.added), inline=True)
    embed.add_field(name="Links modified", value=str(stats.modified), inline=True)
    return embed


class LinkViolationCog(commands.Cog):
    """Read-only access to the link edit audit log."""

    def __init__(self, discord_bot_instance):
        self.discord_bot_instance = discord_bot_instance
        logger.info("Link violation cog loaded")

    async def _check_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False

        permissions = getattr(ctx.user, "guild_permissions", None)
        if not getattr(permissions, "manage_messages", False):
            await ctx.respond("You need the Manage Messages permission to review link edits.", ephemeral=True)
            return False
        return True

    @commands.slash_command(name="link-violations", description="Show recent link edits in this server.")
    async def link_violations(
        self,
        ctx: discord.ApplicationContext,
        action: Option(str, "Filter by action taken.", choices=list(ACTION_FILTERS), default="all"),  # type: ignore
        limit: Option(int, "How many records to show.", min_value=1, max_value=MAX_LISTED_VIOLATIONS, default=10),  # type: ignore
    ):
        """List the newest link edit records for the guild."""
        if not await self._check_context(ctx):
            return

        action = action if action in ACTION_FILTERS else "all"
        try:
            records = await get_db().get_recent_link_violations(
                GuildID(ctx.guild_id),
                limit=max(1, min(int(limit), MAX_LISTED_VIOLATIONS)),
                action_filter=ACTION_FILTERS[action],
            )
        except Exception as exc:
            logger.error("Failed to load link edits for guild %s: %s", ctx.guild_id, exc)
            await ctx.respond("Could not load link edits right now.", ephemeral=True)
            return

        await ctx.respond(embed=build_violations_embed(records, action, datetime.now(timezone.utc)), ephemeral=True)

    @commands.slash_command(name="link-violation-stats", description="Summarise link edits in this server.")
    async def link_violation_stats(
        self,
        ctx: discord.ApplicationContext,
        days: Option(int, "Number of days to include.", min_value=1, max_value=365, default=30),  # type: ignore
    ):
        """Show link edit counts for the last ``days`` days."""
        if not await self._check_context(ctx):
            return

        try:
            stats = await get_db().get_link_violation_stats(GuildID(ctx.guild_id), days=int(days))
        except Exception as exc:
            logger.error("Failed to load link edit stats for guild %s: %s", ctx.guild_id, exc)
            await ctx.respond("Could not load link edit stats right now.", ephemeral=True)
            return

        await ctx.respond(embed=build_stats_embed(stats, datetime.now(timezone.utc)), ephemeral=True)


def setup(discord_bot_instance):
    """Register the LinkViolationCog with the bot."""
    discord_bot_instance.add_cog(LinkViolationCog(discord_bot_instance))
