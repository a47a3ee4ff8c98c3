from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from gigglesd.bot.cogs import link_violation_cmds
from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.datatypes.link_edit_datatypes import (
    ActionTaken,
    LinkViolationRecord,
    LinkViolationStats,
    UrlChangeType,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class Ctx:
    def __init__(self, guild_id=10, manage_messages=True):
        self.guild_id = guild_id
        self.user = SimpleNamespace(guild_permissions=SimpleNamespace(manage_messages=manage_messages))
        self.respond = AsyncMock()


def make_record(action=ActionTaken.MESSAGE_DELETED, minutes_ago=5):
    return LinkViolationRecord(
        guild_id=GuildID(10),
        user_id=UserID(4242),
        username="linkposter",
        channel_id=ChannelID(222),
        message_id=MessageID(333),
        violation_type=UrlChangeType.ADDED,
        old_content="Hello",
        new_content="Hello *https://x.com*",
        action_taken=action,
        created_at=NOW - timedelta(minutes=minutes_ago),
    )


def test_setup_adds_cog():
    captured = {}
    link_violation_cmds.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)))
    assert isinstance(captured["cog"], link_violation_cmds.LinkViolationCog)


def test_build_violations_embed_lists_records():
    embed = link_violation_cmds.build_violations_embed(
        [make_record(), make_record(ActionTaken.ALLOWED_WITHIN_GRACE_PERIOD, 90)], "all", NOW
    )

    assert embed.description == "Showing 2 record(s) (filter: all)"
    assert len(embed.fields) == 2
    first = embed.fields[0]
    assert first.name.endswith("added · message_deleted")
    assert "<@4242> in <#222> · 5m ago" in first.value
    assert "\\*https://x.com\\*" in first.value
    assert embed.fields[1].name.startswith("✅")
    assert "1h ago" in embed.fields[1].value


def test_build_violations_embed_stays_within_discord_size_limit():
    records = []
    for _ in range(link_violation_cmds.MAX_LISTED_VIOLATIONS):
        record = make_record()
        record.old_content = "o" * 1000
        record.new_content = "https://x.com/" + "n" * 1000
        records.append(record)

    embed = link_violation_cmds.build_violations_embed(records, "all", NOW)

    assert len(embed) <= link_violation_cmds.EMBED_CHAR_LIMIT
    assert 0 < len(embed.fields) < len(records)
    hidden = len(records) - len(embed.fields)
    assert embed.description == f"Showing {len(embed.fields)} record(s) (filter: all)"
    assert embed.to_dict()["footer"]["text"] == f"… {hidden} more record(s) not shown"

def test_build_violations_embed_empty():
    embed = link_violation_cmds.build_violations_embed([], "deleted", NOW)
    assert embed.description == "No link edits recorded."
    assert len(embed.fields) == 0


def test_build_stats_embed():
    stats = LinkViolationStats(total=3, deleted=2, allowed=1, added=1, modified=2, period_days=7)
    embed = link_violation_cmds.build_stats_embed(stats, NOW)

    assert embed.title == "📊 Link Edit Stats (last 7 days)"
    assert [(f.name, f.value) for f in embed.fields] == [
        ("Total", "3"),
        ("Deleted", "2"),
        ("Allowed (grace)", "1"),
        ("Links added", "1"),
        ("Links modified", "2"),
    ]


@pytest.mark.asyncio
async def test_link_violations_requires_guild():
    cog = link_violation_cmds.LinkViolationCog(SimpleNamespace())
    ctx = Ctx(guild_id=None)

    await link_violation_cmds.LinkViolationCog.link_violations.callback(cog, ctx, "all", 10)

    ctx.respond.assert_awaited_once_with("This command can only be used in a server.", ephemeral=True)


@pytest.mark.asyncio
async def test_link_violations_requires_manage_messages():
    cog = link_violation_cmds.LinkViolationCog(SimpleNamespace())
    ctx = Ctx(manage_messages=False)

    await link_violation_cmds.LinkViolationCog.link_violation_stats.callback(cog, ctx, 30)

    message = ctx.respond.await_args.args[0]
    assert "Manage Messages" in message
    assert ctx.respond.await_args.kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_link_violations_filters_by_action(monkeypatch):
    db = SimpleNamespace(get_recent_link_violations=AsyncMock(return_value=[make_record()]))
    monkeypatch.setattr(link_violation_cmds, "get_db", lambda: db)
    cog = link_violation_cmds.LinkViolationCog(SimpleNamespace())
    ctx = Ctx()

    await link_violation_cmds.LinkViolationCog.link_violations.callback(cog, ctx, "deleted", 5)

    db.get_recent_link_violations.assert_awaited_once_with(
        GuildID(10), limit=5, action_filter=ActionTaken.MESSAGE_DELETED
    )
    kwargs = ctx.respond.await_args.kwargs
    assert kwargs["ephemeral"] is True
    assert len(kwargs["embed"].fields) == 1


@pytest.mark.asyncio
async def test_link_violations_reports_database_errors(monkeypatch):
    db = SimpleNamespace(get_recent_link_violations=AsyncMock(side_effect=RuntimeError("closed")))
    monkeypatch.setattr(link_violation_cmds, "get_db", lambda: db)
    cog = link_violation_cmds.LinkViolationCog(SimpleNamespace())
    ctx = Ctx()

    await link_violation_cmds.LinkViolationCog.link_violations.callback(cog, ctx, "all", 10)

    ctx.respond.assert_awaited_once_with("Could not load link edits right now.", ephemeral=True)


@pytest.mark.asyncio
async def test_link_violation_stats_uses_days(monkeypatch):
    stats = LinkViolationStats(total=0, deleted=0, allowed=0, added=0, modified=0, period_days=14)
    db = SimpleNamespace(get_link_violation_stats=AsyncMock(return_value=stats))
    monkeypatch.setattr(link_violation_cmds, "get_db", lambda: db)
    cog = link_violation_cmds.LinkViolationCog(SimpleNamespace())
    ctx = Ctx()

    await link_violation_cmds.LinkViolationCog.link_violation_stats.callback(cog, ctx, 14)

    db.get_link_violation_stats.assert_awaited_once_with(GuildID(10), days=14)
    assert ctx.respond.await_args.kwargs["embed"].title == "📊 Link Edit Stats (last 14 days)"
