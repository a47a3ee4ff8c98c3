from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from gigglesd.bot.cogs import message_listener
from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from gigglesd.moderation.link_edit_policy import LinkEditPolicy

POSTED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_author(*, bot=False, permissions=None):
    author = MagicMock(spec=discord.Member)
    author.bot = bot
    author.id = 4242
    author.name = "linkposter"
    author.mention = "<@4242>"
    author.guild_permissions = permissions or discord.Permissions.none()
    return author


def make_pair(before_content="Hello", after_content="Hello https://x.com", author=None):
    author = author or make_author()
    before = MagicMock()
    before.content = before_content
    before.created_at = POSTED_AT
    after = MagicMock()
    after.id = 333
    after.content = after_content
    after.author = author
    after.guild = SimpleNamespace(id=111)
    after.channel = SimpleNamespace(id=222)
    after.is_system.return_value = False
    return before, after


@pytest.fixture
def link_edit_enabled(monkeypatch):
    config = SimpleNamespace(link_edit=SimpleNamespace(enabled=True))
    monkeypatch.setattr(message_listener, "app_config", config)
    return config


def test_setup_adds_cog():
    captured = {}
    fake_bot = SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog))

    message_listener.setup(fake_bot)

    cog = captured["cog"]
    assert isinstance(cog, message_listener.MessageListenerCog)
    assert isinstance(cog.policy, LinkEditPolicy)


def test_build_edit_event_snapshots_message():
    before, after = make_pair(author=make_author(permissions=discord.Permissions(manage_messages=True)))

    event = message_listener.build_edit_event(before, after)

    assert event.actor.user_id == UserID(4242)
    assert event.actor.display_name == "linkposter"
    assert event.actor.mention == "<@4242>"
    assert "manage_messages" in event.actor.permissions
    assert event.guild_id == GuildID(111)
    assert event.channel_id == ChannelID(222)
    assert event.message_id == MessageID(333)
    assert event.original_content == "Hello"
    assert event.edited_content == "Hello https://x.com"
    assert event.original_posted_at == POSTED_AT


@pytest.mark.asyncio
async def test_on_message_edit_hands_event_to_policy(link_edit_enabled):
    policy = SimpleNamespace(handle=AsyncMock())
    cog = message_listener.MessageListenerCog(SimpleNamespace(), policy=policy)
    before, after = make_pair()

    await cog.on_message_edit(before, after)

    policy.handle.assert_awaited_once()
    event = policy.handle.await_args.args[0]
    assert event.message_id == MessageID(333)


@pytest.mark.asyncio
async def test_on_message_edit_ignores_unchanged_and_bot_edits(link_edit_enabled):
    policy = SimpleNamespace(handle=AsyncMock())
    cog = message_listener.MessageListenerCog(SimpleNamespace(), policy=policy)

    await cog.on_message_edit(*make_pair("same", "same"))
    await cog.on_message_edit(*make_pair(author=make_author(bot=True)))

    policy.handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_on_message_edit_respects_disabled_setting(monkeypatch):
    monkeypatch.setattr(message_listener, "app_config", SimpleNamespace(link_edit=SimpleNamespace(enabled=False)))
    policy = SimpleNamespace(handle=AsyncMock())
    cog = message_listener.MessageListenerCog(SimpleNamespace(), policy=policy)

    await cog.on_message_edit(*make_pair())

    policy.handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_on_message_edit_swallows_policy_errors(link_edit_enabled):
    policy = SimpleNamespace(handle=AsyncMock(side_effect=RuntimeError("boom")))
    cog = message_listener.MessageListenerCog(SimpleNamespace(), policy=policy)

    await cog.on_message_edit(*make_pair())

    policy.handle.assert_awaited_once()
