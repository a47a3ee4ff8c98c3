from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from gigglesd.configuration.onboarding_settings import (
    AnnouncementChannel,
    AnnouncementSection,
    AnnouncementSettings,
)
from gigglesd.onboarding.announcements import (
    already_posted,
    build_announcement_embed,
    render_paragraphs,
    resolve_channel,
    resolve_channel_mentions,
    send_static_announcement,
)

BOT_ID = 1


class FakeChannel:
    def __init__(self, channel_id, name, history=()):
        self.id = channel_id
        self.name = name
        self.type = discord.ChannelType.text
        self.sent = []
        self._history = list(history)
        self.send = AsyncMock(side_effect=self._record)

    async def _record(self, *args, **kwargs):
        self.sent.append(kwargs.get("embed"))

    def permissions_for(self, me):
        return SimpleNamespace(view_channel=True, send_messages=True)

    async def _iter_history(self, limit):
        for message in self._history[:limit]:
            yield message

    def history(self, limit=100):
        return self._iter_history(limit)


def bot_message(title, author_id=BOT_ID):
    return SimpleNamespace(author=SimpleNamespace(id=author_id), embeds=[SimpleNamespace(title=title)])


def make_guild(channels):
    return SimpleNamespace(
        name="Giggles",
        me=SimpleNamespace(id=BOT_ID),
        channels=channels,
        get_channel={c.id: c for c in channels}.get,
    )


def make_settings(**overrides):
    data = {
        "enabled": True,
        "banner_url": "https://cdn.example/banner.png",
        "channels": {"rules": {"name": "rules"}, "ideas": {"id": 77, "name": "ideas"}},
        "main": {"title": "Welcome!", "paragraphs": ["Read {rules}", "Share in {ideas}"]},
        "sections": [{"channel_key": "rules", "title": "Guidelines", "paragraphs": ["Be kind"]}],
    }
    data.update(overrides)
    return AnnouncementSettings(data)


def test_resolve_channel_prefers_id_then_name():
    pinned = FakeChannel(77, "renamed-ideas")
    named = FakeChannel(78, "ideas")
    guild = make_guild([named, pinned])

    assert resolve_channel(guild, AnnouncementChannel(key="ideas", name="ideas", id=77)) is pinned
    assert resolve_channel(guild, AnnouncementChannel(key="ideas", name="ideas", id=99)) is named
    assert resolve_channel(guild, AnnouncementChannel(key="x", name="missing")) is None


def test_resolve_channel_mentions_and_render():
    guild = make_guild([FakeChannel(5, "rules")])
    channels = {
        "rules": AnnouncementChannel(key="rules", name="rules"),
        "ideas": AnnouncementChannel(key="ideas", name="ideas"),
    }

    mentions = resolve_channel_mentions(guild, channels)

    assert mentions == {"rules": "<#5>", "ideas": "#ideas"}
    assert render_paragraphs(["See {rules}", "", "and {ideas}"], mentions) == "See <#5>\n\nand #ideas"


def test_build_announcement_embed_banner_is_optional():
    section = AnnouncementSection(title="Guidelines", paragraphs=["Be kind"])
    with_banner = build_announcement_embed(section, {}, 0x201679, "https://cdn.example/banner.png")
    without_banner = build_announcement_embed(section, {}, 0x201679)

    assert with_banner.title == "Guidelines"
    assert with_banner.description == "Be kind"
    assert with_banner.to_dict()["image"]["url"] == "https://cdn.example/banner.png"
    assert "image" not in without_banner.to_dict()


@pytest.mark.asyncio
async def test_already_posted_only_counts_own_messages():
    channel = FakeChannel(1, "announcements", history=[bot_message("Welcome!", author_id=999)])
    me = SimpleNamespace(id=BOT_ID)
    assert await already_posted(channel, me, "Welcome!") is False

    channel = FakeChannel(1, "announcements", history=[bot_message("Other"), bot_message("Welcome!")])
    assert await already_posted(channel, me, "Welcome!") is True


@pytest.mark.asyncio
async def test_send_static_announcement_posts_main_and_sections():
    announcements = FakeChannel(1, "announcements")
    rules = FakeChannel(2, "rules")
    guild = make_guild([announcements, rules])

    sent = await send_static_announcement(guild, make_settings())

    assert sent == 2
    main = announcements.sent[0]
    assert main.title == "Welcome!"
    assert main.description == "Read <#2>\nShare in #ideas"
    assert main.to_dict()["image"]["url"] == "https://cdn.example/banner.png"
    assert rules.sent[0].title == "Guidelines"


@pytest.mark.asyncio
async def test_send_static_announcement_skips_when_marker_present():
    announcements = FakeChannel(1, "announcements", history=[bot_message("Welcome!")])
    rules = FakeChannel(2, "rules")
    guild = make_guild([announcements, rules])

    assert await send_static_announcement(guild, make_settings()) == 0
    announcements.send.assert_not_awaited()
    rules.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_static_announcement_skips_already_posted_section():
    announcements = FakeChannel(1, "announcements")
    rules = FakeChannel(2, "rules", history=[bot_message("Guidelines")])
    guild = make_guild([announcements, rules])

    assert await send_static_announcement(guild, make_settings()) == 1
    rules.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_static_announcement_without_channel():
    guild = make_guild([FakeChannel(2, "rules")])
    assert await send_static_announcement(guild, make_settings()) == 0


@pytest.mark.asyncio
async def test_send_static_announcement_section_failure_keeps_count():
    announcements = FakeChannel(1, "announcements")
    rules = FakeChannel(2, "rules")
    rules.send.side_effect = RuntimeError("no access")
    guild = make_guild([announcements, rules])

    assert await send_static_announcement(guild, make_settings()) == 1
