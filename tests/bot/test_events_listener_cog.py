from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from gigglesd.bot.cogs import events_listener
from gigglesd.datatypes.discord_datatypes import GuildID


@pytest.fixture
def fake_bot():
    return SimpleNamespace(
        user=SimpleNamespace(id=999, display_name="Giggles"),
        change_presence=AsyncMock(),
        guilds=[SimpleNamespace(id=1, name="One"), SimpleNamespace(id=2, name="Two")],
    )


@pytest.fixture
def patched(monkeypatch):
    deps = SimpleNamespace(
        config=SimpleNamespace(
            presence_text="for new members! 👋",
            announcements=SimpleNamespace(enabled=True),
            onboarding=SimpleNamespace(setup_channel_names=["general"]),
        ),
        announce=AsyncMock(return_value=1),
        setup_message=AsyncMock(return_value=True),
        manager=SimpleNamespace(activate=AsyncMock(), deactivate=AsyncMock()),
    )
    monkeypatch.setattr(events_listener, "app_config", deps.config)
    monkeypatch.setattr(events_listener, "send_static_announcement", deps.announce)
    monkeypatch.setattr(events_listener, "send_setup_message", deps.setup_message)
    monkeypatch.setattr(events_listener, "guild_settings_manager", deps.manager)
    return deps


def make_guild():
    return SimpleNamespace(id=5, name="Giggles", member_count=10)


def test_setup_adds_cog():
    captured = {}
    events_listener.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)))
    assert isinstance(captured["cog"], events_listener.EventsListenerCog)


def test_guild_welcome_message_keeps_user_placeholder():
    assert events_listener.guild_welcome_message("Giggles") == (
        "Welcome to Giggles, {user}! 🎉 We're glad to have you here!"
    )


@pytest.mark.asyncio
async def test_on_ready_sets_presence_and_announces_once(fake_bot, patched):
    cog = events_listener.EventsListenerCog(fake_bot)

    await cog.on_ready()
    await cog.on_ready()

    assert fake_bot.change_presence.await_count == 2
    activity = fake_bot.change_presence.await_args.kwargs["activity"]
    assert activity.name == "for new members! 👋"
    assert patched.announce.await_count == 2
    assert [c.args[0].id for c in patched.announce.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_on_ready_skips_disabled_announcements(fake_bot, patched):
    patched.config.announcements.enabled = False
    cog = events_listener.EventsListenerCog(fake_bot)

    await cog.on_ready()

    patched.announce.assert_not_awaited()


@pytest.mark.asyncio
async def test_on_guild_join_activates_and_posts_setup(fake_bot, patched):
    cog = events_listener.EventsListenerCog(fake_bot)
    guild = make_guild()

    await cog.on_guild_join(guild)

    patched.manager.activate.assert_awaited_once_with(
        GuildID(5),
        "Giggles",
        welcome_message="Welcome to Giggles, {user}! 🎉 We're glad to have you here!",
    )
    patched.setup_message.assert_awaited_once_with(guild, patched.config.onboarding)


@pytest.mark.asyncio
async def test_on_guild_join_posts_setup_even_if_settings_fail(fake_bot, patched):
    patched.manager.activate.side_effect = RuntimeError("db locked")
    cog = events_listener.EventsListenerCog(fake_bot)

    await cog.on_guild_join(make_guild())

    patched.setup_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_on_guild_remove_deactivates(fake_bot, patched):
    cog = events_listener.EventsListenerCog(fake_bot)

    await cog.on_guild_remove(make_guild())

    patched.manager.deactivate.assert_awaited_once_with(GuildID(5), "Giggles")
