"""
Pytest configuration and fixtures for GigglesD tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from gigglesd.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID  # noqa: E402
from gigglesd.datatypes.link_edit_datatypes import EditEvent, ModerationActor  # noqa: E402

POSTED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _make_actor(permissions=(), user_id=4242, name="linkposter"):
    return ModerationActor(
        user_id=UserID(user_id),
        display_name=name,
        mention=f"<@{user_id}>",
        permissions=frozenset(permissions),
    )


def _make_event(original="Hello", edited="Hello https://x.com", permissions=(), posted_at=POSTED_AT):
    return EditEvent(
        actor=_make_actor(permissions),
        guild_id=GuildID(111),
        channel_id=ChannelID(222),
        message_id=MessageID(333),
        original_content=original,
        edited_content=edited,
        original_posted_at=posted_at,
    )


class FixedClock:
    """Callable clock returning ``POSTED_AT`` plus a settable offset."""

    def __init__(self, minutes: float = 0.0):
        self.minutes = minutes

    def __call__(self) -> datetime:
        return POSTED_AT + timedelta(minutes=self.minutes)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_actor():
    return _make_actor


@pytest.fixture
def make_event():
    return _make_event
