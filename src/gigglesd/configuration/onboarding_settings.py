"""
Typed accessors for the ``onboarding`` and ``announcements`` configuration sections.

Channel references for announcements are configuration data: a declarative
``channels`` table mapping a key to ``{id, name}``. Paragraphs refer to those
keys with ``{key}`` placeholders that are resolved per guild.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_WELCOME_MESSAGE = "Welcome to {guild}, {user}! 🎉"

DEFAULT_WELCOME_CHANNEL_NAMES = [
    "welcome", "welcomes", "new-members", "greetings",
    "general", "main", "lobby", "entrance",
    "announcements", "community",
]

DEFAULT_SETUP_CHANNEL_NAMES = ["general", "main", "welcome", "announcements", "bot-commands"]

DEFAULT_ANNOUNCEMENT_CHANNEL_HINTS = ["announcement", "announcements", "announce", "server-announce", "news"]

DEFAULT_BANNER_URL = "https://i.imgur.com/8rWCY4B.png"


def _str_list(value: Any, default: List[str]) -> List[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(item) for item in value if item is not None]


def _color(value: Any, default: int) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.lstrip("#"), 16)
        except ValueError:
            return default
    return default


class OnboardingSettings:
    """Welcome message, welcome channel selection and welcome DM settings."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    @property
    def preferred_channel_name(self) -> str:
        return str(self.data.get("preferred_channel_name") or "new-joiners")

    @property
    def welcome_channel_names(self) -> List[str]:
        return _str_list(self.data.get("welcome_channel_names"), DEFAULT_WELCOME_CHANNEL_NAMES)

    @property
    def setup_channel_names(self) -> List[str]:
        return _str_list(self.data.get("setup_channel_names"), DEFAULT_SETUP_CHANNEL_NAMES)

    @property
    def default_welcome_message(self) -> str:
        return str(self.data.get("default_welcome_message") or DEFAULT_WELCOME_MESSAGE)

    @property
    def send_welcome_dm(self) -> bool:
        return bool(self.data.get("send_welcome_dm", True))

    @property
    def welcome_dm_message(self) -> str:
        return str(self.data.get("welcome_dm_message") or "").strip()

    @property
    def embed_color(self) -> int:
        return _color(self.data.get("embed_color"), 0x7289DA)


@dataclass(slots=True)
class AnnouncementChannel:
    """Entry of the declarative channel table. ``id`` wins over ``name``."""
    key: str
    name: str
    id: Optional[int] = None


@dataclass(slots=True)
class AnnouncementSection:
    """An embed posted once into the channel identified by ``channel_key``."""
    title: str
    paragraphs: List[str] = field(default_factory=list)
    channel_key: Optional[str] = None


class AnnouncementSettings:
    """Static announcement content and the channels it is posted into."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    @property
    def enabled(self) -> bool:
        return bool(self.data.get("enabled", False))

    @property
    def banner_url(self) -> str:
        return str(self.data.get("banner_url") or DEFAULT_BANNER_URL)

    @property
    def channel_name_hints(self) -> List[str]:
        return _str_list(self.data.get("channel_name_hints"), DEFAULT_ANNOUNCEMENT_CHANNEL_HINTS)

    @property
    def marker_title(self) -> str:
        """Title of the embed whose presence means the guild was already announced to."""
        return str(self.data.get("marker_title") or self.main.title)

    @property
    def embed_color(self) -> int:
        return _color(self.data.get("embed_color"), 0x201679)

    @property
    def channels(self) -> Dict[str, AnnouncementChannel]:
        raw = self.data.get("channels")
        if not isinstance(raw, dict):
            return {}

        channels: Dict[str, AnnouncementChannel] = {}
        for key, entry in raw.items():
            if isinstance(entry, str):
                channels[str(key)] = AnnouncementChannel(key=str(key), name=entry)
            elif isinstance(entry, dict):
                channel_id = entry.get("id")
                channels[str(key)] = AnnouncementChannel(
                    key=str(key),
                    name=str(entry.get("name") or key),
                    id=int(channel_id) if channel_id else None,
                )
        return channels

    @property
    def main(self) -> AnnouncementSection:
        raw = self.data.get("main")
        if not isinstance(raw, dict):
            return AnnouncementSection(title="About GigglesD")
        return AnnouncementSection(
            title=str(raw.get("title") or "About GigglesD"),
            paragraphs=_str_list(raw.get("paragraphs"), []),
        )

    @property
    def sections(self) -> List[AnnouncementSection]:
        raw = self.data.get("sections")
        if not isinstance(raw, list):
            return []
        return [
            AnnouncementSection(
                title=str(item.get("title", "")),
                paragraphs=_str_list(item.get("paragraphs"), []),
                channel_key=item.get("channel_key"),
            )
            for item in raw
            if isinstance(item, dict) and item.get("title") and item.get("channel_key")
        ]
