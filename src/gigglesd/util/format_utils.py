import random
import re
from datetime import datetime, timezone
from typing import Optional

from gigglesd.util.logger import get_logger

logger = get_logger("format_utils")

WELCOME_EMOJIS = ["🎉", "👋", "🎊", "🎈", "🌟", "✨", "🚀", "🎯", "💫", "🔥"]

SNOWFLAKE_PATTERN = re.compile(r"^\d{17,19}$")
MARKDOWN_PATTERN = re.compile(r"([*_`~\\])")


def truncate_text(text: Optional[str], max_length: int = 100, suffix: str = "...") -> str:
    """Shorten ``text`` to at most ``max_length`` characters, ending with ``suffix``.

    Args:
        text: Text to shorten. ``None`` becomes an empty string.
        max_length: Maximum length of the result, suffix included.
        suffix: Appended when the text was cut.

    Returns:
        The original text when it already fits, otherwise the cut text.
    """
    if not text or len(text) <= max_length:
        return text or ""
    return text[: max(max_length - len(suffix), 0)] + suffix


def escape_markdown(text: Optional[str]) -> str:
    """Escape Discord markdown control characters (``* _ ` ~ \\``)."""
    if not text:
        return ""
    return MARKDOWN_PATTERN.sub(r"\\\1", text)


def is_valid_snowflake(value: object) -> bool:
    """Return True if ``value`` looks like a Discord snowflake (17-19 digits)."""
    return SNOWFLAKE_PATTERN.match(str(value)) is not None


def get_time_ago(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Return a short relative time such as ``5m ago``.

    Anything a week or older is rendered as a plain date.
    """
    if value is None:
        return "Unknown"

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    diff_minutes = int((now - value).total_seconds() // 60)
    diff_hours = diff_minutes // 60
    diff_days = diff_hours // 24

    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    if diff_days < 7:
        return f"{diff_days}d ago"
    return value.strftime("%Y-%m-%d")


def random_welcome_emoji() -> str:
    return random.choice(WELCOME_EMOJIS)
