from typing import Any, Dict

DEFAULT_GRACE_PERIOD_MINUTES = 10.0
DEFAULT_WARNING_DELETE_AFTER_SECONDS = 20.0

DEFAULT_WARNING_MESSAGE = (
    "🚫 🔗 ✏️ ⏰ ‼️\n"
    "👋 {mention}, NO LINK EDITING AFTER {grace_minutes} MINUTES!\n"
    "🛡️ For server safety, your message has been deleted.\n"
    "🎇 This notice will self-destruct in {delete_after} seconds..."
)

DEFAULT_FALLBACK_WARNING_MESSAGE = (
    "⚠️ {mention}, link editing is not allowed after {grace_minutes} minutes for regular members.\n\n"
    "Please ask a moderator if you need to share a link."
)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


class LinkEditSettings:
    """Typed accessors for the ``link_edit_moderation`` configuration section.

    Mirrors the other settings helpers: explicit ``get``/``as_dict`` plus
    properties for the commonly used fields. Invalid numbers fall back to the
    defaults instead of raising.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    def _non_negative_float(self, key: str, default: float) -> float:
        try:
            value = float(self.data.get(key, default))
        except (TypeError, ValueError):
            return default
        return value if value >= 0 else default

    @property
    def enabled(self) -> bool:
        return bool(self.data.get("enabled", True))

    @property
    def grace_period_minutes(self) -> float:
        return self._non_negative_float("grace_period_minutes", DEFAULT_GRACE_PERIOD_MINUTES)

    @property
    def warning_delete_after_seconds(self) -> float:
        return self._non_negative_float("warning_delete_after_seconds", DEFAULT_WARNING_DELETE_AFTER_SECONDS)

    @property
    def warning_message(self) -> str:
        return str(self.data.get("warning_message") or DEFAULT_WARNING_MESSAGE)

    @property
    def fallback_warning_message(self) -> str:
        return str(self.data.get("fallback_warning_message") or DEFAULT_FALLBACK_WARNING_MESSAGE)

    def render_warning(self, mention: str) -> str:
        """Render the notice sent after a violating message was deleted."""
        return self.warning_message.format(
            mention=mention,
            grace_minutes=_format_number(self.grace_period_minutes),
            delete_after=_format_number(self.warning_delete_after_seconds),
        )

    def render_fallback_warning(self, mention: str) -> str:
        """Render the notice sent when the violating message could not be deleted."""
        return self.fallback_warning_message.format(
            mention=mention,
            grace_minutes=_format_number(self.grace_period_minutes),
            delete_after=_format_number(self.warning_delete_after_seconds),
        )
