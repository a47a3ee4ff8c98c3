from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from gigglesd.configuration.link_edit_settings import LinkEditSettings
from gigglesd.configuration.onboarding_settings import AnnouncementSettings, OnboardingSettings
from gigglesd.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml``, exposes dictionary-like
    access helpers, and wraps each section in a typed settings helper.
    Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found, using defaults.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("[APP CONFIGURATION] Config %s is not a mapping, using defaults.", self.config_path)
            return {}
        return data

    def _section(self, key: str) -> Dict[str, Any]:
        section = self._data.get(key, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping (do not mutate)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def link_edit(self) -> LinkEditSettings:
        """Return the link-edit moderation settings."""
        return LinkEditSettings(self._section("link_edit_moderation"))

    @property
    def onboarding(self) -> OnboardingSettings:
        """Return the member welcome settings."""
        return OnboardingSettings(self._section("onboarding"))

    @property
    def announcements(self) -> AnnouncementSettings:
        """Return the static announcement settings.

        ``ANNOUNCEMENT_BANNER_URL`` from the environment overrides the
        configured banner image.
        """
        section = dict(self._section("announcements"))
        banner_override = os.getenv("ANNOUNCEMENT_BANNER_URL")
        if banner_override:
            section["banner_url"] = banner_override
        return AnnouncementSettings(section)

    @property
    def presence_text(self) -> str:
        return str(self._data.get("presence_text") or "for new members! 👋")


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
