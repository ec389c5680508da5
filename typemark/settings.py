"""User preferences stored in the platform config directory.

Only preferences live here (wrap width, where books are kept). Typing
progress is never saved.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import TypingConstants

logger = logging.getLogger(__name__)

APP_NAME = "typemark"


def default_books_dir() -> str:
    return str(Path.home() / TypingConstants.BOOKS_DIRNAME)


@dataclass
class Settings:
    width: int = TypingConstants.DEFAULT_WIDTH
    books_dir: str = ""

    def __post_init__(self):
        if not self.books_dir:
            self.books_dir = default_books_dir()


def validate_setting(key: str, value: Any) -> bool:
    """Return True if ``value`` is acceptable for setting ``key``."""
    if key == 'width':
        # bool is an int subclass; a width of True is not meant
        return isinstance(value, int) and not isinstance(value, bool) \
            and value >= TypingConstants.MIN_WIDTH
    if key == 'books_dir':
        return isinstance(value, str) and bool(value)
    # Unknown settings are ignored, not rejected (forward compatibility)
    return True


class SettingsStore:
    """Loads and saves ``Settings`` as JSON."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir(APP_NAME))
        self.settings_file = self._config_dir / "settings.json"

    def load(self) -> Settings:
        """Read settings, falling back to defaults for anything unusable."""
        settings = Settings()
        if not self.settings_file.exists():
            return settings
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self.settings_file}: {e}")
            return settings

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            return settings

        for key, value in data.items():
            if not hasattr(settings, key):
                continue
            if validate_setting(key, value):
                setattr(settings, key, value)
            else:
                logger.warning(f"Ignoring invalid setting {key}={value!r}")
        return settings

    def save(self, settings: Settings) -> bool:
        """Write settings atomically (temp file + rename).

        Returns:
            True if save was successful, False otherwise.
        """
        data: Dict[str, Any] = asdict(settings)
        temp_file = self.settings_file.with_suffix('.tmp')
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self.settings_file)
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self.settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False
