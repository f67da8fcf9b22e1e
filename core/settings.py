"""
User settings stored in ~/.theorie/settings.json.

Settings are grouped by category. Loading merges the file over the
defaults so settings added in newer versions always have a value.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.constants import DEFAULT_OCTAVE, DEFAULT_TUNING

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "general": {
        "prefer_flats": False,
        "default_octave": DEFAULT_OCTAVE,
        "undo_limit": 100,
        "auto_save_enabled": True,
    },
    "fretboard": {
        "tuning": DEFAULT_TUNING,
        "fret_count": 24,
    },
    "keyboard": {
        "start_note": "C2",
        "key_count": 61,
    },
    "audio": {
        "enabled": True,
        "sample_rate": 44100,
        "note_duration": 0.8,  # seconds per note
        "volume_db": -12.0,
        "output_device": "Default",
    },
    "midi": {
        "input_device": "None",
    },
}


def default_settings_path() -> Path:
    return Path.home() / ".theorie" / "settings.json"


class Settings:
    """
    Loaded settings with category/key access.

    Example:
        >>> settings = Settings.load()
        >>> settings.get("fretboard", "fret_count")
        24
    """

    def __init__(self, values: Dict[str, Dict[str, Any]], path: Optional[Path] = None):
        self.values = values
        self.path = path

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "Settings":
        """
        Load settings from config file.

        A missing file is created with the defaults. A file that cannot be
        read or parsed is left alone and the defaults are used.
        """
        config_path = Path(path) if path is not None else default_settings_path()
        values = copy.deepcopy(DEFAULT_SETTINGS)

        if not config_path.exists():
            settings = cls(values, config_path)
            try:
                settings.save()
                logger.info("Created new settings file with defaults at %s", config_path)
            except IOError as e:
                logger.warning("Failed to save default settings: %s", e)
            return settings

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load settings from %s: %s", config_path, e)
            return cls(values, config_path)

        if not isinstance(loaded, dict):
            logger.warning("Ignoring malformed settings file %s", config_path)
            return cls(values, config_path)

        # Merge with defaults (in case new settings added)
        for category in values:
            if isinstance(loaded.get(category), dict):
                values[category].update(loaded[category])

        return cls(values, config_path)

    def save(self):
        """
        Save settings to config file.

        Raises:
            IOError: If the file cannot be written
        """
        if self.path is None:
            raise IOError("Settings have no file path")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self.values, f, indent=2)
        except OSError as e:
            raise IOError(f"Failed to save settings to {self.path}: {e}") from e

    def get(self, category: str, key: str) -> Any:
        """
        Look up a setting.

        Raises:
            KeyError: If the category or key is unknown
        """
        return self.values[category][key]

    def set(self, category: str, key: str, value: Any):
        if category not in self.values:
            raise KeyError(f"Unknown settings category: {category}")
        self.values[category][key] = value
