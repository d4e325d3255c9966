import json
import logging
from pathlib import Path
from typing import Optional

import fpm_supervisor.settings as default_settings

log = logging.getLogger(__name__)


class MergedSettings:
    """
    Merges default settings with JSON overrides.

    Precedence:
    1. Base values from `settings.py` (which already honour the environment and `.env`).
    2. Overrides from `overrides.json` for keys listed in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self, overrides_path: Optional[Path] = None) -> None:
        self.OVERRIDES_JSON_PATH: Path = Path(overrides_path or default_settings.OVERRIDES_JSON_PATH)

        self._load_defaults()
        self._load_overrides()

    def _load_defaults(self) -> None:
        """Loads all uppercase attributes from the settings module as defaults."""
        for key in dir(default_settings):
            if key.isupper() and key != "OVERRIDES_JSON_PATH":
                setattr(self, key, getattr(default_settings, key))

    def _load_overrides(self) -> None:
        """
        Applies settings from the overrides file.

        Only keys listed in `MODIFIABLE_SETTINGS` are accepted; unknown or
        protected keys are logged and skipped.
        """
        if not self.OVERRIDES_JSON_PATH.exists():
            return

        try:
            with self.OVERRIDES_JSON_PATH.open('r') as f:
                overrides = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.error(f"Failed to load or parse overrides file '{self.OVERRIDES_JSON_PATH}': {e}")
            return

        log.info(f"Loading configuration overrides from {self.OVERRIDES_JSON_PATH}")
        for key, value in overrides.items():
            if not hasattr(self, key):
                log.warning(f"Override setting '{key}' not found in default settings. Ignoring.")
                continue
            if key not in self.MODIFIABLE_SETTINGS:
                log.warning(f"Attempted to override non-modifiable setting '{key}'. Ignoring.")
                continue

            original_value = getattr(self, key)
            if isinstance(original_value, float):
                try:
                    value = float(value)
                except (ValueError, TypeError) as e:
                    log.error(f"Could not convert override '{value}' for key '{key}': {e}")
                    continue
            setattr(self, key, value)
            log.debug(f"Overridden setting: {key} = {value}")


# Singleton instance imported by other modules
effective_settings = MergedSettings()
