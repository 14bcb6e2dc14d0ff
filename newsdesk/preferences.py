"""Key -> JSON blob preference store (settings, bookmarks, read later, setup flag)."""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from .core import load_json_or_empty_dict, save_json
from .models import Settings

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────
# Keys
# ─────────────────────────────────────────────────────────────

SETTINGS_KEY = "newsSettings"
BOOKMARKS_KEY = "bookmarkedArticles"
READ_LATER_KEY = "readLaterArticles"
SETUP_KEY = "hasCompletedSetup"


class PreferenceStore:
    """
    Small persistent key/value store backed by one JSON file.

    The file is read once at construction and rewritten on every change.
    With ``path=None`` nothing is persisted (useful for tests and
    throwaway sessions).
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._data: dict[str, Any] = load_json_or_empty_dict(self.path) if self.path else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def _flush(self) -> None:
        if self.path is not None:
            save_json(self._data, self.path)

    # ─────────────────────────────────────────────────────────────
    # Typed accessors
    # ─────────────────────────────────────────────────────────────

    def load_settings(self) -> Settings:
        """
        Saved settings merged over the defaults.

        Unknown keys are ignored; keys with invalid values fall back to
        their defaults instead of discarding the whole blob.
        """
        saved = self.get(SETTINGS_KEY)
        if not isinstance(saved, dict):
            return Settings()

        values = dict(saved)
        while True:
            try:
                return Settings(**values)
            except ValidationError as e:
                bad_keys = {err["loc"][0] for err in e.errors() if err.get("loc")}
                bad_keys &= set(values)
                if not bad_keys:
                    logger.warning(f"Discarding saved settings: {e}")
                    return Settings()
                logger.warning(f"Resetting invalid settings to defaults: {sorted(bad_keys)}")
                for key in bad_keys:
                    values.pop(key)

    def save_settings(self, settings: Settings) -> None:
        self.set(SETTINGS_KEY, settings.model_dump(mode="json"))

    def load_ids(self, key: str) -> list[str]:
        """Load a list of article IDs (bookmarks / read later)."""
        value = self.get(key, [])
        if not isinstance(value, list):
            logger.warning(f"Ignoring malformed id list under {key!r}")
            return []
        return [str(v) for v in value]

    def save_ids(self, key: str, ids: Iterable[str]) -> None:
        self.set(key, list(ids))

    @property
    def setup_completed(self) -> bool:
        return bool(self.get(SETUP_KEY, False))

    def mark_setup_completed(self) -> None:
        self.set(SETUP_KEY, True)
