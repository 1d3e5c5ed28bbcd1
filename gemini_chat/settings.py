"""
Settings store.

Settings are stored as a JSON object in ``Asset/settings.json`` inside the
project root::

    {
      "gemini_api_key": "...",
      "gemini_model": "gemini-1.5-flash",
      "saved_gems": [{"name": "My Gem", "instruction": "You are..."}]
    }

Missing keys are filled from :data:`DEFAULT_SETTINGS` on load and every
mutation is written back immediately.  :class:`Settings` is the
``ConfigSource`` the chat session reads from.
"""

import copy
import json
import logging
import os

from .composer import DEFAULT_MODEL
from .paths import asset_path

log = logging.getLogger("gemini_chat")

DEFAULT_SETTINGS: dict = {
    "gemini_api_key": "",
    "gemini_model": DEFAULT_MODEL,
    "saved_gems": [],
}


def _normalise_gems(value) -> list[dict] | None:
    """Return *value* as a list of ``{"name", "instruction"}`` dicts.

    Returns ``None`` when *value* is not a list.  Entries that are not
    objects are dropped; missing fields become empty strings.
    """
    if not isinstance(value, list):
        return None
    gems: list[dict] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        gems.append({
            "name": str(item.get("name", "")),
            "instruction": str(item.get("instruction", "")),
        })
    return gems


class Settings:
    """Load / save wrapper around the settings JSON file."""

    DEFAULT_FILE = "settings.json"

    def __init__(self, storage_file: str | None = None) -> None:
        self.storage_file = storage_file or asset_path(self.DEFAULT_FILE)
        self._data: dict = copy.deepcopy(DEFAULT_SETTINGS)
        self._load()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not os.path.exists(self.storage_file):
            return
        try:
            with open(self.storage_file, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            log.warning("[CFG] Could not read %s (%s); using defaults.",
                        self.storage_file, exc)
            return
        if not isinstance(raw, dict):
            log.warning("[CFG] %s does not contain a JSON object; "
                        "using defaults.", self.storage_file)
            return

        data = copy.deepcopy(DEFAULT_SETTINGS)
        for key in ("gemini_api_key", "gemini_model"):
            if isinstance(raw.get(key), str):
                data[key] = raw[key]
        gems = _normalise_gems(raw.get("saved_gems"))
        if gems is not None:
            data["saved_gems"] = gems
        self._data = data
        log.debug("[CFG] Settings loaded from %s (model=%s, %d saved gem(s), "
                  "key set=%s)", self.storage_file, data["gemini_model"],
                  len(data["saved_gems"]), bool(data["gemini_api_key"]))

    def _save(self) -> None:
        with open(self.storage_file, "w", encoding="utf-8") as fh:
            json.dump(self._data, fh, ensure_ascii=False, indent=2)

    # ------------------------------------------------------------------
    # ConfigSource
    # ------------------------------------------------------------------

    def get_api_key(self) -> str:
        return self._data["gemini_api_key"]

    def get_model(self) -> str:
        return self._data["gemini_model"] or DEFAULT_MODEL

    def get_personas(self) -> list[dict]:
        return copy.deepcopy(self._data["saved_gems"])

    # ------------------------------------------------------------------
    # Mutators (each one persists)
    # ------------------------------------------------------------------

    def set_api_key(self, value: str) -> None:
        self._data["gemini_api_key"] = value.strip()
        self._save()

    def set_model(self, value: str) -> None:
        self._data["gemini_model"] = value.strip()
        self._save()

    def set_personas(self, gems: list[dict]) -> None:
        normalised = _normalise_gems(gems)
        if normalised is None:
            raise TypeError("saved gems must be a list")
        self._data["saved_gems"] = normalised
        self._save()

    def personas_json(self) -> str:
        """Return the saved gems as pretty-printed JSON for editing."""
        return json.dumps(self._data["saved_gems"], ensure_ascii=False, indent=2)

    def set_personas_json(self, text: str) -> bool:
        """Replace the saved gems from JSON *text*.

        Invalid JSON, or JSON that is not an array, is ignored and the
        current gems are kept.  Returns whether the gems were saved.
        """
        try:
            gems = json.loads(text)
        except json.JSONDecodeError:
            log.warning("[CFG] Invalid JSON for Saved Gems; not saved.")
            return False
        if not isinstance(gems, list):
            log.warning("[CFG] Saved Gems must be a JSON array; not saved.")
            return False
        self.set_personas(gems)
        return True
