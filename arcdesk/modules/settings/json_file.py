from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from arcdesk.foundation.json_file import JsonFile, ScopedJsonFile
from modulekit import define_capability

SETTINGS_PATH = "app/settings.json"

DEFAULT_SETTINGS: dict[str, Any] = {
    "active_profile_id": None,
    "favorites": [],
    "shortcuts": {"send": "enter"},
}

SEND_SHORTCUTS = ("enter", "shift+enter")


def validate_settings(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"settings must be a mapping (type={type(data).__name__})")

    unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(unknown)}")

    merged = copy.deepcopy(DEFAULT_SETTINGS)
    merged.update(data)

    active = merged["active_profile_id"]
    if active is not None and (not isinstance(active, str) or not active.strip()):
        raise ValueError("settings.active_profile_id must be a non-empty string or null")
    if not isinstance(merged["favorites"], list):
        raise ValueError("settings.favorites must be a list")

    shortcuts = merged["shortcuts"]
    if not isinstance(shortcuts, Mapping) or shortcuts.get("send") not in SEND_SHORTCUTS:
        raise ValueError(f"settings.shortcuts.send must be one of: {', '.join(SEND_SHORTCUTS)}")
    return merged


class SettingsStore:
    def __init__(self, document: JsonFile):
        self._document = document

    def load(self) -> dict[str, Any]:
        return self._document.read()

    def save(self, settings: Mapping[str, Any]) -> dict[str, Any]:
        validated = validate_settings(settings)
        self._document.write(validated)
        return validated


def _adapt(json_file: ScopedJsonFile) -> SettingsStore:
    return SettingsStore(json_file.create(SETTINGS_PATH, DEFAULT_SETTINGS, validate_settings))


CAPABILITY = define_capability(_adapt)
