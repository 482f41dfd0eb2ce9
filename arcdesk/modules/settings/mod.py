"""Settings module: app-wide preferences, including which profile is active."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.modules.settings.json_file import SETTINGS_PATH
from modulekit import define_module


def _provides(deps: Mapping[str, Any], caps: Any, emit) -> dict[str, Any]:
    store = caps.json_file

    def get() -> dict[str, Any]:
        return store.load()

    def update(patch: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(patch, Mapping):
            raise TypeError(f"settings patch must be a mapping (type={type(patch).__name__})")
        current = store.load()
        current.update(patch)
        saved = store.save(current)
        emit("updated", saved)
        return saved

    def set_active_profile(payload: Mapping[str, Any]) -> dict[str, Any]:
        return update({"active_profile_id": payload.get("profile_id")})

    return {"get": get, "update": update, "set_active_profile": set_active_profile}


MODULE = define_module(
    capabilities=["json_file"],
    emits=["updated"],
    paths=[SETTINGS_PATH],
    provides=_provides,
)
