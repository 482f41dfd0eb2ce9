"""Personas module: named system prompts a thread can be started with."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from arcdesk.modules.personas.json_file import PERSONAS_PATH
from modulekit import define_module


def _required_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value.strip()


def _provides(deps: Mapping[str, Any], caps: Any, emit) -> dict[str, Any]:
    store = caps.json_file
    log = caps.logger

    def list_personas() -> list[dict[str, Any]]:
        return store.all()

    def get(payload: Mapping[str, Any]) -> dict[str, Any] | None:
        return store.find(_required_str(payload, "persona_id"))

    def create(payload: Mapping[str, Any]) -> dict[str, Any]:
        persona = {
            "id": uuid.uuid4().hex,
            "name": _required_str(payload, "name"),
            "system_prompt": str(payload.get("system_prompt") or ""),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        store.save_all([*store.all(), persona])
        log.info("Created persona %s (%s)", persona["id"], persona["name"])
        emit("created", persona)
        return persona

    def delete(payload: Mapping[str, Any]) -> bool:
        persona_id = _required_str(payload, "persona_id")
        personas = store.all()
        remaining = [p for p in personas if p["id"] != persona_id]
        if len(remaining) == len(personas):
            return False
        store.save_all(remaining)
        log.info("Deleted persona %s", persona_id)
        emit("deleted", persona_id)
        return True

    return {"list": list_personas, "get": get, "create": create, "delete": delete}


MODULE = define_module(
    capabilities=["json_file", "logger"],
    emits=["created", "deleted"],
    paths=[PERSONAS_PATH],
    provides=_provides,
)
