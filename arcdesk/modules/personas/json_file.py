from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.foundation.json_file import JsonFile, ScopedJsonFile
from modulekit import define_capability

PERSONAS_PATH = "app/personas.json"

_REQUIRED_FIELDS = ("id", "name", "system_prompt", "created_at")


def validate_personas(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping) or not isinstance(data.get("personas"), list):
        raise ValueError("personas document must be a mapping with a 'personas' list")
    for idx, persona in enumerate(data["personas"]):
        if not isinstance(persona, Mapping):
            raise ValueError(f"personas[{idx}] must be a mapping")
        missing = [key for key in _REQUIRED_FIELDS if not isinstance(persona.get(key), str)]
        if missing:
            raise ValueError(f"personas[{idx}] missing string fields: {', '.join(missing)}")
    return {"personas": [dict(p) for p in data["personas"]]}


class PersonaStore:
    def __init__(self, document: JsonFile):
        self._document = document

    def all(self) -> list[dict[str, Any]]:
        return self._document.read()["personas"]

    def find(self, persona_id: str) -> dict[str, Any] | None:
        for persona in self.all():
            if persona["id"] == persona_id:
                return persona
        return None

    def save_all(self, personas: list[dict[str, Any]]) -> None:
        self._document.write({"personas": personas})


def _adapt(json_file: ScopedJsonFile) -> PersonaStore:
    return PersonaStore(json_file.create(PERSONAS_PATH, {"personas": []}, validate_personas))


CAPABILITY = define_capability(_adapt)
