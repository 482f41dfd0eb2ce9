from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.foundation.json_file import JsonFile, ScopedJsonFile
from modulekit import define_capability

THREAD_INDEX_PATH = "messages/index.json"


def validate_index(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping) or not isinstance(data.get("threads"), list):
        raise ValueError("thread index must be a mapping with a 'threads' list")
    for idx, thread in enumerate(data["threads"]):
        if not isinstance(thread, Mapping) or not isinstance(thread.get("id"), str):
            raise ValueError(f"threads[{idx}] must be a mapping with a string id")
    return {"threads": [dict(t) for t in data["threads"]]}


class ThreadIndex:
    def __init__(self, document: JsonFile):
        self._document = document

    def all(self) -> list[dict[str, Any]]:
        return self._document.read()["threads"]

    def find(self, thread_id: str) -> dict[str, Any] | None:
        return next((t for t in self.all() if t["id"] == thread_id), None)

    def save_all(self, threads: list[dict[str, Any]]) -> None:
        self._document.write({"threads": threads})


def _adapt(json_file: ScopedJsonFile) -> ThreadIndex:
    return ThreadIndex(json_file.create(THREAD_INDEX_PATH, {"threads": []}, validate_index))


CAPABILITY = define_capability(_adapt)
