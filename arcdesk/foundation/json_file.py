"""Atomic JSON document persistence (settings, indexes, caches)."""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable

from arcdesk.foundation.paths import PathScope

Validator = Callable[[Any], Any]


class JsonFile:
    """One JSON document on disk.

    `read()` returns a copy of the default when the file does not exist and
    raises on invalid content; `write()` never leaves a partially written file.
    """

    def __init__(self, path: Path, default: Any, validate: Validator | None = None):
        self.path = path
        self.default = default
        self.validate = validate

    def read(self) -> Any:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return copy.deepcopy(self.default)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {self.path}: {exc}") from exc

        if self.validate is not None:
            return self.validate(data)
        return data

    def write(self, data: Any) -> None:
        if self.validate is not None:
            data = self.validate(data)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def update(self, updater: Callable[[Any], Any]) -> Any:
        updated = updater(self.read())
        self.write(updated)
        return updated


class ScopedJsonFile:
    def __init__(self, scope: PathScope):
        self._scope = scope

    def create(self, relative_path: str, default: Any, validate: Validator | None = None) -> JsonFile:
        return JsonFile(self._scope.resolve(relative_path), default, validate)


def create_json_file(data_dir: str, allowed_paths: Iterable[str]) -> ScopedJsonFile:
    return ScopedJsonFile(PathScope(data_dir, allowed_paths))
