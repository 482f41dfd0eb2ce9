"""Append-only JSON Lines logs (message streams).

Entries are only ever appended; a crash mid-write can damage the last line
only.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Callable, Iterable

from arcdesk.foundation.paths import PathScope

Validator = Callable[[Any], Any]


class JsonLog:
    def __init__(self, path: Path, validate: Validator | None = None):
        self.path = path
        self.validate = validate

    def append(self, item: Any) -> None:
        if self.validate is not None:
            item = self.validate(item)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(item, ensure_ascii=False)
        with open(self.path, "a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def read(self) -> list[Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                lines = handle.read().split("\n")
        except FileNotFoundError:
            return []

        items: list[Any] = []
        for idx, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                parsed = json.loads(line)
                if self.validate is not None:
                    parsed = self.validate(parsed)
            except (json.JSONDecodeError, ValueError, TypeError) as exc:
                raise ValueError(f"Invalid data at line {idx} in {self.path}: {exc}") from exc
            items.append(parsed)
        return items

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class ScopedJsonLog:
    def __init__(self, scope: PathScope):
        self._scope = scope

    def create(self, relative_path: str, validate: Validator | None = None) -> JsonLog:
        return JsonLog(self._scope.resolve(relative_path), validate)

    def copy_file(self, src_path: str, dst_path: str) -> None:
        src = self._scope.resolve(src_path)
        dst = self._scope.resolve(dst_path)
        if not src.exists():
            return
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)


def create_json_log(data_dir: str, allowed_paths: Iterable[str]) -> ScopedJsonLog:
    return ScopedJsonLog(PathScope(data_dir, allowed_paths))
