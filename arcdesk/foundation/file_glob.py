from __future__ import annotations

from typing import Iterable

from arcdesk.foundation.paths import PathAccessDenied, PathScope


class ScopedGlob:
    def __init__(self, scope: PathScope):
        self._scope = scope

    def matches(self, pattern: str, relative_dir: str = "") -> list[str]:
        """Paths (relative to the data dir) under `relative_dir` matching `pattern`."""

        base = self._scope.resolve(relative_dir) if relative_dir else self._scope.data_dir
        if not base.is_dir():
            return []

        results: list[str] = []
        for candidate in sorted(base.glob(pattern)):
            try:
                self._scope.resolve(self._scope.relative(candidate))
            except (PathAccessDenied, ValueError):
                continue
            results.append(self._scope.relative(candidate))
        return results

    def list_dirs(self, relative_dir: str) -> list[str]:
        base = self._scope.resolve(relative_dir)
        if not base.is_dir():
            return []
        return sorted(entry.name for entry in base.iterdir() if entry.is_dir())


def create_glob(data_dir: str, allowed_paths: Iterable[str]) -> ScopedGlob:
    return ScopedGlob(PathScope(data_dir, allowed_paths))
