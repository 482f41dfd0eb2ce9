"""Path scoping shared by every storage capability.

A module only touches the paths it declares. A prefix ending in `/` grants the
directory and everything under it; any other prefix grants exactly one file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable


class PathAccessDenied(PermissionError):
    pass


@dataclass(frozen=True)
class _Rule:
    resolved: Path
    is_dir: bool


class PathScope:
    def __init__(self, data_dir: str | os.PathLike[str], allowed_paths: Iterable[str]):
        self.data_dir = Path(data_dir).expanduser().resolve()
        self.allowed_paths = tuple(allowed_paths)
        self._rules = tuple(
            _Rule(
                resolved=(self.data_dir / p.rstrip("/")).resolve(),
                is_dir=p.endswith("/"),
            )
            for p in self.allowed_paths
        )

    def resolve(self, relative_path: str | os.PathLike[str]) -> Path:
        full = (self.data_dir / relative_path).resolve()
        for rule in self._rules:
            if full == rule.resolved:
                return full
            if rule.is_dir and full.is_relative_to(rule.resolved):
                return full
        raise PathAccessDenied(f"Path access denied: {relative_path}")

    def relative(self, full_path: Path) -> str:
        return full_path.relative_to(self.data_dir).as_posix()
