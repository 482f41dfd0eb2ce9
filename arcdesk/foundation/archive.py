"""ZIP extraction for profile packages."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Iterable

from arcdesk.foundation.paths import PathScope


def _open_archive(archive_path: Path) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(archive_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ValueError(f"Failed to open archive: {exc}") from exc


def _validate_entries(archive: zipfile.ZipFile, target_dir: Path) -> None:
    resolved_target = target_dir.resolve()
    for name in archive.namelist():
        full = (resolved_target / name).resolve()
        if full != resolved_target and not full.is_relative_to(resolved_target):
            raise ValueError(f"Archive contains invalid path: {name}")


def extract_archive(archive_path: Path, target_dir: Path) -> None:
    target_dir.mkdir(parents=True, exist_ok=True)
    with _open_archive(archive_path) as archive:
        _validate_entries(archive, target_dir)
        archive.extractall(target_dir)


class ScopedArchive:
    def __init__(self, scope: PathScope):
        self._scope = scope

    def extract_external(self, archive_path: str | os.PathLike[str], target_dir: str) -> None:
        """Extract an archive from outside the data dir (e.g. a user-picked file)."""
        extract_archive(Path(archive_path), self._scope.resolve(target_dir))


def create_archive(data_dir: str, allowed_paths: Iterable[str]) -> ScopedArchive:
    return ScopedArchive(PathScope(data_dir, allowed_paths))
