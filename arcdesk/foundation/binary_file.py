"""Raw bytes on disk (attachments, images). Missing files read as None."""

from __future__ import annotations

import shutil
from typing import Iterable

from arcdesk.foundation.paths import PathScope


class ScopedBinaryFile:
    def __init__(self, scope: PathScope):
        self._scope = scope

    def write(self, relative_path: str, data: bytes) -> None:
        full = self._scope.resolve(relative_path)
        full.parent.mkdir(parents=True, exist_ok=True)
        full.write_bytes(data)

    def read(self, relative_path: str) -> bytes | None:
        try:
            return self._scope.resolve(relative_path).read_bytes()
        except FileNotFoundError:
            return None

    def delete(self, relative_path: str) -> None:
        self._scope.resolve(relative_path).unlink(missing_ok=True)

    def delete_dir(self, relative_path: str) -> None:
        full = self._scope.resolve(relative_path)
        if full.exists():
            shutil.rmtree(full)

    def rename(self, src_path: str, dst_path: str) -> None:
        src = self._scope.resolve(src_path)
        dst = self._scope.resolve(dst_path)
        dst.parent.mkdir(parents=True, exist_ok=True)
        src.replace(dst)

    def copy_file(self, src_path: str, dst_path: str) -> None:
        src = self._scope.resolve(src_path)
        dst = self._scope.resolve(dst_path)
        if not src.exists():
            return
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)

    def copy_dir(self, src_path: str, dst_path: str) -> None:
        src = self._scope.resolve(src_path)
        dst = self._scope.resolve(dst_path)
        if not src.exists():
            return
        shutil.copytree(src, dst, dirs_exist_ok=True)


def create_binary_file(data_dir: str, allowed_paths: Iterable[str]) -> ScopedBinaryFile:
    return ScopedBinaryFile(PathScope(data_dir, allowed_paths))
