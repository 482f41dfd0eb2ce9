from __future__ import annotations

from arcdesk.foundation.binary_file import ScopedBinaryFile
from modulekit import define_capability


class ProfileFiles:
    def __init__(self, binary_file: ScopedBinaryFile):
        self._files = binary_file

    def read_text(self, relative_path: str) -> str | None:
        data = self._files.read(relative_path)
        return data.decode("utf-8") if data is not None else None

    def replace_dir(self, src_dir: str, dst_dir: str) -> None:
        self._files.delete_dir(dst_dir)
        self._files.rename(src_dir, dst_dir)

    def remove_dir(self, relative_path: str) -> None:
        self._files.delete_dir(relative_path)


CAPABILITY = define_capability(ProfileFiles)
