from __future__ import annotations

from arcdesk.foundation.archive import ScopedArchive
from modulekit import define_capability


class ProfilePackages:
    def __init__(self, archive: ScopedArchive):
        self._archive = archive

    def unpack(self, package_path: str, target_dir: str) -> None:
        self._archive.extract_external(package_path, target_dir)


CAPABILITY = define_capability(ProfilePackages)
