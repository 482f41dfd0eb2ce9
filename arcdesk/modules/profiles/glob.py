from __future__ import annotations

from arcdesk.foundation.file_glob import ScopedGlob
from modulekit import define_capability


class ProfileDirs:
    def __init__(self, glob: ScopedGlob):
        self._glob = glob

    def installed(self) -> list[str]:
        # Hidden directories are in-flight installs.
        return [name for name in self._glob.list_dirs("profiles") if not name.startswith(".")]


CAPABILITY = define_capability(ProfileDirs)
