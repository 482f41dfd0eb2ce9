from __future__ import annotations

from functools import lru_cache

from modulekit import SourceEntry, iter_package_sources


@lru_cache(maxsize=1)
def get_module_sources() -> tuple[SourceEntry, ...]:
    # Import side-effect: every `arcdesk.modules.<name>.<item>` is imported here.
    # This function is the single import point for the app kernel and the CLI.
    import arcdesk.modules  # noqa: PLC0415

    return tuple(iter_package_sources(arcdesk.modules))
