"""
Profiles module.

Pure repository for installed `.arc` profile packages. Which profile is active
belongs to settings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.modules.profiles import business as biz
from modulekit import define_module


def _provides(deps: Mapping[str, Any], caps: Any, emit) -> dict[str, Any]:
    ctx = biz.Ctx(
        arc_files=caps.json_file,
        packages=caps.archive,
        dirs=caps.glob,
        files=caps.binary_file,
        logger=caps.logger,
        settings=deps["settings"],
    )

    def install(payload: Mapping[str, Any]) -> dict[str, Any]:
        ctx.logger.info("Install request: %s", payload["file_path"])
        result = biz.install_profile(ctx, payload["file_path"])
        emit("installed", result)
        return result

    def uninstall(payload: Mapping[str, Any]) -> None:
        biz.uninstall_profile(ctx, payload["profile_id"])
        emit("uninstalled", payload["profile_id"])

    def read(payload: Mapping[str, Any]) -> dict[str, Any] | None:
        return ctx.arc_files.read_installed(payload["profile_id"])

    return {
        "install": install,
        "uninstall": uninstall,
        "list": lambda: biz.list_profiles(ctx),
        "read": read,
    }


MODULE = define_module(
    capabilities=["json_file", "archive", "glob", "binary_file", "logger"],
    depends=["settings"],
    emits=["installed", "uninstalled"],
    paths=["profiles/"],
    provides=_provides,
)
