from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from arcdesk.modules.profiles.archive import ProfilePackages
from arcdesk.modules.profiles.binary_file import ProfileFiles
from arcdesk.modules.profiles.glob import ProfileDirs
from arcdesk.modules.profiles.json_file import ARC_FILE_NAME, ArcFiles, check_profile_id


@dataclass
class Ctx:
    arc_files: ArcFiles
    packages: ProfilePackages
    dirs: ProfileDirs
    files: ProfileFiles
    logger: Any
    settings: Mapping[str, Callable[..., Any]]


def _summary(arc_file: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": arc_file["id"],
        "name": arc_file["name"],
        "provider_count": len(arc_file["providers"]),
    }


def install_profile(ctx: Ctx, package_path: str) -> dict[str, Any]:
    temp_dir = f"profiles/.installing-{uuid.uuid4().hex}"
    try:
        ctx.packages.unpack(package_path, temp_dir)

        content = ctx.files.read_text(f"{temp_dir}/{ARC_FILE_NAME}")
        if content is None:
            raise ValueError(f"Invalid archive: missing {ARC_FILE_NAME}")

        arc_file, error = ctx.arc_files.validate(content)
        if arc_file is None:
            raise ValueError(error)

        ctx.files.replace_dir(temp_dir, f"profiles/{arc_file['id']}")
    except Exception:
        ctx.files.remove_dir(temp_dir)
        raise

    if not ctx.settings["get"]().get("active_profile_id"):
        ctx.settings["set_active_profile"]({"profile_id": arc_file["id"]})
        ctx.logger.info("Activated profile %s", arc_file["id"])
    return _summary(arc_file)


def uninstall_profile(ctx: Ctx, profile_id: str) -> None:
    profile_id = check_profile_id(profile_id)
    ctx.files.remove_dir(f"profiles/{profile_id}")
    if ctx.settings["get"]().get("active_profile_id") == profile_id:
        ctx.settings["set_active_profile"]({"profile_id": None})


def list_profiles(ctx: Ctx) -> list[dict[str, Any]]:
    profiles: list[dict[str, Any]] = []
    for entry in ctx.dirs.installed():
        content = ctx.files.read_text(f"profiles/{entry}/{ARC_FILE_NAME}")
        if content is None:
            continue
        arc_file, error = ctx.arc_files.validate(content)
        if arc_file is None:
            ctx.logger.warning("Skipping invalid profile %s: %s", entry, error)
            continue
        profiles.append(_summary(arc_file))
    return profiles
