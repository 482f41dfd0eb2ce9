"""Profiles JSON adapter: `arc.json` parsing and validation."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from arcdesk.foundation.json_file import ScopedJsonFile
from modulekit import define_capability

ARC_FILE_VERSION = 0
ARC_FILE_NAME = "arc.json"

_OPTIONAL_PROVIDER_STRINGS = ("base_url", "api_key")


def _check_provider(idx: int, raw: Any) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"providers.{idx}: expected object")
    provider_id = raw.get("id")
    if not isinstance(provider_id, str) or not provider_id.strip():
        raise ValueError(f"providers.{idx}.id: expected non-empty string")
    if not isinstance(raw.get("type"), str):
        raise ValueError(f"providers.{idx}.type: expected string")
    for key in _OPTIONAL_PROVIDER_STRINGS:
        if key in raw and not isinstance(raw[key], str):
            raise ValueError(f"providers.{idx}.{key}: expected string")
    return dict(raw)


def check_profile_id(profile_id: Any) -> str:
    """Return `profile_id` when it names a single directory under `profiles/`."""

    if not isinstance(profile_id, str) or not profile_id.strip():
        raise ValueError("profile_id must be a non-empty string")
    if "/" in profile_id or "\\" in profile_id or profile_id.startswith("."):
        raise ValueError(f"Invalid profile id {profile_id!r}")
    return profile_id


def parse_arc_file(data: Any) -> dict[str, Any]:
    """Validate a decoded `arc.json` document. Raises ValueError with a field path."""

    if not isinstance(data, Mapping):
        raise ValueError("arc.json: expected object")

    version = data.get("version")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError("version: expected number")
    if version > ARC_FILE_VERSION:
        raise ValueError(f"Unsupported version {version}. Maximum supported: {ARC_FILE_VERSION}")
    for key in ("id", "name"):
        if not isinstance(data.get(key), str) or not data[key].strip():
            raise ValueError(f"{key}: expected non-empty string")
    try:
        check_profile_id(data["id"])
    except ValueError as exc:
        raise ValueError(f"id: {exc}") from exc

    raw_providers = data.get("providers")
    if not isinstance(raw_providers, list):
        raise ValueError("providers: expected array")
    providers = [_check_provider(idx, raw) for idx, raw in enumerate(raw_providers)]

    seen: set[str] = set()
    for provider in providers:
        if provider["id"] in seen:
            raise ValueError(f"Duplicate provider id: {provider['id']}")
        seen.add(provider["id"])

    return {**dict(data), "providers": providers}


class ArcFiles:
    def __init__(self, json_file: ScopedJsonFile):
        self._json_file = json_file

    def validate(self, content: str) -> tuple[dict[str, Any] | None, str | None]:
        """Return (arc_file, None) when valid, else (None, error message)."""

        try:
            decoded = json.loads(content)
        except json.JSONDecodeError:
            return None, "Invalid JSON format"
        try:
            return parse_arc_file(decoded), None
        except ValueError as exc:
            return None, str(exc)

    def read_installed(self, profile_id: str) -> dict[str, Any] | None:
        profile_id = check_profile_id(profile_id)
        document = self._json_file.create(f"profiles/{profile_id}/{ARC_FILE_NAME}", None)
        data = document.read()
        if data is None:
            return None
        return parse_arc_file(data)


CAPABILITY = define_capability(ArcFiles)
