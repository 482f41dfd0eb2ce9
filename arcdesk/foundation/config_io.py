"""YAML config loading: one explicit file, or the repo config plus a local overlay."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

DEFAULT_ENV_VAR = "ARCDESK_CONFIG"
BASE_CONFIG_NAME = "config.yaml"
LOCAL_OVERLAY_NAME = "config.local.yaml"
REPO_MARKERS = ("pyproject.toml", ".git")


def find_repo_root(start: str | os.PathLike[str] | None = None) -> str:
    origin = Path(start or os.getcwd()).resolve()
    if origin.is_file():
        origin = origin.parent

    for candidate in (origin, *origin.parents):
        if any((candidate / marker).exists() for marker in REPO_MARKERS):
            return str(candidate)
    raise FileNotFoundError(f"Cannot locate repo root above {origin} (looked for {', '.join(REPO_MARKERS)})")


def load_yaml_mapping(path: str | os.PathLike[str]) -> dict[str, Any]:
    text = Path(path).read_text(encoding="utf-8")
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _shape(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "list"
    return type(value).__name__


def deep_merge(base: Any, overlay: Any, *, path: str = "") -> Any:
    """Overlay wins; mappings merge key by key, lists are replaced wholesale.

    An explicit `null` in the overlay clears the base value. Replacing a
    mapping or list with a different shape is a config error.
    """

    if overlay is None or base is None:
        return overlay

    base_shape, overlay_shape = _shape(base), _shape(overlay)
    structured = ("mapping", "list")
    if (base_shape in structured or overlay_shape in structured) and base_shape != overlay_shape:
        raise ValueError(
            f"Invalid config overlay merge at {path or '<root>'}: "
            f"base is {base_shape} but overlay is {overlay_shape}"
        )

    if base_shape == "mapping":
        merged = dict(base)
        for key, value in overlay.items():
            child_path = f"{path}.{key}" if path else str(key)
            merged[key] = deep_merge(base[key], value, path=child_path) if key in base else value
        return merged
    if base_shape == "list":
        return list(overlay)
    return overlay


def _explicit_path(config_path: str | os.PathLike[str] | None, env_var: str | None) -> tuple[str | None, str]:
    if config_path is not None:
        return str(config_path).strip() or None, "explicit"
    if env_var:
        return os.environ.get(env_var, "").strip() or None, "env"
    return None, "env"


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env_var: str | None = DEFAULT_ENV_VAR,
    config_dir: str = "config",
    start_dir: str | os.PathLike[str] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load the YAML configuration, returning (cfg, meta).

    An explicit `config_path` (or the `ARCDESK_CONFIG` env var) loads exactly one
    file. Otherwise `<repo root>/config/config.yaml` is loaded and deep-merged
    with `config.local.yaml` when present.
    """

    explicit, mode = _explicit_path(config_path, env_var)
    if explicit:
        resolved = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit)))
        meta = {"mode": mode, "paths": [resolved], "env_var": env_var, "repo_root": None}
        return load_yaml_mapping(resolved), meta

    repo_root = None if os.path.isabs(config_dir) else find_repo_root(start_dir)
    directory = Path(config_dir) if repo_root is None else Path(repo_root) / config_dir

    base_path = directory / BASE_CONFIG_NAME
    if not base_path.is_file():
        raise FileNotFoundError(f"Missing base config file: {base_path}")

    cfg = load_yaml_mapping(base_path)
    paths = [str(base_path.absolute())]

    overlay_path = directory / LOCAL_OVERLAY_NAME
    if overlay_path.is_file():
        cfg = deep_merge(cfg, load_yaml_mapping(overlay_path))
        paths.append(str(overlay_path.absolute()))

    meta = {
        "mode": "base+local" if len(paths) > 1 else "base",
        "paths": paths,
        "env_var": env_var,
        "repo_root": repo_root,
    }
    return cfg, meta
