from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from arcdesk.framework.config_namespace import ConfigNamespace

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _expand_path(value: str) -> str:
    return os.path.abspath(os.path.expandvars(os.path.expanduser(value)))


@dataclass(frozen=True)
class BootConfig:
    data_dir: str
    log_level: str = "INFO"
    log_dir: str | None = None
    http_timeout_s: float = 30.0
    http_user_agent: str = "arcdesk"

    @property
    def resolved_log_dir(self) -> str:
        return self.log_dir or os.path.join(self.data_dir, "logs")

    @staticmethod
    def from_dict(cfg: Mapping[str, Any]) -> "BootConfig":
        """
        Parse and validate configuration.

        Raises:
            ValueError: if required keys are missing, invalid or unknown.
            TypeError: if a value has the wrong type.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        root = ConfigNamespace(cfg, path="")

        kernel = root.namespace("kernel", required=True)
        data_dir = str(kernel.get_str("data_dir"))

        logging_ns = root.namespace("logging")
        log_level = logging_ns.get_str("level", default="INFO", choices=LOG_LEVELS)
        log_dir = logging_ns.get_str("log_dir", default=None)

        http = root.namespace("http")
        timeout_s = http.get_float("timeout_s", default=30.0, min_value=0.0, exclusive_min=True)
        user_agent = http.get_str("user_agent", default="arcdesk")

        root.assert_consumed()

        return BootConfig(
            data_dir=_expand_path(data_dir),
            log_level=str(log_level),
            log_dir=_expand_path(log_dir) if log_dir else None,
            http_timeout_s=timeout_s,
            http_user_agent=str(user_agent),
        )
