"""App wiring: foundation capabilities plus the discovered `arcdesk.modules`."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from arcdesk.foundation.archive import create_archive
from arcdesk.foundation.binary_file import create_binary_file
from arcdesk.foundation.file_glob import create_glob
from arcdesk.foundation.http_client import HttpClient
from arcdesk.foundation.json_file import create_json_file
from arcdesk.foundation.json_log import create_json_log
from arcdesk.foundation.logging_utils import TaggedLogger
from arcdesk.framework.config import BootConfig
from arcdesk.modules.registry import get_module_sources
from modulekit import ChannelRouter, EventBus, Kernel, KernelConfig, SourceEntry


def build_foundation(boot_config: BootConfig, logger: logging.Logger | None = None) -> dict[str, Any]:
    """Map every capability name to its factory (path-scoped) or shared instance."""

    return {
        "json_file": create_json_file,
        "json_log": create_json_log,
        "binary_file": create_binary_file,
        "archive": create_archive,
        "glob": create_glob,
        "logger": TaggedLogger(logger or logging.getLogger("arcdesk")),
        "http": HttpClient(
            timeout_s=boot_config.http_timeout_s,
            user_agent=boot_config.http_user_agent,
        ),
    }


def create_app_kernel(
    boot_config: BootConfig,
    *,
    logger: logging.Logger | None = None,
    sources: Iterable[SourceEntry] | None = None,
    foundation: Mapping[str, Any] | None = None,
    router: ChannelRouter | None = None,
    bus: EventBus | None = None,
) -> Kernel:
    return Kernel(
        KernelConfig(
            data_dir=boot_config.data_dir,
            foundation=foundation if foundation is not None else build_foundation(boot_config, logger),
            sources=tuple(sources) if sources is not None else get_module_sources(),
            router=router or ChannelRouter(),
            bus=bus or EventBus(),
        )
    )
