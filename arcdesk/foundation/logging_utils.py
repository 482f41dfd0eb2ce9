"""Logging helpers: operational log setup and the shared `logger` capability."""

from __future__ import annotations

import logging
import os
from typing import Any

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_operational_logger(
    log_dir: str,
    *,
    level: str = "INFO",
    logger_name: str = "arcdesk",
) -> tuple[logging.Logger, str]:
    """
    Configure the application logger.
    Logs go to both stdout and a UTF-8 file under the provided directory.
    """

    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "arcdesk.log")

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(getattr(logging, level.upper()))
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    # Kernel internals log under `modulekit.*`; route them through the same handlers.
    kernel_logger = logging.getLogger("modulekit")
    kernel_logger.setLevel(logging.DEBUG)
    kernel_logger.handlers.clear()
    kernel_logger.addHandler(file_handler)
    kernel_logger.addHandler(stream_handler)

    logger.info("Operational logging initialized")
    logger.debug("Operational log file: %s", log_file)
    return logger, log_file


class TaggedLogger:
    """The `logger` capability: `[tag] message` lines on a stdlib logger."""

    def __init__(self, logger: logging.Logger, tag: str = "app"):
        self._logger = logger
        self.tag = tag

    def child(self, tag: str) -> "TaggedLogger":
        return TaggedLogger(self._logger, tag)

    def _log(self, level: int, message: str, *args: Any, exc_info: Any = None) -> None:
        self._logger.log(level, f"[{self.tag}] {message}", *args, exc_info=exc_info)

    def debug(self, message: str, *args: Any) -> None:
        self._log(logging.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self._log(logging.INFO, message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self._log(logging.WARNING, message, *args)

    warn = warning

    def error(self, message: str, *args: Any, exc_info: Any = None) -> None:
        self._log(logging.ERROR, message, *args, exc_info=exc_info)
