from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from arcdesk.foundation.json_log import JsonLog, ScopedJsonLog
from modulekit import define_capability

MESSAGE_ROLES = ("system", "user", "assistant")

_THREAD_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_message(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("message must be a mapping")
    if data.get("role") not in MESSAGE_ROLES:
        raise ValueError(f"message.role must be one of: {', '.join(MESSAGE_ROLES)}")
    if not isinstance(data.get("content"), str):
        raise ValueError("message.content must be a string")
    return dict(data)


class MessageLogs:
    def __init__(self, json_log: ScopedJsonLog):
        self._json_log = json_log

    def for_thread(self, thread_id: str) -> JsonLog:
        if not _THREAD_ID.match(thread_id):
            raise ValueError(f"Invalid thread id: {thread_id!r}")
        return self._json_log.create(f"messages/{thread_id}.jsonl", validate_message)

    def duplicate(self, src_thread_id: str, dst_thread_id: str) -> None:
        self._json_log.copy_file(f"messages/{src_thread_id}.jsonl", f"messages/{dst_thread_id}.jsonl")


CAPABILITY = define_capability(MessageLogs)
