from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from arcdesk.modules.threads.json_file import ThreadIndex
from arcdesk.modules.threads.json_log import MessageLogs


@dataclass
class Ctx:
    index: ThreadIndex
    logs: MessageLogs
    personas: Mapping[str, Callable[..., Any]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def require_thread(ctx: Ctx, thread_id: str) -> dict[str, Any]:
    thread = ctx.index.find(thread_id)
    if thread is None:
        raise ValueError(f"Thread {thread_id} not found")
    return thread


def create_thread(ctx: Ctx, title: str | None, persona_id: str | None) -> dict[str, Any]:
    if persona_id is not None and ctx.personas["get"]({"persona_id": persona_id}) is None:
        raise ValueError(f"Persona {persona_id} not found")

    now = _now()
    thread = {
        "id": uuid.uuid4().hex,
        "title": (title or "").strip() or "New chat",
        "persona_id": persona_id,
        "created_at": now,
        "updated_at": now,
        "message_count": 0,
    }
    ctx.index.save_all([thread, *ctx.index.all()])
    return thread


def update_thread(ctx: Ctx, thread_id: str, **changes: Any) -> dict[str, Any]:
    threads = ctx.index.all()
    for thread in threads:
        if thread["id"] == thread_id:
            thread.update(changes)
            thread["updated_at"] = _now()
            ctx.index.save_all(threads)
            return thread
    raise ValueError(f"Thread {thread_id} not found")


def delete_thread(ctx: Ctx, thread_id: str) -> bool:
    threads = ctx.index.all()
    remaining = [t for t in threads if t["id"] != thread_id]
    if len(remaining) == len(threads):
        return False
    ctx.index.save_all(remaining)
    ctx.logs.for_thread(thread_id).delete()
    return True


def append_message(ctx: Ctx, thread_id: str, role: str, content: str) -> dict[str, Any]:
    thread = require_thread(ctx, thread_id)
    message = {"id": uuid.uuid4().hex, "role": role, "content": content, "created_at": _now()}
    ctx.logs.for_thread(thread_id).append(message)
    update_thread(ctx, thread_id, message_count=int(thread.get("message_count", 0)) + 1)
    return message


def read_messages(ctx: Ctx, thread_id: str) -> list[dict[str, Any]]:
    require_thread(ctx, thread_id)
    return ctx.logs.for_thread(thread_id).read()


def duplicate_thread(ctx: Ctx, thread_id: str) -> dict[str, Any]:
    source = require_thread(ctx, thread_id)
    now = _now()
    copy = {
        **source,
        "id": uuid.uuid4().hex,
        "title": f"{source['title']} (copy)",
        "created_at": now,
        "updated_at": now,
    }
    ctx.logs.duplicate(thread_id, copy["id"])
    ctx.index.save_all([copy, *ctx.index.all()])
    return copy
