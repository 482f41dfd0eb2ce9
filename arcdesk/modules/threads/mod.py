"""Threads module: the thread index plus one append-only message log per thread."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.modules.threads import business as biz
from modulekit import define_module


def _provides(deps: Mapping[str, Any], caps: Any, emit) -> dict[str, Any]:
    ctx = biz.Ctx(index=caps.json_file, logs=caps.json_log, personas=deps["personas"])

    def create(payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
        payload = payload or {}
        thread = biz.create_thread(ctx, payload.get("title"), payload.get("persona_id"))
        emit("created", thread)
        return thread

    def rename(payload: Mapping[str, Any]) -> dict[str, Any]:
        title = str(payload.get("title") or "").strip()
        if not title:
            raise ValueError("title must be a non-empty string")
        thread = biz.update_thread(ctx, payload["thread_id"], title=title)
        emit("updated", thread)
        return thread

    def delete(payload: Mapping[str, Any]) -> bool:
        deleted = biz.delete_thread(ctx, payload["thread_id"])
        if deleted:
            emit("deleted", payload["thread_id"])
        return deleted

    def append_message(payload: Mapping[str, Any]) -> dict[str, Any]:
        message = biz.append_message(
            ctx, payload["thread_id"], payload.get("role", "user"), payload.get("content", "")
        )
        emit("updated", biz.require_thread(ctx, payload["thread_id"]))
        return message

    def duplicate(payload: Mapping[str, Any]) -> dict[str, Any]:
        thread = biz.duplicate_thread(ctx, payload["thread_id"])
        emit("created", thread)
        return thread

    def messages(payload: Mapping[str, Any]) -> list[dict[str, Any]]:
        return biz.read_messages(ctx, payload["thread_id"])

    return {
        "list": ctx.index.all,
        "create": create,
        "rename": rename,
        "delete": delete,
        "append_message": append_message,
        "messages": messages,
        "duplicate": duplicate,
    }


MODULE = define_module(
    capabilities=["json_file", "json_log"],
    depends=["personas"],
    emits=["created", "updated", "deleted"],
    paths=["messages/"],
    provides=_provides,
)
