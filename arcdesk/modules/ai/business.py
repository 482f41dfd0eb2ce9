"""
AI business logic.

Pure streaming operations: no module dependencies and no persistence. A stream
runs inside the `stream`/`refine` call and reports progress through events;
`stop` from a listener or another thread ends it at the next chunk.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import closing
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import requests

from arcdesk.foundation.http_client import HttpError
from arcdesk.modules.ai.http import AiHttp

Emit = Callable[[str, Any], None]

MESSAGE_ROLES = ("system", "user", "assistant")

REFINE_META_PROMPT = """You are a system prompt refinement assistant. Your task is to improve the user's draft system prompt.

Improve the prompt by:
1. Clarifying vague instructions
2. Adding structure where helpful
3. Removing redundancy
4. Improving tone and professionalism
5. Maintaining the user's original intent

Respond with ONLY the refined system prompt. No explanations, commentary, or meta-text."""


@dataclass
class Ctx:
    http: AiHttp
    logger: Any
    active: dict[str, threading.Event] = field(default_factory=dict)


def _required_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value.strip()


def _provider(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    provider = payload.get("provider") or {}
    if not isinstance(provider, Mapping):
        raise ValueError("provider must be a mapping")
    return provider


def _run(
    ctx: Ctx,
    emit: Emit,
    *,
    label: str,
    provider: Mapping[str, Any],
    model_id: str,
    messages: list[Mapping[str, Any]],
    forward_reasoning: bool = True,
) -> dict[str, str]:
    stream_id = uuid.uuid4().hex
    cancel = threading.Event()
    ctx.active[stream_id] = cancel
    ctx.logger.info("%s %s started (model=%s)", label, stream_id, model_id)

    try:
        with closing(ctx.http.stream_chat(provider, model_id, messages)) as events:
            for event in events:
                if cancel.is_set():
                    ctx.logger.info("%s %s stopped", label, stream_id)
                    break
                if event["type"] == "complete":
                    reasoning = event["reasoning"] if forward_reasoning else ""
                    emit(
                        "complete",
                        {
                            "stream_id": stream_id,
                            "content": event["content"],
                            "reasoning": reasoning,
                            "usage": event["usage"],
                        },
                    )
                elif event["type"] == "delta" or forward_reasoning:
                    emit(event["type"], {"stream_id": stream_id, "chunk": event["text"]})
    except (HttpError, requests.RequestException, ValueError) as exc:
        ctx.logger.error("%s error: %s", label, exc)
        emit("error", {"stream_id": stream_id, "error": str(exc)})
    finally:
        ctx.active.pop(stream_id, None)

    return {"stream_id": stream_id}


def stream(ctx: Ctx, payload: Mapping[str, Any], emit: Emit) -> dict[str, str]:
    messages = payload.get("messages")
    if not isinstance(messages, list):
        raise ValueError("messages must be a list")
    for idx, message in enumerate(messages):
        if not isinstance(message, Mapping) or message.get("role") not in MESSAGE_ROLES:
            raise ValueError(f"messages[{idx}].role must be one of: {', '.join(MESSAGE_ROLES)}")
    system_prompt = payload.get("system_prompt")
    if system_prompt:
        messages = [{"role": "system", "content": str(system_prompt)}, *messages]

    return _run(
        ctx,
        emit,
        label="Stream",
        provider=_provider(payload),
        model_id=_required_str(payload, "model_id"),
        messages=messages,
    )


def refine(ctx: Ctx, payload: Mapping[str, Any], emit: Emit) -> dict[str, str]:
    """Stream a refined version of a draft system prompt. Nothing is persisted."""

    return _run(
        ctx,
        emit,
        label="Refine stream",
        provider=_provider(payload),
        model_id=_required_str(payload, "model_id"),
        messages=[
            {"role": "system", "content": REFINE_META_PROMPT},
            {"role": "user", "content": _required_str(payload, "prompt")},
        ],
        forward_reasoning=False,
    )


def stop(ctx: Ctx, stream_id: str) -> bool:
    cancel = ctx.active.get(stream_id)
    if cancel is None:
        return False
    cancel.set()
    return True


def fetch_models(ctx: Ctx, payload: Mapping[str, Any]) -> list[dict[str, str]]:
    return ctx.http.list_models(base_url=payload.get("base_url"), api_key=payload.get("api_key"))
