"""AI module: model listing and streamed chat completions against a provider."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arcdesk.modules.ai import business as biz
from modulekit import define_module


def _provides(deps: Mapping[str, Any], caps: Any, emit) -> dict[str, Any]:
    ctx = biz.Ctx(http=caps.http, logger=caps.logger)

    return {
        "fetch_models": lambda payload=None: biz.fetch_models(ctx, payload or {}),
        "stream": lambda payload: biz.stream(ctx, payload, emit),
        "refine": lambda payload: biz.refine(ctx, payload, emit),
        "stop": lambda payload: biz.stop(ctx, payload["stream_id"]),
    }


MODULE = define_module(
    capabilities=["http", "logger"],
    emits=["delta", "reasoning", "complete", "error"],
    provides=_provides,
)
