"""AI HTTP adapter: OpenAI-compatible chat streaming and model listing.

Turns protocol chunks from the shared `http` capability into domain events
(`delta`, `reasoning`, `complete`) so the business layer never sees SSE.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

from arcdesk.foundation.http_client import HttpClient
from modulekit import define_capability

DEFAULT_BASE_URL = "https://api.openai.com/v1"
REASONING_EFFORT = "high"


def _base_url(value: str | None) -> str:
    return (value or DEFAULT_BASE_URL).rstrip("/")


def _auth_headers(api_key: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"} if api_key else {}


def _count(raw: Any) -> int:
    return raw if isinstance(raw, int) and not isinstance(raw, bool) else 0


def convert_usage(raw: Any) -> dict[str, Any]:
    usage = raw if isinstance(raw, Mapping) else {}
    details = usage.get("completion_tokens_details")
    reasoning_tokens = details.get("reasoning_tokens") if isinstance(details, Mapping) else None

    input_tokens = _count(usage.get("prompt_tokens"))
    output_tokens = _count(usage.get("completion_tokens"))
    return {
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "reasoning_tokens": reasoning_tokens if isinstance(reasoning_tokens, int) else None,
    }


def message_to_api(message: Mapping[str, Any]) -> dict[str, Any]:
    content = message.get("content")
    if isinstance(content, str):
        return {"role": message["role"], "content": content}

    parts: list[dict[str, Any]] = []
    for part in content or ():
        if part.get("type") == "text":
            parts.append({"type": "text", "text": part["text"]})
        else:
            parts.append({"type": "image_url", "image_url": {"url": part["image"]}})
    return {"role": message["role"], "content": parts}


def _first_delta(chunk: Mapping[str, Any]) -> Mapping[str, Any] | None:
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
        return None
    delta = choices[0].get("delta")
    return delta if isinstance(delta, Mapping) else None


class AiHttp:
    def __init__(self, http: HttpClient):
        self._http = http

    def list_models(self, base_url: str | None = None, api_key: str | None = None) -> list[dict[str, str]]:
        response = self._http.get_json(f"{_base_url(base_url)}/models", headers=_auth_headers(api_key))
        data = response.data.get("data") if isinstance(response.data, Mapping) else None
        if not isinstance(data, list):
            raise ValueError("Unexpected models response: missing 'data' array")
        return [
            {"id": item["id"]}
            for item in data
            if isinstance(item, Mapping) and isinstance(item.get("id"), str)
        ]

    def stream_chat(
        self,
        provider: Mapping[str, Any],
        model_id: str,
        messages: list[Mapping[str, Any]],
    ) -> Iterator[dict[str, Any]]:
        body = {
            "model": model_id,
            "messages": [message_to_api(message) for message in messages],
            "stream": True,
            "reasoning_effort": REASONING_EFFORT,
        }
        content = ""
        reasoning = ""
        usage = convert_usage(None)

        chunks = self._http.stream_lines(
            f"{_base_url(provider.get('base_url'))}/chat/completions",
            body,
            headers=_auth_headers(provider.get("api_key")),
        )
        for chunk in chunks:
            if not isinstance(chunk, Mapping):
                continue
            if isinstance(chunk.get("usage"), Mapping):
                usage = convert_usage(chunk["usage"])

            delta = _first_delta(chunk)
            if delta is None:
                continue

            reasoning_text = delta.get("reasoning_content") or delta.get("reasoning")
            if isinstance(reasoning_text, str) and reasoning_text:
                reasoning += reasoning_text
                yield {"type": "reasoning", "text": reasoning_text}

            text = delta.get("content")
            if isinstance(text, str) and text:
                content += text
                yield {"type": "delta", "text": text}

        yield {"type": "complete", "content": content, "reasoning": reasoning, "usage": usage}


CAPABILITY = define_capability(AiHttp)
