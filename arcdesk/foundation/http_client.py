"""The shared `http` capability: JSON requests and server-sent-event streams."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

import requests

logger = logging.getLogger(__name__)


class HttpError(RuntimeError):
    def __init__(self, status: int, status_text: str, body: str | None = None):
        super().__init__(f"HTTP {status}: {status_text}")
        self.status = status
        self.status_text = status_text
        self.body = body


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: Mapping[str, str]
    data: Any


def _parse_sse_line(line: str) -> tuple[bool, Any]:
    """Return (done, payload); payload is None for lines that carry no event."""

    trimmed = line.strip()
    if not trimmed or trimmed.startswith(":"):
        return False, None
    if trimmed == "data: [DONE]":
        return True, None
    if not trimmed.startswith("data: "):
        return False, None
    try:
        return False, json.loads(trimmed[len("data: ") :])
    except json.JSONDecodeError:
        logger.debug("Skipping malformed SSE payload: %s", trimmed[:200])
        return False, None


class HttpClient:
    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        user_agent: str = "arcdesk",
        session: requests.Session | None = None,
    ):
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Content-Type": "application/json"})

    def _check(self, response: requests.Response) -> None:
        if not response.ok:
            raise HttpError(response.status_code, response.reason or "", response.text)

    def get_json(self, url: str, headers: Mapping[str, str] | None = None) -> HttpResponse:
        response = self.session.get(url, headers=dict(headers or {}), timeout=self.timeout_s)
        self._check(response)
        return HttpResponse(status=response.status_code, headers=dict(response.headers), data=response.json())

    def stream_lines(
        self, url: str, body: Any, headers: Mapping[str, str] | None = None
    ) -> Iterator[Any]:
        """POST `body` and yield each JSON payload of an SSE response until `[DONE]`."""

        with self.session.post(
            url,
            data=json.dumps(body),
            headers=dict(headers or {}),
            timeout=self.timeout_s,
            stream=True,
        ) as response:
            self._check(response)
            for line in response.iter_lines(decode_unicode=True):
                if line is None:
                    continue
                done, payload = _parse_sse_line(line)
                if done:
                    return
                if payload is not None:
                    yield payload
