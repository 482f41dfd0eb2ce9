"""In-process request/response router and event bus.

Channel names are `arc:<module>:<operation>` for requests and
`arc:<module>:<event>` for broadcasts. No validation of payloads happens here;
modules own their input checks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "arc"

Handler = Callable[..., Any]
Listener = Callable[[Any], None]


def channel(domain: str, operation: str) -> str:
    return f"{CHANNEL_PREFIX}:{domain}:{operation}"


class ChannelRouter:
    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def handle(self, name: str, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError(f"Handler for {name} must be callable")
        if name in self._handlers:
            raise ValueError(f"Duplicate channel handler: {name}")
        self._handlers[name] = handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    def channels(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers.keys()))

    def invoke(self, name: str, payload: Any = None) -> Any:
        handler = self._handlers.get(name)
        if handler is None:
            available = ", ".join(self.channels()) or "<none>"
            raise ValueError(f"Unknown channel: {name} (available: {available})")
        if payload is None:
            return handler()
        return handler(payload)


class EventBus:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, name: str, listener: Listener) -> Callable[[], None]:
        listeners = self._listeners.setdefault(name, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def broadcast(self, name: str, data: Any) -> None:
        for listener in list(self._listeners.get(name, ())):
            try:
                listener(data)
            except Exception:
                logger.exception("Event listener failed on %s", name)


def register_module_api(router: ChannelRouter, module_name: str, api: Any) -> list[str]:
    """Publish every operation of `api` on the router. Returns the channel names."""

    if not isinstance(api, Mapping):
        raise TypeError(
            f'Module "{module_name}" API must be a mapping of operation name -> callable '
            f"(type={type(api).__name__})"
        )

    published: list[str] = []
    for operation, handler in api.items():
        if not isinstance(operation, str) or not operation.strip():
            raise TypeError(f'Module "{module_name}" API keys must be non-empty strings')
        if not callable(handler):
            raise TypeError(
                f'Module "{module_name}" operation "{operation}" is not callable '
                f"(type={type(handler).__name__})"
            )
        name = channel(module_name, operation)
        router.handle(name, handler)
        published.append(name)
    return published
