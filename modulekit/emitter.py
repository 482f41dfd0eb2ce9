from __future__ import annotations

from typing import Any, Iterable

from modulekit.errors import UndeclaredEventError
from modulekit.module_types import Emit
from modulekit.transport import EventBus, channel


def create_module_emitter(module_name: str, declared_events: Iterable[str], bus: EventBus) -> Emit:
    """Return an `emit(event, data)` that only broadcasts the module's declared events."""

    declared = tuple(declared_events)
    allowed = frozenset(declared)

    def emit(event: str, data: Any = None) -> None:
        if event not in allowed:
            raise UndeclaredEventError(module_name, event, declared)
        bus.broadcast(channel(module_name, event), data)

    return emit
