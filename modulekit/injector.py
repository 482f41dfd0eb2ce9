"""Module injector.

Resolves each declared capability against the foundation, path-scopes the
storage capabilities, applies the module's adapter and hands the factory a
guarded bundle that fails loudly on undeclared access.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from modulekit.errors import (
    MissingCapabilityError,
    UndeclaredCapabilityAccessError,
    UnknownCapabilityError,
)
from modulekit.module_registry import AdapterRegistry
from modulekit.module_types import Emit, ModuleDescriptor, ModuleInstance

logger = logging.getLogger(__name__)

CAPABILITY_NAMES = frozenset(
    {
        "json_file",
        "json_log",
        "binary_file",
        "archive",
        "glob",
        "logger",
        "http",
    }
)

# Raw form is a factory `(data_dir, paths) -> instance`.
PATH_SCOPED = frozenset({"json_file", "json_log", "binary_file", "archive", "glob"})


@dataclass(frozen=True)
class InjectorConfig:
    data_dir: str
    foundation: Mapping[str, Any]
    adapters: AdapterRegistry


class CapabilityBundle(Mapping[str, Any]):
    """Read-only capability map. Reading a key that was not bundled raises."""

    __slots__ = ("_module", "_caps")

    def __init__(self, module_name: str, caps: Mapping[str, Any]):
        object.__setattr__(self, "_module", module_name)
        object.__setattr__(self, "_caps", dict(caps))

    def __getitem__(self, key: str) -> Any:
        caps = object.__getattribute__(self, "_caps")
        if key not in caps:
            raise UndeclaredCapabilityAccessError(object.__getattribute__(self, "_module"), str(key))
        return caps[key]

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        return self[key]

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("CapabilityBundle is read-only")

    def get(self, key: str, default: Any = None) -> Any:
        return self[key]

    def __contains__(self, key: object) -> bool:
        return key in object.__getattribute__(self, "_caps")

    def __iter__(self) -> Iterator[str]:
        return iter(object.__getattribute__(self, "_caps"))

    def __len__(self) -> int:
        return len(object.__getattribute__(self, "_caps"))

    def __repr__(self) -> str:
        names = ", ".join(object.__getattribute__(self, "_caps"))
        return f"CapabilityBundle({object.__getattribute__(self, '_module')}: {names})"


def resolve_capability(descriptor: ModuleDescriptor, capability: str, config: InjectorConfig) -> Any:
    if capability not in CAPABILITY_NAMES:
        raise UnknownCapabilityError(descriptor.name, capability)
    if capability not in config.foundation:
        raise MissingCapabilityError(descriptor.name, capability)

    provided = config.foundation[capability]
    if capability in PATH_SCOPED:
        return provided(config.data_dir, descriptor.paths)
    return provided


def build_capabilities(descriptor: ModuleDescriptor, config: InjectorConfig) -> CapabilityBundle:
    adapters = config.adapters.for_module(descriptor.name)
    caps: dict[str, Any] = {}
    for capability in descriptor.capabilities:
        raw = resolve_capability(descriptor, capability, config)
        adapter = adapters.get(capability)
        caps[capability] = adapter.apply(raw) if adapter is not None else raw
    return CapabilityBundle(descriptor.name, caps)


def instantiate_module(
    descriptor: ModuleDescriptor,
    config: InjectorConfig,
    deps: Mapping[str, Any],
    emit: Emit,
) -> ModuleInstance:
    """Build the module's capabilities and call its factory.

    The returned `api` may be an awaitable when the factory is async; the boot
    orchestrator decides what to do with it.
    """

    caps = build_capabilities(descriptor, config)
    logger.debug(
        "Instantiating %s (capabilities: %s; depends: %s)",
        descriptor.name,
        ", ".join(descriptor.capabilities) or "<none>",
        ", ".join(descriptor.depends) or "<none>",
    )
    api = descriptor.factory(MappingProxyType(dict(deps)), caps, emit)
    return ModuleInstance(name=descriptor.name, api=api)
