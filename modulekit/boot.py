"""Kernel boot.

Sequences discovery -> governance -> registration -> resolution ->
per-module instantiation -> publication. Boot is linear and fails as a whole:
there is no partial resume, a retry means building a fresh `Kernel`.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from modulekit.discovery import DiscoveredModule, SourceEntry, discover_modules
from modulekit.emitter import create_module_emitter
from modulekit.errors import (
    AsyncFactoryError,
    DependencyNotInstantiatedError,
    KernelStateError,
)
from modulekit.governance import validate_all
from modulekit.injector import InjectorConfig, instantiate_module
from modulekit.module_registry import AdapterRegistry, ModuleRegistry, resolve_dependencies
from modulekit.module_types import CapabilityAdapter, ModuleDescriptor
from modulekit.transport import ChannelRouter, EventBus, register_module_api

logger = logging.getLogger(__name__)

KernelState = Literal[
    "created",
    "discovered",
    "validated",
    "registered",
    "resolved",
    "instantiating",
    "booted",
    "failed",
]


@dataclass
class KernelConfig:
    data_dir: str
    foundation: Mapping[str, Any]
    sources: Iterable[SourceEntry] = ()
    router: ChannelRouter = field(default_factory=ChannelRouter)
    bus: EventBus = field(default_factory=EventBus)


def check_sources(sources: Iterable[SourceEntry]) -> tuple[list[DiscoveredModule], ModuleRegistry, list[str]]:
    """Run discovery, governance and resolution without instantiating anything."""

    discovered = discover_modules(sources)
    validate_all(discovered)
    registry = ModuleRegistry()
    for module in discovered:
        registry.register(module.name, module.descriptor)
    registry.freeze()
    return discovered, registry, resolve_dependencies(registry)


class Kernel:
    def __init__(self, config: KernelConfig):
        self.config = config
        self.registry = ModuleRegistry()
        self.adapters = AdapterRegistry()
        self._manual: list[DiscoveredModule] = []
        self._instances: dict[str, Any] = {}
        self._order: tuple[str, ...] = ()
        self._state: KernelState = "created"

    @property
    def state(self) -> KernelState:
        return self._state

    @property
    def order(self) -> tuple[str, ...]:
        return self._order

    def register(
        self,
        name: str,
        descriptor: ModuleDescriptor,
        adapters: Mapping[str, CapabilityAdapter] | None = None,
    ) -> None:
        """Queue a module for boot alongside the discovered ones."""

        if self._state != "created":
            raise KernelStateError(f'Cannot register "{name}" after boot started (state={self._state})')
        self._manual.append(DiscoveredModule(name=name, descriptor=descriptor, adapters=adapters or {}))

    def boot(self) -> None:
        self._begin()
        try:
            order = self._prepare()
            for name in order:
                descriptor, instance = self._instantiate(name)
                if inspect.isawaitable(instance.api):
                    close = getattr(instance.api, "close", None)
                    if callable(close):
                        close()
                    raise AsyncFactoryError(name)
                self._publish(descriptor, instance.api)
            self._finish()
        except BaseException:
            self._state = "failed"
            raise

    async def boot_async(self) -> None:
        """Like `boot`, but awaits async factories before starting their dependents."""

        self._begin()
        try:
            order = self._prepare()
            for name in order:
                descriptor, instance = self._instantiate(name)
                api = instance.api
                if inspect.isawaitable(api):
                    api = await api
                self._publish(descriptor, api)
            self._finish()
        except BaseException:
            self._state = "failed"
            raise

    def get_module(self, name: str) -> Any | None:
        return self._instances.get(name)

    def modules(self) -> tuple[str, ...]:
        return tuple(self._instances.keys())

    def _begin(self) -> None:
        if self._state != "created":
            raise KernelStateError(f"Kernel already booted or failed (state={self._state})")

    def _prepare(self) -> list[str]:
        discovered = [*discover_modules(self.config.sources), *self._manual]
        self._state = "discovered"

        validate_all(discovered)
        self._state = "validated"

        for module in discovered:
            self.registry.register(module.name, module.descriptor)
            for capability, adapter in module.adapters.items():
                self.adapters.register(module.name, capability, adapter)
        self.registry.freeze()
        self._state = "registered"

        order = resolve_dependencies(self.registry)
        self._order = tuple(order)
        self._state = "resolved"
        logger.info("Module boot order: %s", " -> ".join(order) or "<none>")

        self._state = "instantiating"
        return order

    def _instantiate(self, name: str):
        descriptor = self.registry.get(name)
        if descriptor is None:
            raise KernelStateError(f'Resolved module "{name}" is not registered')

        deps: dict[str, Any] = {}
        for dep in descriptor.depends:
            if dep not in self._instances:
                raise DependencyNotInstantiatedError(name, dep)
            deps[dep] = self._instances[dep]

        emit = create_module_emitter(name, descriptor.emits, self.config.bus)
        instance = instantiate_module(
            descriptor,
            InjectorConfig(
                data_dir=self.config.data_dir,
                foundation=self.config.foundation,
                adapters=self.adapters,
            ),
            deps,
            emit,
        )
        return descriptor, instance

    def _publish(self, descriptor: ModuleDescriptor, api: Any) -> None:
        if descriptor.name in self._instances:
            raise KernelStateError(f'Module "{descriptor.name}" instantiated twice')
        channels = register_module_api(self.config.router, descriptor.name, api)
        self._instances[descriptor.name] = api
        logger.debug("Published %s (%d operations)", descriptor.name, len(channels))

    def _finish(self) -> None:
        self._state = "booted"
        logger.info("Kernel booted with %d modules", len(self._instances))
