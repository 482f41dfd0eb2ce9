from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping
from types import MappingProxyType

from modulekit.errors import (
    CircularDependencyError,
    DuplicateRegistrationError,
    KernelStateError,
    MissingDependencyError,
)
from modulekit.module_types import CapabilityAdapter, ModuleDescriptor

logger = logging.getLogger(__name__)

_EMPTY_ADAPTERS: Mapping[str, CapabilityAdapter] = MappingProxyType({})


class ModuleRegistry:
    """Append-only name -> descriptor table. Frozen once boot starts resolving."""

    def __init__(self) -> None:
        self._modules: dict[str, ModuleDescriptor] = {}
        self._frozen = False

    def register(self, name: str, descriptor: ModuleDescriptor) -> ModuleDescriptor:
        if self._frozen:
            raise KernelStateError(f'Cannot register module "{name}": registry is frozen')
        if not isinstance(descriptor, ModuleDescriptor):
            raise TypeError(
                f'Module "{name}" must be a ModuleDescriptor (type={type(descriptor).__name__})'
            )
        named = descriptor.named(name)
        if named.name in self._modules:
            raise DuplicateRegistrationError(named.name)
        self._modules[named.name] = named
        return named

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ModuleDescriptor | None:
        return self._modules.get(name)

    def names(self) -> list[str]:
        return list(self._modules.keys())

    def items(self) -> list[tuple[str, ModuleDescriptor]]:
        return list(self._modules.items())

    def has(self, name: str) -> bool:
        return name in self._modules

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)


class AdapterRegistry:
    """moduleName -> (capabilityName -> CapabilityAdapter)."""

    def __init__(self) -> None:
        self._by_module: dict[str, dict[str, CapabilityAdapter]] = {}

    def register(self, module_name: str, capability_name: str, adapter: CapabilityAdapter) -> None:
        if not isinstance(adapter, CapabilityAdapter):
            raise TypeError(
                f'Adapter for "{module_name}.{capability_name}" must be a CapabilityAdapter '
                f"(type={type(adapter).__name__})"
            )
        self._by_module.setdefault(module_name, {})[capability_name] = adapter

    def for_module(self, module_name: str) -> Mapping[str, CapabilityAdapter]:
        adapters = self._by_module.get(module_name)
        if adapters is None:
            return _EMPTY_ADAPTERS
        return MappingProxyType(adapters)


def _check_dependencies_exist(registry: ModuleRegistry) -> None:
    for name, descriptor in registry.items():
        for dep in descriptor.depends:
            if not registry.has(dep):
                raise MissingDependencyError(name, dep)


def resolve_dependencies(registry: ModuleRegistry) -> list[str]:
    """Return an instantiation order in which every dependency precedes its dependents.

    Kahn's algorithm. Ties between simultaneously-ready modules are broken by
    registration order, which callers must not rely on.

    Raises:
        MissingDependencyError: a `depends` entry names an unregistered module.
        CircularDependencyError: the dependency graph has a cycle.
    """

    names = registry.names()
    _check_dependencies_exist(registry)

    in_degree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {name: [] for name in names}
    for name, descriptor in registry.items():
        in_degree[name] = len(descriptor.depends)
        for dep in descriptor.depends:
            dependents[dep].append(name)

    queue = deque(name for name in names if in_degree[name] == 0)
    ordered: list[str] = []

    while queue:
        current = queue.popleft()
        ordered.append(current)
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(names):
        raise CircularDependencyError(find_cycle(registry))

    logger.debug("Resolved module order: %s", ", ".join(ordered) or "<none>")
    return ordered


def find_cycle(registry: ModuleRegistry) -> list[str]:
    """Recover one concrete cycle, e.g. ["x", "y", "x"]. Empty when the graph is acyclic."""

    visiting: set[str] = set()
    visited: set[str] = set()
    path: list[str] = []

    def dfs(name: str) -> list[str] | None:
        if name in visited:
            return None
        if name in visiting:
            start = path.index(name)
            return [*path[start:], name]

        visiting.add(name)
        path.append(name)

        descriptor = registry.get(name)
        if descriptor is not None:
            for dep in descriptor.depends:
                cycle = dfs(dep)
                if cycle:
                    return cycle

        path.pop()
        visiting.discard(name)
        visited.add(name)
        return None

    for name in registry.names():
        cycle = dfs(name)
        if cycle:
            return cycle
    return []


def dependency_layers(registry: ModuleRegistry) -> list[list[str]]:
    """Group modules into layers; every module's dependencies sit in earlier layers."""

    order = resolve_dependencies(registry)
    depends = {name: descriptor.depends for name, descriptor in registry.items()}
    depth: dict[str, int] = {}
    for name in order:
        depth[name] = 1 + max((depth[dep] for dep in depends[name]), default=-1)

    layers: list[list[str]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
    for name in order:
        layers[depth[name]].append(name)
    return layers
