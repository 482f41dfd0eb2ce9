"""Module discovery.

Turns an explicit list of sources into `DiscoveredModule` records. A source is
identified by a `<container>/<item>` key: the container is the module name, the
item `mod` carries the module descriptor and every other item carries the
adapter for the capability it is named after (`json-file` -> `json_file`).

Malformed sources are skipped with a warning; governance, not discovery, is the
fatal gate.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType, ModuleType
from typing import Any

from modulekit.errors import DuplicateAdapterError
from modulekit.module_types import CapabilityAdapter, ModuleDescriptor

logger = logging.getLogger(__name__)

DESCRIPTOR_ITEM = "mod"
IGNORED_ITEMS = frozenset({"business"})

_DELIMITERS = re.compile(r"[-.\s]+")


@dataclass(frozen=True)
class SourceEntry:
    key: str
    payload: Any = None
    origin: str | None = None

    def describe(self) -> str:
        return self.origin or self.key


@dataclass(frozen=True)
class DiscoveredModule:
    name: str
    descriptor: ModuleDescriptor
    adapters: Mapping[str, CapabilityAdapter] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapters", MappingProxyType(dict(self.adapters)))


def to_identifier(item: str) -> str:
    """Convert a delimited source item name into a capability identifier."""

    return _DELIMITERS.sub("_", item.strip()).strip("_")


def is_ignored_item(item: str) -> bool:
    return item in IGNORED_ITEMS or item.startswith("_")


def parse_source_key(key: str) -> tuple[str, str] | None:
    """Split `<container>/<item>` into (module name, item). None when unparseable."""

    if not isinstance(key, str):
        return None
    parts = [part.strip() for part in key.strip().split("/")]
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def discover_modules(sources: Iterable[SourceEntry]) -> list[DiscoveredModule]:
    descriptors: list[tuple[str, ModuleDescriptor]] = []
    adapters: dict[str, dict[str, CapabilityAdapter]] = {}
    adapter_origins: dict[tuple[str, str], str] = {}

    for source in sources:
        parsed = parse_source_key(source.key)
        if parsed is None:
            logger.warning("[discovery] Could not parse module source key: %r", source.key)
            continue
        module_name, item = parsed
        if is_ignored_item(item):
            continue

        if item == DESCRIPTOR_ITEM:
            if source.payload is None:
                logger.warning('[discovery] Module "%s" has no exported descriptor (%s)', module_name, source.describe())
                continue
            if not isinstance(source.payload, ModuleDescriptor):
                logger.warning(
                    '[discovery] Module "%s" exports %s, not a ModuleDescriptor (%s)',
                    module_name,
                    type(source.payload).__name__,
                    source.describe(),
                )
                continue
            descriptors.append((module_name, source.payload))
            continue

        capability = to_identifier(item)
        if not capability.isidentifier():
            logger.warning("[discovery] Could not derive a capability name from %r (%s)", item, source.describe())
            continue
        if source.payload is None:
            logger.warning('[discovery] Adapter "%s" has no exported adapter', source.describe())
            continue
        if not isinstance(source.payload, CapabilityAdapter):
            logger.warning(
                '[discovery] Adapter "%s" exports %s, not a CapabilityAdapter',
                source.describe(),
                type(source.payload).__name__,
            )
            continue

        origin_key = (module_name, capability)
        if origin_key in adapter_origins:
            raise DuplicateAdapterError(
                module_name, capability, (adapter_origins[origin_key], source.describe())
            )
        adapter_origins[origin_key] = source.describe()
        adapters.setdefault(module_name, {})[capability] = source.payload

    described = {name for name, _ in descriptors}
    for module_name in sorted(set(adapters) - described):
        logger.warning(
            '[discovery] Dropping adapters for "%s": no module descriptor source (%s)',
            module_name,
            ", ".join(sorted(adapters[module_name])),
        )

    discovered = [
        DiscoveredModule(name=name, descriptor=descriptor, adapters=adapters.get(name, {}))
        for name, descriptor in descriptors
    ]
    discovered.sort(key=lambda module: module.name)
    return discovered


def iter_package_sources(
    package: ModuleType,
    *,
    module_attr: str = "MODULE",
    adapter_attr: str = "CAPABILITY",
) -> Iterator[SourceEntry]:
    """Yield one source per submodule of each sub-package of `package`.

    `arcdesk.modules.profiles.json_file` becomes the source `profiles/json_file`
    carrying `CAPABILITY` (or None when the symbol is missing).
    """

    package_path = getattr(package, "__path__", None)
    if package_path is None:
        raise TypeError(f"{package.__name__} is not a package")

    for container in sorted(pkgutil.iter_modules(package_path), key=lambda info: info.name):
        if not container.ispkg or container.name.startswith("_"):
            continue
        container_pkg = importlib.import_module(f"{package.__name__}.{container.name}")
        for item in sorted(pkgutil.iter_modules(container_pkg.__path__), key=lambda info: info.name):
            if item.ispkg or is_ignored_item(item.name):
                continue
            qualified = f"{container_pkg.__name__}.{item.name}"
            loaded = importlib.import_module(qualified)
            attr = module_attr if item.name == DESCRIPTOR_ITEM else adapter_attr
            yield SourceEntry(
                key=f"{container.name}/{item.name}",
                payload=getattr(loaded, attr, None),
                origin=qualified,
            )
