from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Protocol

Emit = Callable[[str, Any], None]


class ModuleFactory(Protocol):
    def __call__(self, deps: Mapping[str, Any], caps: Any, emit: Emit) -> Any:
        ...


def _normalize_names(values: Iterable[str], *, field_name: str) -> tuple[str, ...]:
    if isinstance(values, str):
        raise TypeError(f"ModuleDescriptor.{field_name} must be a sequence of strings, not a string")

    items: list[str] = []
    for idx, raw in enumerate(values):
        if not isinstance(raw, str) or not raw.strip():
            raise TypeError(
                f"ModuleDescriptor.{field_name}[{idx}] must be a non-empty string (got {raw!r})"
            )
        name = raw.strip()
        if name in items:
            raise ValueError(f"Duplicate entry in ModuleDescriptor.{field_name}: {name}")
        items.append(name)
    return tuple(items)


@dataclass(frozen=True)
class ModuleDescriptor:
    """Declarative record for one module.

    `name` stays empty until the module is registered; registration hands back a
    named copy via `named()`.
    """

    factory: ModuleFactory
    capabilities: tuple[str, ...] = ()
    depends: tuple[str, ...] = ()
    emits: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        if not callable(self.factory):
            raise TypeError("ModuleDescriptor.factory must be callable")
        if not isinstance(self.name, str):
            raise TypeError("ModuleDescriptor.name must be a string")
        object.__setattr__(self, "name", self.name.strip())

        object.__setattr__(
            self, "capabilities", _normalize_names(self.capabilities, field_name="capabilities")
        )
        object.__setattr__(self, "depends", _normalize_names(self.depends, field_name="depends"))
        object.__setattr__(self, "emits", _normalize_names(self.emits, field_name="emits"))

        if isinstance(self.paths, str):
            raise TypeError("ModuleDescriptor.paths must be a sequence of strings, not a string")
        paths: list[str] = []
        for idx, raw in enumerate(self.paths):
            if not isinstance(raw, str) or not raw.strip():
                raise TypeError(f"ModuleDescriptor.paths[{idx}] must be a non-empty string")
            paths.append(raw.strip())
        object.__setattr__(self, "paths", tuple(paths))

    def named(self, name: str) -> "ModuleDescriptor":
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Module name must be a non-empty string")
        return replace(self, name=name.strip())


@dataclass(frozen=True)
class CapabilityAdapter:
    """Module-owned transform that narrows a raw capability into a domain API."""

    transform: Callable[[Any], Any]

    def __post_init__(self) -> None:
        if not callable(self.transform):
            raise TypeError("CapabilityAdapter.transform must be callable")

    def apply(self, raw: Any) -> Any:
        return self.transform(raw)


@dataclass(frozen=True)
class ModuleInstance:
    name: str
    api: Any = field(repr=False)


def define_module(
    *,
    provides: ModuleFactory,
    capabilities: Iterable[str] = (),
    depends: Iterable[str] = (),
    emits: Iterable[str] = (),
    paths: Iterable[str] = (),
) -> ModuleDescriptor:
    # Passed through as given; `__post_init__` rejects bare strings before normalising.
    return ModuleDescriptor(
        factory=provides,
        capabilities=capabilities,  # type: ignore[arg-type]
        depends=depends,  # type: ignore[arg-type]
        emits=emits,  # type: ignore[arg-type]
        paths=paths,  # type: ignore[arg-type]
    )


def define_capability(transform: Callable[[Any], Any]) -> CapabilityAdapter:
    """Decorator/helper used by adapter sources.

    Example::

        @define_capability
        def CAPABILITY(json_file):
            store = json_file.create("app/personas.json", {"personas": []})
            return SimpleNamespace(load=store.read, save=store.write)
    """

    return CapabilityAdapter(transform=transform)
