"""Startup governance: declared capabilities and adapter sources must match 1:1."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from modulekit.discovery import DiscoveredModule
from modulekit.errors import GovernanceError

ViolationKind = Literal["missing_adapter", "orphan_adapter"]


@dataclass(frozen=True)
class GovernanceViolation:
    module_name: str
    kind: ViolationKind
    capability_name: str

    @property
    def message(self) -> str:
        if self.kind == "missing_adapter":
            return (
                f"[{self.module_name}] Missing adapter: declared '{self.capability_name}' "
                f"but no {self.capability_name} adapter source"
            )
        return (
            f"[{self.module_name}] Orphan adapter: {self.capability_name} adapter source exists "
            f"but '{self.capability_name}' not declared"
        )

    def __str__(self) -> str:
        return self.message


def validate_module(module: DiscoveredModule) -> list[GovernanceViolation]:
    declared = list(module.descriptor.capabilities)
    physical = list(module.adapters.keys())

    violations: list[GovernanceViolation] = []
    for capability in declared:
        if capability not in module.adapters:
            violations.append(GovernanceViolation(module.name, "missing_adapter", capability))
    for capability in physical:
        if capability not in declared:
            violations.append(GovernanceViolation(module.name, "orphan_adapter", capability))
    return violations


def validate_all(modules: Iterable[DiscoveredModule]) -> None:
    violations = [violation for module in modules for violation in validate_module(module)]
    if violations:
        raise GovernanceError(violations)
