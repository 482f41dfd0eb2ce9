"""Error types raised by the composition engine.

Every condition here is a static configuration defect: none of them is retried.
Configuration defects also subclass `ValueError`; access violations subclass
`LookupError`.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class KernelError(Exception):
    """Base class for every error raised by `modulekit`."""


class DuplicateRegistrationError(KernelError, ValueError):
    def __init__(self, name: str):
        super().__init__(f'Module "{name}" already registered')
        self.name = name


class DuplicateAdapterError(KernelError, ValueError):
    def __init__(self, module: str, capability: str, origins: Sequence[str] = ()):
        detail = f" (sources: {', '.join(origins)})" if origins else ""
        super().__init__(
            f'Module "{module}" has more than one adapter for capability "{capability}"{detail}'
        )
        self.module = module
        self.capability = capability


class GovernanceError(KernelError, ValueError):
    def __init__(self, violations: Iterable[object]):
        self.violations = list(violations)
        lines = "\n".join(f"  - {getattr(v, 'message', v)}" for v in self.violations)
        super().__init__(f"Governance violations:\n{lines}")


class MissingDependencyError(KernelError, ValueError):
    def __init__(self, module: str, missing: str):
        super().__init__(f'Module "{module}" depends on unknown "{missing}"')
        self.module = module
        self.missing = missing


class CircularDependencyError(KernelError, ValueError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__(f"Circular dependency: {' -> '.join(self.cycle)}")


class UnknownCapabilityError(KernelError, ValueError):
    def __init__(self, module: str, capability: str):
        super().__init__(f'Unknown capability "{capability}" in module "{module}"')
        self.module = module
        self.capability = capability


class MissingCapabilityError(KernelError, ValueError):
    def __init__(self, module: str, capability: str):
        super().__init__(
            f'Capability "{capability}" required by module "{module}" is not provided by the foundation'
        )
        self.module = module
        self.capability = capability


class DependencyNotInstantiatedError(KernelError, RuntimeError):
    def __init__(self, module: str, dependency: str):
        super().__init__(f'Dependency "{dependency}" not instantiated for module "{module}"')
        self.module = module
        self.dependency = dependency


class AsyncFactoryError(KernelError, RuntimeError):
    def __init__(self, module: str):
        super().__init__(
            f'Module "{module}" factory returned an awaitable; use Kernel.boot_async()'
        )
        self.module = module


class KernelStateError(KernelError, RuntimeError):
    pass


class UndeclaredCapabilityAccessError(KernelError, LookupError):
    def __init__(self, module: str, capability: str):
        super().__init__(f'Module "{module}" accessed undeclared capability "{capability}"')
        self.module = module
        self.capability = capability


class UndeclaredEventError(KernelError, LookupError):
    def __init__(self, module: str, event: str, declared: Sequence[str]):
        super().__init__(
            f'Module "{module}" emitted undeclared event "{event}". '
            f"Declared: [{', '.join(declared)}]"
        )
        self.module = module
        self.event = event
        self.declared = tuple(declared)
