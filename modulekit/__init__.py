"""Reusable module composition kernel (discovery, governance, resolution, injection).

This package is intentionally independent of `arcdesk.*`. Concrete capabilities,
module business logic and transport wiring live in the consuming application.
"""

from modulekit.boot import Kernel, KernelConfig, check_sources
from modulekit.discovery import DiscoveredModule, SourceEntry, discover_modules, iter_package_sources
from modulekit.emitter import create_module_emitter
from modulekit.errors import (
    AsyncFactoryError,
    CircularDependencyError,
    DependencyNotInstantiatedError,
    DuplicateAdapterError,
    DuplicateRegistrationError,
    GovernanceError,
    KernelError,
    KernelStateError,
    MissingCapabilityError,
    MissingDependencyError,
    UndeclaredCapabilityAccessError,
    UndeclaredEventError,
    UnknownCapabilityError,
)
from modulekit.governance import GovernanceViolation, validate_all, validate_module
from modulekit.injector import (
    CAPABILITY_NAMES,
    PATH_SCOPED,
    CapabilityBundle,
    InjectorConfig,
    instantiate_module,
)
from modulekit.module_registry import (
    AdapterRegistry,
    ModuleRegistry,
    dependency_layers,
    find_cycle,
    resolve_dependencies,
)
from modulekit.module_types import (
    CapabilityAdapter,
    ModuleDescriptor,
    ModuleInstance,
    define_capability,
    define_module,
)
from modulekit.transport import ChannelRouter, EventBus, channel, register_module_api

__all__ = [
    "AdapterRegistry",
    "AsyncFactoryError",
    "CAPABILITY_NAMES",
    "CapabilityAdapter",
    "CapabilityBundle",
    "ChannelRouter",
    "CircularDependencyError",
    "DependencyNotInstantiatedError",
    "DiscoveredModule",
    "DuplicateAdapterError",
    "DuplicateRegistrationError",
    "EventBus",
    "GovernanceError",
    "GovernanceViolation",
    "InjectorConfig",
    "Kernel",
    "KernelConfig",
    "KernelError",
    "KernelStateError",
    "MissingCapabilityError",
    "MissingDependencyError",
    "ModuleDescriptor",
    "ModuleInstance",
    "ModuleRegistry",
    "PATH_SCOPED",
    "SourceEntry",
    "UndeclaredCapabilityAccessError",
    "UndeclaredEventError",
    "UnknownCapabilityError",
    "channel",
    "check_sources",
    "create_module_emitter",
    "define_capability",
    "define_module",
    "dependency_layers",
    "discover_modules",
    "find_cycle",
    "instantiate_module",
    "iter_package_sources",
    "register_module_api",
    "resolve_dependencies",
    "validate_all",
    "validate_module",
]
