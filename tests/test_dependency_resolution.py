import pytest

from modulekit import (
    CircularDependencyError,
    DuplicateRegistrationError,
    KernelStateError,
    MissingDependencyError,
    ModuleRegistry,
    define_module,
    dependency_layers,
    find_cycle,
    resolve_dependencies,
)


def _registry(graph: dict[str, list[str]]) -> ModuleRegistry:
    registry = ModuleRegistry()
    for name, depends in graph.items():
        registry.register(name, define_module(provides=lambda deps, caps, emit: {}, depends=depends))
    return registry


def test_resolve_orders_dependencies_before_dependents():
    graph = {
        "threads": ["personas", "settings"],
        "profiles": ["settings"],
        "settings": [],
        "personas": [],
        "ui": ["threads", "profiles"],
    }
    order = resolve_dependencies(_registry(graph))

    assert sorted(order) == sorted(graph)
    for name, depends in graph.items():
        for dep in depends:
            assert order.index(dep) < order.index(name), f"{dep} must precede {name}"


def test_resolve_empty_registry_returns_empty_order():
    assert resolve_dependencies(ModuleRegistry()) == []


def test_resolve_two_node_cycle_reports_cycle():
    registry = _registry({"x": ["y"], "y": ["x"]})

    with pytest.raises(CircularDependencyError, match=r"Circular dependency: ") as excinfo:
        resolve_dependencies(registry)

    cycle = excinfo.value.cycle
    assert cycle[0] == cycle[-1]
    assert sorted(cycle[:-1]) == ["x", "y"]


def test_resolve_self_dependency_is_a_cycle():
    with pytest.raises(CircularDependencyError) as excinfo:
        resolve_dependencies(_registry({"solo": ["solo"]}))
    assert excinfo.value.cycle == ["solo", "solo"]


def test_cycle_behind_acyclic_prefix_is_found():
    registry = _registry({"entry": ["a"], "a": ["b"], "b": ["c"], "c": ["a"]})

    with pytest.raises(CircularDependencyError) as excinfo:
        resolve_dependencies(registry)

    cycle = excinfo.value.cycle
    assert "entry" not in cycle
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"a", "b", "c"}


def test_find_cycle_on_acyclic_graph_is_empty():
    assert find_cycle(_registry({"a": [], "b": ["a"]})) == []


def test_missing_dependency_names_module_and_dependency():
    registry = _registry({"z": ["nonexistent"]})

    with pytest.raises(MissingDependencyError, match=r'Module "z" depends on unknown "nonexistent"') as excinfo:
        resolve_dependencies(registry)

    assert excinfo.value.module == "z"
    assert excinfo.value.missing == "nonexistent"


def test_missing_dependency_checked_before_cycle_detection():
    with pytest.raises(MissingDependencyError):
        resolve_dependencies(_registry({"x": ["y"], "y": ["x", "ghost"]}))


def test_dependency_layers_group_by_depth():
    layers = dependency_layers(_registry({"a": [], "b": ["a"], "c": ["a"], "d": ["b", "c"]}))

    assert layers[0] == ["a"]
    assert sorted(layers[1]) == ["b", "c"]
    assert layers[2] == ["d"]


def test_registry_rejects_duplicate_names():
    registry = _registry({"settings": []})

    with pytest.raises(DuplicateRegistrationError, match=r'Module "settings" already registered'):
        registry.register("settings", define_module(provides=lambda deps, caps, emit: {}))


def test_registry_stamps_name_on_registered_descriptor():
    descriptor = define_module(provides=lambda deps, caps, emit: {})
    named = ModuleRegistry().register("personas", descriptor)

    assert descriptor.name == ""
    assert named.name == "personas"


def test_frozen_registry_rejects_registration():
    registry = ModuleRegistry()
    registry.freeze()

    with pytest.raises(KernelStateError, match=r"registry is frozen"):
        registry.register("late", define_module(provides=lambda deps, caps, emit: {}))


def test_registry_rejects_non_descriptor():
    with pytest.raises(TypeError, match=r"must be a ModuleDescriptor"):
        ModuleRegistry().register("bad", {"factory": None})  # type: ignore[arg-type]


def test_descriptor_validates_declared_names():
    with pytest.raises(TypeError, match=r"not a string"):
        define_module(provides=lambda deps, caps, emit: {}, capabilities="json_file")
    with pytest.raises(TypeError, match=r"ModuleDescriptor.paths must be a sequence of strings"):
        define_module(provides=lambda deps, caps, emit: {}, paths="profiles/")
    with pytest.raises(ValueError, match=r"Duplicate entry in ModuleDescriptor.depends: a"):
        define_module(provides=lambda deps, caps, emit: {}, depends=["a", "a"])
    with pytest.raises(TypeError, match=r"factory must be callable"):
        define_module(provides=None)  # type: ignore[arg-type]


def test_registry_items_yield_named_descriptors_in_registration_order():
    registry = _registry({"threads": ["personas"], "personas": []})

    assert [(name, descriptor.name, descriptor.depends) for name, descriptor in registry.items()] == [
        ("threads", "threads", ("personas",)),
        ("personas", "personas", ()),
    ]
    assert dependency_layers(registry) == [["personas"], ["threads"]]
