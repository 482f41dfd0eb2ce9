from types import SimpleNamespace

import pytest

from modulekit import (
    AdapterRegistry,
    CapabilityBundle,
    EventBus,
    InjectorConfig,
    MissingCapabilityError,
    UndeclaredCapabilityAccessError,
    UndeclaredEventError,
    UnknownCapabilityError,
    create_module_emitter,
    define_capability,
    define_module,
    instantiate_module,
)


def _noop_emit(event, data=None):
    return None


def _capture_factory(seen: dict):
    def factory(deps, caps, emit):
        seen["deps"] = deps
        seen["caps"] = caps
        seen["emit"] = emit
        return {"ping": lambda: "pong"}

    return factory


def _config(tmp_path, foundation, adapters=None):
    return InjectorConfig(data_dir=str(tmp_path), foundation=foundation, adapters=adapters or AdapterRegistry())


def test_path_scoped_capability_receives_data_dir_and_paths(tmp_path):
    calls = []

    def json_file_factory(data_dir, paths):
        calls.append((data_dir, tuple(paths)))
        return SimpleNamespace(kind="json_file")

    seen: dict = {}
    descriptor = define_module(
        provides=_capture_factory(seen), capabilities=["json_file"], paths=["app/settings.json"]
    ).named("settings")

    instance = instantiate_module(descriptor, _config(tmp_path, {"json_file": json_file_factory}), {}, _noop_emit)

    assert instance.name == "settings"
    assert instance.api["ping"]() == "pong"
    assert calls == [(str(tmp_path), ("app/settings.json",))]
    assert seen["caps"].json_file.kind == "json_file"


def test_shared_capability_is_passed_through_unscoped(tmp_path):
    shared_logger = object()
    seen: dict = {}
    descriptor = define_module(provides=_capture_factory(seen), capabilities=["logger"]).named("m")

    instantiate_module(descriptor, _config(tmp_path, {"logger": shared_logger}), {}, _noop_emit)

    assert seen["caps"]["logger"] is shared_logger


def test_adapter_transforms_raw_capability(tmp_path):
    adapters = AdapterRegistry()
    adapters.register("m", "logger", define_capability(lambda raw: ("adapted", raw)))
    seen: dict = {}
    descriptor = define_module(provides=_capture_factory(seen), capabilities=["logger"]).named("m")

    instantiate_module(descriptor, _config(tmp_path, {"logger": "raw"}, adapters), {}, _noop_emit)

    assert seen["caps"].logger == ("adapted", "raw")


def test_unknown_capability_name_raises(tmp_path):
    descriptor = define_module(provides=_capture_factory({}), capabilities=["teleport"]).named("m")

    with pytest.raises(UnknownCapabilityError, match=r'Unknown capability "teleport" in module "m"'):
        instantiate_module(descriptor, _config(tmp_path, {"teleport": object()}), {}, _noop_emit)


def test_capability_missing_from_foundation_raises(tmp_path):
    descriptor = define_module(provides=_capture_factory({}), capabilities=["http"]).named("m")

    with pytest.raises(MissingCapabilityError, match=r'"http" required by module "m"'):
        instantiate_module(descriptor, _config(tmp_path, {}), {}, _noop_emit)


def test_factory_receives_read_only_dependency_map(tmp_path):
    seen: dict = {}
    descriptor = define_module(provides=_capture_factory(seen), depends=["a"]).named("b")
    a_api = {"get": lambda: 1}

    instantiate_module(descriptor, _config(tmp_path, {}), {"a": a_api}, _noop_emit)

    assert seen["deps"]["a"] is a_api
    with pytest.raises(TypeError):
        seen["deps"]["c"] = {}


def test_bundle_raises_on_undeclared_attribute_and_key():
    bundle = CapabilityBundle("threads", {"json_file": 1})

    assert bundle.json_file == 1
    assert "json_file" in bundle
    assert "http" not in bundle
    assert list(bundle) == ["json_file"]
    with pytest.raises(UndeclaredCapabilityAccessError, match=r'Module "threads" accessed undeclared capability "http"'):
        bundle.http
    with pytest.raises(UndeclaredCapabilityAccessError):
        bundle["http"]
    with pytest.raises(UndeclaredCapabilityAccessError):
        bundle.get("http", None)


def test_bundle_is_read_only():
    bundle = CapabilityBundle("threads", {"json_file": 1})

    with pytest.raises(AttributeError, match=r"read-only"):
        bundle.json_file = 2
    with pytest.raises(TypeError):
        bundle["json_file"] = 2  # type: ignore[index]


def test_bundle_private_names_raise_attribute_error():
    bundle = CapabilityBundle("threads", {})
    assert not hasattr(bundle, "_secret")


def test_emitter_broadcasts_declared_events_on_module_channel():
    bus = EventBus()
    received = []
    bus.subscribe("arc:threads:created", received.append)

    emit = create_module_emitter("threads", ["created", "deleted"], bus)
    emit("created", {"id": "t1"})

    assert received == [{"id": "t1"}]


def test_emitter_rejects_undeclared_event():
    emit = create_module_emitter("threads", ["created", "deleted"], EventBus())

    with pytest.raises(
        UndeclaredEventError,
        match=r'Module "threads" emitted undeclared event "exploded". Declared: \[created, deleted\]',
    ):
        emit("exploded", None)


def test_emitter_with_no_declared_events_rejects_everything():
    emit = create_module_emitter("settings", [], EventBus())

    with pytest.raises(UndeclaredEventError, match=r"Declared: \[\]"):
        emit("updated")
