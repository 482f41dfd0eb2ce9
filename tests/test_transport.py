import logging

import pytest

from modulekit import ChannelRouter, EventBus, channel, register_module_api


def test_channel_names_follow_arc_prefix():
    assert channel("threads", "list") == "arc:threads:list"


def test_register_module_api_publishes_each_operation():
    router = ChannelRouter()
    published = register_module_api(
        router,
        "personas",
        {"list": lambda: ["p1"], "get": lambda payload: {"id": payload["persona_id"]}},
    )

    assert published == ["arc:personas:list", "arc:personas:get"]
    assert router.channels() == ("arc:personas:get", "arc:personas:list")
    assert router.invoke("arc:personas:list") == ["p1"]
    assert router.invoke("arc:personas:get", {"persona_id": "p2"}) == {"id": "p2"}


def test_register_module_api_rejects_non_mapping_api():
    with pytest.raises(TypeError, match=r'Module "broken" API must be a mapping'):
        register_module_api(ChannelRouter(), "broken", ["list"])


def test_register_module_api_rejects_non_callable_operation():
    with pytest.raises(TypeError, match=r'operation "count" is not callable'):
        register_module_api(ChannelRouter(), "broken", {"count": 3})


def test_router_rejects_duplicate_channel():
    router = ChannelRouter()
    router.handle("arc:a:x", lambda: 1)

    with pytest.raises(ValueError, match=r"Duplicate channel handler: arc:a:x"):
        router.handle("arc:a:x", lambda: 2)


def test_router_unknown_channel_lists_available():
    router = ChannelRouter()
    router.handle("arc:a:x", lambda: 1)

    with pytest.raises(ValueError, match=r"Unknown channel: arc:a:y \(available: arc:a:x\)"):
        router.invoke("arc:a:y")
    assert router.has("arc:a:x")
    assert not router.has("arc:a:y")


def test_event_bus_unsubscribe_stops_delivery():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe("arc:settings:updated", received.append)

    bus.broadcast("arc:settings:updated", 1)
    unsubscribe()
    bus.broadcast("arc:settings:updated", 2)

    assert received == [1]


def test_event_bus_logs_failing_listener_and_keeps_delivering(caplog):
    bus = EventBus()
    received = []

    def boom(_data):
        raise RuntimeError("listener failed")

    bus.subscribe("arc:threads:created", boom)
    bus.subscribe("arc:threads:created", received.append)

    with caplog.at_level(logging.ERROR, logger="modulekit.transport"):
        bus.broadcast("arc:threads:created", "t1")

    assert received == ["t1"]
    assert "Event listener failed on arc:threads:created" in caplog.text
