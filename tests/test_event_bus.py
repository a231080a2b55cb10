from adkflow import event_bus
from adkflow.event_bus import EventBus, EventType


def test_publish_reaches_subscriber():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TOOL_CALLED, lambda et, data: received.append((et, data)))
    bus.publish(EventType.TOOL_CALLED, {"tool": "python_executor"})
    assert received == [(EventType.TOOL_CALLED, {"tool": "python_executor"})]


def test_other_event_types_are_not_delivered():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TOOL_ERROR, lambda et, data: received.append(data))
    bus.publish(EventType.TOOL_CALLED, {"tool": "x"})
    assert received == []


def test_string_and_enum_keys_are_interchangeable():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TOOL_RESULT_RECEIVED, lambda et, data: received.append(data["n"]))
    bus.publish("tool_result_received", {"n": 1})
    assert received == [1]


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe(EventType.TOOL_CALLED, lambda et, d: order.append("first"))
    bus.subscribe(EventType.TOOL_CALLED, lambda et, d: order.append("second"))
    bus.publish(EventType.TOOL_CALLED, {})
    assert order == ["first", "second"]


def test_unsubscribe_removes_handler():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TOOL_CALLED, (handler := lambda et, data: received.append(data)))
    bus.subscribe(EventType.TOOL_CALLED, lambda et, data: received.append("other"))
    bus.unsubscribe(EventType.TOOL_CALLED, handler)
    bus.publish(EventType.TOOL_CALLED, {"a": 1})
    assert received == ["other"]


def test_unsubscribe_unknown_type_leaves_others_intact():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.TOOL_CALLED, (handler := lambda et, data: received.append(data)))
    bus.unsubscribe(EventType.TOOL_ERROR, handler)
    bus.publish(EventType.TOOL_CALLED, {"k": "v"})
    assert received == [{"k": "v"}]


def test_module_level_bus():
    received = []
    event_bus.subscribe(
        EventType.TOOL_ERROR, (handler := lambda et, data: received.append(data["tool"]))
    )
    try:
        event_bus.publish(EventType.TOOL_ERROR, {"tool": "javascript_executor"})
    finally:
        event_bus.unsubscribe(EventType.TOOL_ERROR, handler)
    event_bus.publish(EventType.TOOL_ERROR, {"tool": "ignored"})
    assert received == ["javascript_executor"]