from tourguide.app.bootstrap import create_tour_context
from tourguide.services.event_bus import EventBus, TourEvent
from tourguide.services.key_value_store import InMemoryKeyValueStore


def test_event_bus_service_registration():
    ctx = create_tour_context(store=InMemoryKeyValueStore())
    bus = ctx.services.get("event_bus")
    assert isinstance(bus, EventBus)


def test_subscribe_publish_basic():
    bus = EventBus()
    received = []

    def handler(evt):
        received.append((evt.name, evt.payload))

    bus.subscribe(TourEvent.TOUR_STARTED, handler)
    bus.publish(TourEvent.TOUR_STARTED, {"path": "intro"})
    assert received == [(TourEvent.TOUR_STARTED.value, {"path": "intro"})]


def test_enum_and_string_names_are_interchangeable():
    bus = EventBus()
    received = []
    bus.subscribe("tour:next", lambda evt: received.append(evt.name))
    bus.publish(TourEvent.NEXT)
    assert received == ["tour:next"]
    assert bus.subscriber_count(TourEvent.NEXT) == 1


def test_once_subscription():
    bus = EventBus()
    count = 0

    def incr(_):
        nonlocal count
        count += 1

    bus.subscribe(TourEvent.TOUR_COMPLETED, incr, once=True)
    bus.publish(TourEvent.TOUR_COMPLETED)
    bus.publish(TourEvent.TOUR_COMPLETED)
    assert count == 1  # second publish ignored


def test_error_isolation():
    bus = EventBus()
    order = []

    def bad(_):
        order.append("bad")
        raise RuntimeError("boom")

    def good(_):
        order.append("good")

    bus.subscribe("custom", bad)
    bus.subscribe("custom", good)
    bus.publish("custom", 123)
    # Both handlers executed despite error
    assert order == ["bad", "good"]
    assert len(bus.errors) == 1


def test_unsubscribe_during_dispatch():
    bus = EventBus()
    calls = []
    sub = None

    def first(_):
        calls.append("first")
        bus.unsubscribe(sub)

    def second(_):
        calls.append("second")

    bus.subscribe("x", first)
    sub = bus.subscribe("x", second)
    bus.publish("x")
    bus.publish("x")
    assert calls == ["first", "first"]


def test_tracing_ring_buffer():
    bus = EventBus()
    bus.enable_tracing(True, capacity=2)
    bus.publish("a", "x" * 100)
    bus.publish("b")
    bus.publish("c", {"k": 1})
    entries = bus.recent_trace_entries()
    assert [e.name for e in entries] == ["b", "c"]
    assert entries[0].summary == "-"
