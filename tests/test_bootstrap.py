from tourguide.app.bootstrap import create_tour_context
from tourguide.design.tour_registry import get_tour
from tourguide.design.tour_steps import create_step, create_tour_path
from tourguide.services.event_bus import TourEvent
from tourguide.services.key_value_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from tourguide.services.service_locator import (
    EVENT_BUS,
    KEY_VALUE_STORE,
    TOUR_ANALYTICS,
    TOUR_CONTROLLER,
    TOUR_SETTINGS,
)
from tourguide.services.tour_controller import TourController


def _path():
    return create_tour_path(
        "intro",
        "Intro",
        [create_step("a", "a_el", "A", "a"), create_step("b", "b_el", "B", "b")],
    )


def test_create_tour_context_registers_services():
    store = InMemoryKeyValueStore()
    ctx = create_tour_context(store=store, paths=[_path()], user_id="u1")
    assert ctx.services.get(KEY_VALUE_STORE) is store
    assert ctx.services.get(EVENT_BUS) is ctx.event_bus
    assert ctx.services.get(TOUR_CONTROLLER) is ctx.controller
    assert isinstance(ctx.controller, TourController)
    assert ctx.services.get(TOUR_ANALYTICS) is ctx.analytics
    assert ctx.services.get(TOUR_SETTINGS) is ctx.settings
    assert ctx.services.origin(EVENT_BUS) == "bootstrap"
    assert get_tour("intro").name == "Intro"
    assert ctx.metadata["paths"] == ["intro"]


def test_controller_bound_to_bus():
    ctx = create_tour_context(store=InMemoryKeyValueStore(), paths=[_path()])
    ctx.controller.start_tour("intro")
    ctx.event_bus.publish(TourEvent.NEXT)
    assert ctx.controller.current_step == 1


def test_default_store_is_json_file(tmp_path):
    ctx = create_tour_context(data_dir=str(tmp_path), paths=[_path()])
    assert isinstance(ctx.store, JsonFileKeyValueStore)
    ctx.controller.start_tour("intro")
    ctx.controller.finish_tour()
    assert JsonFileKeyValueStore(tmp_path).get("completedTours") == ["intro"]


def test_repeated_bootstrap_gets_fresh_bus():
    c1 = create_tour_context(store=InMemoryKeyValueStore(), paths=[_path()])
    c2 = create_tour_context(store=InMemoryKeyValueStore(), paths=[_path()])
    assert c1.event_bus is not c2.event_bus
    assert c2.services.get(EVENT_BUS) is c2.event_bus
