import json
import logging

from tourguide.services.key_value_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from tourguide.services.tour_persistence import (
    COMPLETED_TOURS_KEY,
    FEATURE_FLAGS_KEY,
    PROGRESS_KEY,
    TourProgress,
    TourProgressStore,
)


def test_in_memory_store_basics():
    store = InMemoryKeyValueStore({"a": 1})
    store.set("b", 2)
    store.remove("a")
    store.remove("missing")
    assert list(store.keys()) == ["b"]
    assert store.get("a", "dflt") == "dflt"


def test_json_store_round_trip(tmp_path):
    store = JsonFileKeyValueStore(tmp_path)
    store.set(COMPLETED_TOURS_KEY, ["intro"])
    assert json.loads((tmp_path / "tour_state.json").read_text(encoding="utf-8")) == {
        COMPLETED_TOURS_KEY: ["intro"]
    }
    assert not (tmp_path / "tour_state.json.tmp").exists()
    again = JsonFileKeyValueStore(tmp_path)
    assert again.get(COMPLETED_TOURS_KEY) == ["intro"]
    again.remove(COMPLETED_TOURS_KEY)
    store.reload()
    assert store.get(COMPLETED_TOURS_KEY) is None


def test_json_store_corrupt_file_reads_empty(tmp_path, caplog):
    (tmp_path / "tour_state.json").write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        store = JsonFileKeyValueStore(tmp_path)
        assert list(store.keys()) == []
    assert caplog.records
    store.set("x", 1)
    assert JsonFileKeyValueStore(tmp_path).get("x") == 1


def test_json_store_non_object_ignored(tmp_path):
    (tmp_path / "tour_state.json").write_text("[1, 2]", encoding="utf-8")
    assert list(JsonFileKeyValueStore(tmp_path).keys()) == []


def test_mark_completed_is_idempotent():
    progress = TourProgressStore(InMemoryKeyValueStore())
    assert progress.mark_tour_completed("intro") is True
    assert progress.mark_tour_completed("intro") is False
    progress.mark_tour_completed("teams")
    assert progress.completed_tours() == ["intro", "teams"]
    assert progress.is_tour_completed("teams")
    progress.reset_completed_tours()
    assert progress.completed_tours() == []


def test_completed_tours_decodes_json_text():
    store = InMemoryKeyValueStore({COMPLETED_TOURS_KEY: '["intro"]'})
    assert TourProgressStore(store).completed_tours() == ["intro"]


def test_malformed_values_degrade_to_defaults():
    store = InMemoryKeyValueStore(
        {COMPLETED_TOURS_KEY: "{oops", FEATURE_FLAGS_KEY: [1], PROGRESS_KEY: {"step": 2}}
    )
    progress = TourProgressStore(store)
    assert progress.completed_tours() == []
    assert progress.enabled_feature_flags() == {}
    assert progress.load_progress() is None


def test_progress_save_load_clear():
    progress = TourProgressStore(InMemoryKeyValueStore())
    assert progress.load_progress() is None
    progress.save_progress("intro", 2, True)
    assert progress.load_progress() == TourProgress("intro", 2, True)
    assert progress.store.get(PROGRESS_KEY) == {"pathId": "intro", "step": 2, "active": True}
    progress.clear_progress()
    assert progress.load_progress() is None


def test_feature_flags():
    progress = TourProgressStore(InMemoryKeyValueStore())
    assert progress.is_feature_enabled("beta") is False
    progress.set_feature_flag("beta")
    progress.set_feature_flag("legacy", False)
    assert progress.enabled_feature_flags() == {"beta": True, "legacy": False}
    assert progress.is_feature_enabled("beta") is True
