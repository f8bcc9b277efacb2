import pytest

from tourguide.config.settings import (
    DEFAULT_ELEMENT_TIMEOUT_MS,
    DEFAULT_ORIENTATION_SETTLE_MS,
    DEFAULT_POLL_INTERVAL_MS,
    TourSettings,
    load_settings_from_env,
)


def test_defaults_from_empty_env():
    settings = load_settings_from_env({})
    assert settings.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS == 100
    assert settings.element_timeout_ms == DEFAULT_ELEMENT_TIMEOUT_MS == 10_000
    assert settings.analytics_enabled is True
    assert settings.view_mode == "auto"
    assert settings.rtl is False
    assert settings.page_jump_size == 3
    assert settings.orientation_settle_ms == DEFAULT_ORIENTATION_SETTLE_MS == 300


def test_env_overrides():
    settings = load_settings_from_env(
        {
            "TOURGUIDE_DATA_DIR": "/tmp/tours",
            "TOURGUIDE_ELEMENT_POLL_MS": "250",
            "TOURGUIDE_ELEMENT_TIMEOUT_MS": "0",
            "TOURGUIDE_ANALYTICS_ENABLED": "off",
            "TOURGUIDE_VIEW_MODE": "Drawer",
            "TOURGUIDE_RTL": "1",
            "TOURGUIDE_ORIENTATION_SETTLE_MS": "120",
        }
    )
    assert settings.orientation_settle_ms == 120
    assert settings.data_dir == "/tmp/tours"
    assert settings.poll_interval_ms == 250
    assert settings.element_timeout_ms is None
    assert settings.analytics_enabled is False
    assert settings.view_mode == "drawer"
    assert settings.rtl is True


def test_invalid_env_values_fall_back():
    settings = load_settings_from_env(
        {"TOURGUIDE_ELEMENT_POLL_MS": "fast", "TOURGUIDE_VIEW_MODE": "popup"}
    )
    assert settings.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
    assert settings.view_mode == "auto"


def test_direct_construction_validates():
    with pytest.raises(ValueError):
        TourSettings(poll_interval_ms=0)
    with pytest.raises(ValueError):
        TourSettings(view_mode="popup")
    with pytest.raises(ValueError):
        TourSettings(page_jump_size=0)
    with pytest.raises(ValueError):
        TourSettings(orientation_settle_ms=-1)
