"""Runtime configuration for the tour engine."""

from .settings import TourSettings, load_settings_from_env  # noqa: F401

__all__ = ["TourSettings", "load_settings_from_env"]
