"""Application wiring for the tour engine."""

from .bootstrap import TourContext, create_tour_context  # noqa: F401

__all__ = ["TourContext", "create_tour_context"]
