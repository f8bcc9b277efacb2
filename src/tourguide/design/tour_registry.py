"""Tour path registry.

Paths are registered once at startup (usually from a module that builds them
with the step enhancers) and looked up by id or by the route/view the user is
on. Registration validates the path: duplicate step ids always raise
``ValueError``; dependency cycles and dangling references raise
``TourConfigurationError`` in strict mode and are only logged otherwise.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from .tour_dependencies import DependencyReport, TourDependencyModel
from .tour_steps import TourPath

__all__ = [
    "register_tour",
    "get_tour",
    "list_tours",
    "tours_for_route",
    "route_matches",
    "unregister_tour",
    "clear_tours",
]

_log = logging.getLogger(__name__)

_registry: Dict[str, TourPath] = {}


def register_tour(path: TourPath, *, strict: bool = True, replace: bool = False) -> DependencyReport:
    """Validate and register ``path``; returns the dependency report."""
    if path.id in _registry and not replace:
        raise ValueError(f"Tour already registered: {path.id}")
    ids = set()
    for step in path.steps:
        if step.id in ids:
            raise ValueError(f"Duplicate step id {step.id} in tour {path.id}")
        ids.add(step.id)
    report = TourDependencyModel.from_path(path).validate()
    if strict:
        report.raise_for_errors()
    else:
        for problem in report.problems():
            _log.warning("Tour '%s': %s", path.id, problem)
    _registry[path.id] = path
    return report


def get_tour(path_id: str) -> TourPath:
    return _registry[path_id]


def list_tours() -> List[TourPath]:
    return list(_registry.values())


def route_matches(pattern: str, route: str) -> bool:
    if pattern == "*" or pattern == route:
        return True
    if "*" not in pattern:
        return False
    regex = "^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$"
    return re.match(regex, route) is not None


def tours_for_route(route: str) -> List[TourPath]:
    """Paths whose ``route`` equals ``route`` or matches it as a ``*`` pattern."""
    return [p for p in _registry.values() if p.route is not None and route_matches(p.route, route)]


def unregister_tour(path_id: str) -> None:
    _registry.pop(path_id, None)


def clear_tours() -> None:
    _registry.clear()
