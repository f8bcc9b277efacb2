"""Reusable step groups.

A group is a named run of steps (e.g. "navigation basics") that several tour
paths share. Groups are kept in a module-level registry like tour paths and
spliced into a path with ``compose_step_groups``:

    create_step_group("basics", "Basics", [welcome, sidebar], tags=("intro",))
    path = create_tour_path("home", "Home", compose_step_groups(["basics", "reports"]))

Re-registering an id replaces the group and logs a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .tour_steps import TourStep

__all__ = [
    "EXPERIENCE_LEVELS",
    "StepGroup",
    "create_step_group",
    "get_step_group",
    "list_step_groups",
    "filter_step_groups",
    "compose_step_groups",
    "clear_step_groups",
]

_log = logging.getLogger(__name__)

EXPERIENCE_LEVELS: Tuple[str, ...] = ("beginner", "intermediate", "advanced")


@dataclass(frozen=True)
class StepGroup:
    id: str
    name: str
    steps: Tuple[TourStep, ...]
    description: str = ""
    tags: Tuple[str, ...] = ()
    experience_level: Optional[str] = None
    feature_area: Optional[str] = None
    priority: int = 0

    def __post_init__(self) -> None:
        if self.experience_level is not None and self.experience_level not in EXPERIENCE_LEVELS:
            raise ValueError(f"Unknown experience level: {self.experience_level!r}")


_groups: Dict[str, StepGroup] = {}


def create_step_group(
    id: str,
    name: str,
    steps: Sequence[TourStep],
    description: str = "",
    *,
    tags: Iterable[str] = (),
    experience_level: Optional[str] = None,
    feature_area: Optional[str] = None,
    priority: int = 0,
) -> StepGroup:
    if id in _groups:
        _log.warning("Step group '%s' already exists; replacing it", id)
    group = StepGroup(
        id=id,
        name=name,
        steps=tuple(steps),
        description=description,
        tags=tuple(tags),
        experience_level=experience_level,
        feature_area=feature_area,
        priority=priority,
    )
    _groups[id] = group
    return group


def get_step_group(group_id: str) -> Optional[StepGroup]:
    return _groups.get(group_id)


def list_step_groups() -> List[StepGroup]:
    return list(_groups.values())


def filter_step_groups(
    *,
    tags: Iterable[str] = (),
    experience_level: Optional[str] = None,
    feature_area: Optional[str] = None,
) -> List[StepGroup]:
    """Groups sharing any of ``tags`` and matching the given level and area."""
    wanted = set(tags)
    out = []
    for group in _groups.values():
        if wanted and not wanted.intersection(group.tags):
            continue
        if experience_level is not None and group.experience_level != experience_level:
            continue
        if feature_area is not None and group.feature_area != feature_area:
            continue
        out.append(group)
    return out


def compose_step_groups(
    group_ids: Sequence[str],
    *,
    filter_steps: Optional[Callable[[TourStep], bool]] = None,
    transform_step: Optional[Callable[[TourStep], TourStep]] = None,
    sort_by_priority: bool = False,
) -> List[TourStep]:
    """Concatenate the steps of ``group_ids`` in order; unknown ids are skipped."""
    steps: List[TourStep] = []
    for group_id in group_ids:
        group = _groups.get(group_id)
        if group is None:
            _log.warning("Unknown step group '%s'", group_id)
            continue
        steps.extend(group.steps)
    if filter_steps is not None:
        steps = [s for s in steps if filter_steps(s)]
    if sort_by_priority:
        # Stable: equal priorities keep group order.
        steps.sort(key=lambda s: -s.priority)
    if transform_step is not None:
        steps = [transform_step(s) for s in steps]
    return steps


def clear_step_groups() -> None:
    _groups.clear()
