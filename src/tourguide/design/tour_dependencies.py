"""Step dependency graph for a single tour path.

The graph is derived from the ``dependencies`` declared on each step and
inverted once into a dependents map, so both directions are O(1) lookups.

Access rules
------------
 - No declared dependencies: always accessible.
 - A dependency's ``condition`` decides whether it applies at all; a false
   (or raising) condition drops it from the check.
 - ``hard`` dependency: the prerequisite id must be in the completed set. A
   prerequisite id that does not exist in the path can never be completed, so
   the step is permanently inaccessible (reported as a dangling dependency).
 - ``soft`` dependency: recommended order only, never blocks access.

Cycles make every step on them unreachable; ``validate_dependencies`` reports
them and ``validate`` folds them into a ``DependencyReport`` together with
dangling dependency ids and dangling branch targets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from tourguide.services.error_handling import TourConfigurationError, guarded_call

from .tour_steps import Condition, Dependency, TourPath, TourStep

__all__ = [
    "DependencyNode",
    "CycleReport",
    "DependencyReport",
    "TourDependencyModel",
]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyNode:
    step_id: str
    dependencies: Tuple[str, ...]
    dependents: Tuple[str, ...]


@dataclass(frozen=True)
class CycleReport:
    """Cycles found in the dependency graph.

    Each cycle lists the step ids in dependency order with the first id
    repeated at the end, e.g. ``("a", "b", "a")``.
    """

    cycles: Tuple[Tuple[str, ...], ...] = ()

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    def steps_in_cycles(self) -> Set[str]:
        out: Set[str] = set()
        for cycle in self.cycles:
            out.update(cycle)
        return out


@dataclass(frozen=True)
class DependencyReport:
    path_id: str
    cycles: CycleReport = field(default_factory=CycleReport)
    dangling_dependencies: Tuple[Tuple[str, str], ...] = ()
    dangling_branch_targets: Tuple[Tuple[str, str], ...] = ()

    @property
    def ok(self) -> bool:
        return not (
            self.cycles.has_cycles or self.dangling_dependencies or self.dangling_branch_targets
        )

    def problems(self) -> List[str]:
        out = [f"cyclic dependency {' -> '.join(c)}" for c in self.cycles.cycles]
        out += [
            f"step '{step}' depends on unknown step '{missing}'"
            for step, missing in self.dangling_dependencies
        ]
        out += [
            f"step '{step}' branches to unknown step '{missing}'"
            for step, missing in self.dangling_branch_targets
        ]
        return out

    def raise_for_errors(self) -> None:
        if not self.ok:
            raise TourConfigurationError(self.path_id, self.problems())


def _canonical(cycle: Sequence[str]) -> Tuple[str, ...]:
    # Rotate so the smallest id leads; makes a->b->a and b->a->b the same cycle.
    body = list(cycle[:-1])
    pivot = body.index(min(body))
    rotated = body[pivot:] + body[:pivot]
    return tuple(rotated + [rotated[0]])


class TourDependencyModel:
    """Dependency graph plus access queries for one path."""

    def __init__(self, step_ids: Iterable[str] = (), *, path_id: str = "") -> None:
        self.path_id = path_id
        self._known: List[str] = list(step_ids)
        self._deps: Dict[str, Dict[str, Dependency]] = {}
        self._dependents: Dict[str, List[str]] = {}
        self._branch_targets: List[Tuple[str, str]] = []

    @classmethod
    def from_path(cls, path: TourPath) -> "TourDependencyModel":
        model = cls(path.step_ids(), path_id=path.id)
        for step in path.steps:
            for dep in step.dependencies:
                model.add_dependency(step.id, dep.step_id, dep.kind, dep.condition)
            for branch in step.branches:
                model._branch_targets.append((step.id, branch.target_step_id))
        for step_id, missing in model.dangling_dependencies():
            _log.warning(
                "Tour '%s': step '%s' depends on unknown step '%s'", path.id, step_id, missing
            )
        return model

    # Construction -----------------------------------------------------------
    def add_dependency(
        self,
        source_step_id: str,
        target_step_id: str,
        kind: str = "hard",
        condition: Optional[Condition] = None,
    ) -> None:
        """Declare that ``source_step_id`` depends on ``target_step_id``."""
        dep = Dependency(step_id=target_step_id, kind=kind, condition=condition)
        self._deps.setdefault(source_step_id, {})[target_step_id] = dep
        dependents = self._dependents.setdefault(target_step_id, [])
        if source_step_id not in dependents:
            dependents.append(source_step_id)

    # Lookups ----------------------------------------------------------------
    def get_dependencies(self, step_id: str) -> List[str]:
        return list(self._deps.get(step_id, {}).keys())

    def get_dependent_steps(self, step_id: str) -> List[str]:
        return list(self._dependents.get(step_id, ()))

    def node(self, step_id: str) -> DependencyNode:
        return DependencyNode(
            step_id=step_id,
            dependencies=tuple(self.get_dependencies(step_id)),
            dependents=tuple(self.get_dependent_steps(step_id)),
        )

    def _graph_ids(self) -> List[str]:
        ids = list(self._known)
        for sid in list(self._deps) + list(self._dependents):
            if sid not in ids:
                ids.append(sid)
        return ids

    # Validation -------------------------------------------------------------
    def validate_dependencies(self) -> CycleReport:
        """Depth-first search with an explicit recursion stack."""
        visited: Set[str] = set()
        stack: List[str] = []
        on_stack: Set[str] = set()
        found: List[Tuple[str, ...]] = []

        def visit(step_id: str) -> None:
            visited.add(step_id)
            stack.append(step_id)
            on_stack.add(step_id)
            for dep_id in self._deps.get(step_id, {}):
                if dep_id in on_stack:
                    cycle = _canonical(stack[stack.index(dep_id) :] + [dep_id])
                    if cycle not in found:
                        found.append(cycle)
                elif dep_id not in visited:
                    visit(dep_id)
            stack.pop()
            on_stack.discard(step_id)

        for step_id in self._graph_ids():
            if step_id not in visited:
                visit(step_id)
        return CycleReport(cycles=tuple(found))

    def dangling_dependencies(self) -> List[Tuple[str, str]]:
        if not self._known:
            return []
        known = set(self._known)
        return [
            (step_id, dep_id)
            for step_id, deps in self._deps.items()
            for dep_id in deps
            if dep_id not in known
        ]

    def dangling_branch_targets(self) -> List[Tuple[str, str]]:
        known = set(self._known)
        return [(s, t) for s, t in self._branch_targets if t not in known]

    def validate(self) -> DependencyReport:
        return DependencyReport(
            path_id=self.path_id,
            cycles=self.validate_dependencies(),
            dangling_dependencies=tuple(self.dangling_dependencies()),
            dangling_branch_targets=tuple(self.dangling_branch_targets()),
        )

    # Access -----------------------------------------------------------------
    def can_access_step(self, step_id: str, completed_step_ids: Collection[str]) -> bool:
        for dep in self._deps.get(step_id, {}).values():
            if dep.kind != "hard" or dep.step_id in completed_step_ids:
                continue
            if dep.condition is not None and not guarded_call(
                dep.condition, fallback=False, label=f"{step_id}:dependency"
            ).value:
                continue
            return False
        return True

    def get_next_available_steps(
        self, completed_step_ids: Collection[str], visible_steps: Sequence[TourStep]
    ) -> List[TourStep]:
        return [
            step
            for step in visible_steps
            if step.id not in completed_step_ids
            and self.can_access_step(step.id, completed_step_ids)
        ]
