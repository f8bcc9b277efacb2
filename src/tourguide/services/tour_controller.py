"""Tour navigation controller.

State machine with two states: inactive, and active on ``(path, index)``.

Transitions
-----------
 - ``start_tour(path_id)``: always restarts at index 0 with an empty
   completed-step set; steps whose condition is false (or whose role
   restriction excludes the user) are filtered out of ``visible_steps``.
 - ``next_step()``: the current step's branch rules are consulted first (first
   branch whose condition holds wins; a target missing from ``visible_steps``
   is ignored and linear advance proceeds). On the last step the tour
   completes: state goes inactive and the path id is added once to
   ``completedTours``. Otherwise the first accessible step after the current
   one becomes current; if none is accessible ``EXHAUSTED`` is returned and
   the caller decides (usually ``finish_tour``).
 - ``prev_step()``: mirror of ``next_step`` scanning backwards, no-op at 0.
 - ``go_to_step(index)``: bounds-checked jump, refused when the target step
   has unmet hard dependencies.

Every navigation method is a no-op returning ``NavigationOutcome.IGNORED``
while the controller is inactive. Transitions are published on the
``EventBus`` and recorded by ``TourAnalytics``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from tourguide.config.settings import TourSettings
from tourguide.design import tour_registry
from tourguide.design.gesture_navigation import classify_swipe, map_swipe, swipe_threshold
from tourguide.design.keyboard_navigation import NavigationAction, map_key
from tourguide.design.step_enhancers import resolve_for_device
from tourguide.design.tour_dependencies import DependencyReport, TourDependencyModel
from tourguide.design.tour_steps import (
    DIRECTIONS,
    KeyboardShortcuts,
    RoleRestriction,
    TourPath,
    TourStep,
)
from tourguide.i18n import action_label, t

from .dynamic_content import DynamicContentLoader
from .error_handling import guarded_call
from .event_bus import Event, EventBus, Subscription, TourEvent
from .key_value_store import KeyValueStore
from .tour_analytics import TourAnalytics
from .tour_persistence import TourProgressStore

__all__ = ["NavigationOutcome", "TourState", "TourController"]

_log = logging.getLogger(__name__)


class NavigationOutcome(str, Enum):
    ADVANCED = "advanced"
    BRANCHED = "branched"
    RETREATED = "retreated"
    JUMPED = "jumped"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    SKIPPED = "skipped"
    CLOSED = "closed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class TourState:
    is_active: bool
    current_path: Optional[str]
    current_step: int
    visible_steps: Tuple[TourStep, ...]
    completed_step_ids: FrozenSet[str]


class TourController:
    def __init__(
        self,
        paths: Optional[Iterable[TourPath]] = None,
        *,
        store: Optional[KeyValueStore] = None,
        event_bus: Optional[EventBus] = None,
        analytics: Optional[TourAnalytics] = None,
        settings: Optional[TourSettings] = None,
        user_id: Optional[str] = None,
        user_type: Optional[str] = None,
        device_class: str = "desktop",
    ) -> None:
        self._paths: Optional[Dict[str, TourPath]] = (
            {p.id: p for p in paths} if paths is not None else None
        )
        self.settings = settings or TourSettings.instance
        self.event_bus = event_bus
        self.progress = TourProgressStore(store) if store is not None else None
        self.user_id = user_id
        self.user_type = user_type
        self.device_class = device_class
        if analytics is None:
            analytics = TourAnalytics(
                event_bus=event_bus,
                capacity=self.settings.analytics_capacity,
                enabled=self.settings.analytics_enabled,
                user_id=user_id,
                user_type=user_type,
            )
        self.analytics = analytics
        self.content = DynamicContentLoader(on_loaded=self._on_content_loaded)
        self._subscriptions: List[Subscription] = []
        self._path: Optional[TourPath] = None
        self._model = TourDependencyModel()
        self._is_active = False
        self._current_step = 0
        self._visible: Tuple[TourStep, ...] = ()
        self._completed: Set[str] = set()

    # State ----------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def current_path(self) -> Optional[str]:
        return self._path.id if self._path else None

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def visible_steps(self) -> Tuple[TourStep, ...]:
        return self._visible

    @property
    def total_steps(self) -> int:
        return len(self._visible)

    @property
    def completed_step_ids(self) -> FrozenSet[str]:
        return frozenset(self._completed)

    @property
    def current_step_data(self) -> Optional[TourStep]:
        if 0 <= self._current_step < len(self._visible):
            return self._visible[self._current_step]
        return None

    @property
    def dependency_model(self) -> TourDependencyModel:
        return self._model

    def snapshot(self) -> TourState:
        return TourState(
            is_active=self._is_active,
            current_path=self.current_path,
            current_step=self._current_step,
            visible_steps=self._visible,
            completed_step_ids=frozenset(self._completed),
        )

    # Paths -----------------------------------------------------------------
    def _find_path(self, path_id: str) -> Optional[TourPath]:
        if self._paths is not None:
            return self._paths.get(path_id)
        try:
            return tour_registry.get_tour(path_id)
        except KeyError:
            return None

    def available_paths(self, route: Optional[str] = None) -> List[TourPath]:
        paths = list(self._paths.values()) if self._paths is not None else tour_registry.list_tours()
        if route is None:
            return paths
        return [p for p in paths if p.route is not None and tour_registry.route_matches(p.route, route)]

    def discover_tour(self, route: str) -> Optional[TourPath]:
        """First ``auto_start`` path for ``route`` that was not completed yet."""
        for path in self.available_paths(route):
            if path.auto_start and not self.is_tour_completed(path.id):
                return path
        return None

    def auto_start_for_route(self, route: str) -> bool:
        """Start the discovered tour for ``route`` unless a tour is already running."""
        if self._is_active:
            return False
        path = self.discover_tour(route)
        return path is not None and self.start_tour(path.id)

    def _is_visible(self, step: TourStep) -> bool:
        restriction = step.extension(RoleRestriction)
        if restriction is not None and not restriction.allows(self.user_type):
            return False
        if step.condition is None:
            return True
        return bool(guarded_call(step.condition, fallback=False, label=f"{step.id}:condition").value)

    # Events -------------------------------------------------------------------
    def _emit(self, event: TourEvent, **data: Any) -> None:
        step = self.current_step_data
        payload: Dict[str, Any] = {
            "path": self.current_path,
            "step": self._current_step,
            "step_id": step.id if step else None,
            "user_id": self.user_id,
            "user_type": self.user_type,
        }
        payload.update(data)
        if self.event_bus is not None:
            self.event_bus.publish(event, payload)
        self.analytics.track(
            event,
            self.current_path,
            step_index=self._current_step,
            step_id=payload["step_id"],
            **data,
        )

    def _on_content_loaded(self, step_id: str, content: str) -> None:
        if not self._is_active:
            return
        if self.event_bus is not None:
            self.event_bus.publish(
                TourEvent.CONTENT_LOADED,
                {"path": self.current_path, "step_id": step_id, "content": content},
            )

    # Lifecycle ------------------------------------------------------------------
    def start_tour(self, path_id: str) -> bool:
        path = self._find_path(path_id)
        if path is None:
            _log.warning("Cannot start unknown tour '%s'", path_id)
            return False
        visible = tuple(
            resolve_for_device(step, self.device_class)
            for step in path.steps
            if self._is_visible(step)
        )
        if not visible:
            _log.info("Tour '%s' has no visible steps", path_id)
            return False
        self.content.reset()
        self._path = path
        self._model = TourDependencyModel.from_path(path)
        self._visible = visible
        self._completed = set()
        self._current_step = 0
        self._is_active = True
        self._emit(TourEvent.TOUR_STARTED, total_steps=len(visible))
        self._enter_step(0)
        return True

    def _enter_step(self, index: int) -> None:
        self._current_step = index
        step = self._visible[index]
        self.content.load(step)
        self.save_progress()
        if self.event_bus is not None:
            self.event_bus.publish(
                TourEvent.STEP_CHANGED,
                {"path": self.current_path, "step": index, "step_id": step.id},
            )

    def _deactivate(self) -> None:
        self._is_active = False
        self.content.cancel()
        if self.progress is not None:
            self.progress.clear_progress()

    def finish_tour(self) -> NavigationOutcome:
        """Complete the active tour from any step."""
        if not self._is_active or self._path is None:
            return NavigationOutcome.IGNORED
        self._deactivate()
        if self.progress is not None:
            self.progress.mark_tour_completed(self._path.id)
        self._emit(TourEvent.TOUR_COMPLETED, total_steps=len(self._visible))
        return NavigationOutcome.COMPLETED

    def skip_tour(self) -> NavigationOutcome:
        if not self._is_active or self._path is None or not self._path.allow_skip:
            return NavigationOutcome.IGNORED
        self._deactivate()
        self._emit(TourEvent.TOUR_SKIPPED, total_steps=len(self._visible))
        return NavigationOutcome.SKIPPED

    def close(self) -> NavigationOutcome:
        if not self._is_active:
            return NavigationOutcome.IGNORED
        self._deactivate()
        self._emit(TourEvent.TOUR_EXITED, total_steps=len(self._visible))
        return NavigationOutcome.CLOSED

    # Dependencies -----------------------------------------------------------------
    def mark_step_completed(self, step_id: Optional[str] = None) -> None:
        if not self._is_active:
            return
        if step_id is None:
            step = self.current_step_data
            if step is None:
                return
            step_id = step.id
        self._completed.add(step_id)

    def can_access_step(self, step_id: str) -> bool:
        return self._model.can_access_step(step_id, self._completed)

    def suggested_next_steps(self, limit: Optional[int] = None) -> List[TourStep]:
        limit = self.settings.suggestion_limit if limit is None else limit
        return self._model.get_next_available_steps(self._completed, self._visible)[:limit]

    def dependency_report(self) -> DependencyReport:
        return self._model.validate()

    def resolve_branch_target(self, step: TourStep) -> Optional[str]:
        for branch in step.branches:
            if guarded_call(branch.condition, fallback=False, label=f"{step.id}:branch").value:
                return branch.target_step_id
        return None

    def _index_of(self, step_id: str) -> int:
        for i, step in enumerate(self._visible):
            if step.id == step_id:
                return i
        return -1

    def _find_accessible(self, start: int, stride: int) -> int:
        index = start
        while 0 <= index < len(self._visible):
            if self.can_access_step(self._visible[index].id):
                return index
            index += stride
        return -1

    # Navigation ----------------------------------------------------------------------
    def next_step(self) -> NavigationOutcome:
        step = self.current_step_data
        if not self._is_active or step is None:
            return NavigationOutcome.IGNORED
        target_id = self.resolve_branch_target(step)
        if target_id is not None:
            target = self._index_of(target_id)
            if target >= 0:
                self._emit(TourEvent.STEP_COMPLETED, branch_target=target_id)
                self._enter_step(target)
                return NavigationOutcome.BRANCHED
            _log.debug(
                "Branch target '%s' of step '%s' not visible; advancing linearly",
                target_id,
                step.id,
            )
        if self._current_step >= len(self._visible) - 1:
            return self.finish_tour()
        target = self._find_accessible(self._current_step + 1, 1)
        if target < 0:
            return NavigationOutcome.EXHAUSTED
        self._emit(TourEvent.STEP_COMPLETED)
        self._enter_step(target)
        return NavigationOutcome.ADVANCED

    def prev_step(self) -> NavigationOutcome:
        if not self._is_active or self._current_step <= 0:
            return NavigationOutcome.IGNORED
        target = self._find_accessible(self._current_step - 1, -1)
        if target < 0:
            return NavigationOutcome.EXHAUSTED
        self._emit(TourEvent.STEP_BACK)
        self._enter_step(target)
        return NavigationOutcome.RETREATED

    def go_to_step(self, index: int) -> NavigationOutcome:
        if not self._is_active or not (0 <= index < len(self._visible)):
            return NavigationOutcome.IGNORED
        if not self.can_access_step(self._visible[index].id):
            _log.debug("Step '%s' has unmet dependencies; jump refused", self._visible[index].id)
            return NavigationOutcome.IGNORED
        self._emit(TourEvent.JUMP_TO_STEP, from_step=self._current_step, to_step=index)
        self._enter_step(index)
        return NavigationOutcome.JUMPED

    def handle_action(self, action: NavigationAction) -> NavigationOutcome:
        if not self._is_active:
            return NavigationOutcome.IGNORED
        last = len(self._visible) - 1
        jump = self.settings.page_jump_size
        if action is NavigationAction.NEXT:
            return self.next_step()
        if action is NavigationAction.PREVIOUS:
            return self.prev_step()
        if action is NavigationAction.FIRST:
            return self.go_to_step(0)
        if action is NavigationAction.LAST:
            return self.go_to_step(last)
        if action is NavigationAction.JUMP_FORWARD:
            return self.go_to_step(min(self._current_step + jump, last))
        if action is NavigationAction.JUMP_BACKWARD:
            return self.go_to_step(max(self._current_step - jump, 0))
        if action is NavigationAction.ESCAPE:
            return self.close()
        if action is NavigationAction.SKIP:
            return self.skip_tour()
        if action is NavigationAction.HELP and self.event_bus is not None:
            self.event_bus.publish(TourEvent.HELP_REQUESTED, {"path": self.current_path})
        return NavigationOutcome.IGNORED

    def handle_key(
        self,
        key: str,
        *,
        shift: bool = False,
        ctrl: bool = False,
        meta: bool = False,
        in_text_input: bool = False,
    ) -> NavigationOutcome:
        if not self._is_active:
            return NavigationOutcome.IGNORED
        step = self.current_step_data
        action = map_key(
            key,
            shift=shift,
            ctrl=ctrl,
            meta=meta,
            rtl=self.settings.rtl,
            in_text_input=in_text_input,
            shortcuts=step.extension(KeyboardShortcuts) if step else None,
        )
        if action is None:
            return NavigationOutcome.IGNORED
        return self.handle_action(action)

    def handle_swipe(self, dx: float, dy: float, *, landscape: bool = False) -> NavigationOutcome:
        """Navigate for a touch drag of (``dx``, ``dy``) pixels."""
        if not self._is_active:
            return NavigationOutcome.IGNORED
        direction = classify_swipe(dx, dy, swipe_threshold(landscape))
        action = map_swipe(direction, rtl=self.settings.rtl, landscape=landscape)
        if action is None:
            return NavigationOutcome.IGNORED
        return self.handle_action(action)

    # Buttons -----------------------------------------------------------------------
    def action_labels(self) -> Dict[str, str]:
        step = self.current_step_data
        labels = {}
        for direction in DIRECTIONS:
            override = step.action(direction) if step else None
            labels[direction] = action_label(direction, override.label if override else None)
        return labels

    def invoke_action(self, direction: str) -> NavigationOutcome:
        """Run the step's button callback for ``direction`` then navigate."""
        step = self.current_step_data
        if not self._is_active or step is None:
            return NavigationOutcome.IGNORED
        override = step.action(direction)
        if override is not None and override.callback is not None:
            guarded_call(override.callback, label=f"{step.id}:{direction}")
        if direction == "next":
            return self.next_step()
        if direction == "prev":
            return self.prev_step()
        if direction == "skip":
            return self.skip_tour()
        if direction == "finish":
            return self.finish_tour()
        raise ValueError(f"Unknown action direction: {direction!r}")

    # Content ---------------------------------------------------------------------------
    def current_content(self) -> str:
        step = self.current_step_data
        if step is None:
            return ""
        return self.content.content_for(step)

    def progress_text(self) -> str:
        if not self._visible or self._path is None or not self._path.show_progress:
            return ""
        return t("tour.progress", current=self._current_step + 1, total=len(self._visible))

    def set_device_class(self, device_class: str) -> None:
        """Re-resolve responsive variants of the active tour for ``device_class``."""
        self.device_class = device_class
        if self._is_active and self._path is not None:
            by_id = {s.id: s for s in self._path.steps}
            self._visible = tuple(
                resolve_for_device(by_id[s.id], device_class) for s in self._visible
            )

    # Event bus wiring ------------------------------------------------------------------
    def bind_event_bus(self, bus: Optional[EventBus] = None) -> None:
        """Listen for ``tour:next`` / ``tour:previous`` / ``tour:escape`` requests."""
        if bus is not None:
            self.event_bus = bus
        if self.event_bus is None:
            raise ValueError("No event bus to bind to")
        self.unbind()

        def on_next(_: Event) -> None:
            self.next_step()

        def on_previous(_: Event) -> None:
            self.prev_step()

        def on_escape(_: Event) -> None:
            self.close()

        self._subscriptions = [
            self.event_bus.subscribe(TourEvent.NEXT, on_next),
            self.event_bus.subscribe(TourEvent.PREVIOUS, on_previous),
            self.event_bus.subscribe(TourEvent.ESCAPE, on_escape),
        ]

    def unbind(self) -> None:
        if self.event_bus is not None:
            for sub in self._subscriptions:
                self.event_bus.unsubscribe(sub)
        self._subscriptions = []

    # Persistence ------------------------------------------------------------------------
    def save_progress(self) -> None:
        """Store the current position under ``tourProgress`` (no-op without a store)."""
        if self.progress is not None and self._path is not None:
            self.progress.save_progress(self._path.id, self._current_step, self._is_active)

    def resume(self) -> bool:
        """Restart the tour saved in ``tourProgress`` at its saved step."""
        if self.progress is None:
            return False
        saved = self.progress.load_progress()
        if saved is None or not saved.active:
            return False
        if not self.start_tour(saved.path_id):
            return False
        if 0 < saved.step < len(self._visible):
            self._enter_step(saved.step)
        return True

    def is_tour_completed(self, path_id: str) -> bool:
        return self.progress is not None and self.progress.is_tour_completed(path_id)
