"""Element finder for tour step targets.

Tour steps name their target widget by ``objectName``. Targets may be created
lazily (after a data load or when a tab is first opened), so the finder polls
on a ``QTimer`` until a visible widget with that name exists under the root.

Polling stops when:
 - the element is found (``element_found`` is emitted),
 - the timeout elapses (``element_not_found`` is emitted and a warning is
   logged); ``timeout_ms=None`` disables the timeout for long-lived lazy views,
 - the step changes or the tour deactivates (``track`` resets the search).

``ElementPoller`` holds the polling state with an injectable lookup and is
used headless in tests; ``ElementFinder`` is the Qt driver.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from PyQt6.QtCore import QObject, QTimer, pyqtSignal
from PyQt6.QtWidgets import QWidget

from tourguide.config.settings import TourSettings
from tourguide.design.tour_steps import TourStep
from tourguide.services.event_bus import Event, EventBus, Subscription, TourEvent

__all__ = ["PollOutcome", "ElementPoller", "ElementFinder", "find_target_widget"]

_log = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()


class PollOutcome(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    FOUND = "found"
    NOT_FOUND = "not_found"


class ElementPoller(Generic[T]):
    """Attempt counter around a lookup function.

    Elapsed time is measured in poll intervals (``attempts * interval_ms``)
    so the timeout is deterministic regardless of event loop jitter.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[T]],
        *,
        interval_ms: int = 100,
        timeout_ms: Optional[int] = 10_000,
    ) -> None:
        if interval_ms < 1:
            raise ValueError("interval_ms must be >= 1")
        self._lookup = lookup
        self.interval_ms = interval_ms
        self.timeout_ms = timeout_ms
        self.element_id: Optional[str] = None
        self.element: Optional[T] = None
        self.attempts = 0
        self.outcome = PollOutcome.IDLE

    def start(self, element_id: str) -> None:
        self.element_id = element_id
        self.element = None
        self.attempts = 0
        self.outcome = PollOutcome.PENDING

    def reset(self) -> None:
        self.element_id = None
        self.element = None
        self.attempts = 0
        self.outcome = PollOutcome.IDLE

    @property
    def elapsed_ms(self) -> int:
        return self.attempts * self.interval_ms

    def poll(self) -> PollOutcome:
        if self.outcome is not PollOutcome.PENDING or self.element_id is None:
            return self.outcome
        found = self._lookup(self.element_id)
        if found is not None:
            self.element = found
            self.outcome = PollOutcome.FOUND
            return self.outcome
        self.attempts += 1
        if self.timeout_ms is not None and self.elapsed_ms >= self.timeout_ms:
            self.outcome = PollOutcome.NOT_FOUND
        return self.outcome


def find_target_widget(root: QWidget, element_id: str) -> Optional[QWidget]:
    """First visible widget named ``element_id`` at or below ``root``."""
    if root.objectName() == element_id and root.isVisible():
        return root
    for widget in root.findChildren(QWidget, element_id):
        if widget.isVisible():
            return widget
    return None


class ElementFinder(QObject):
    element_found = pyqtSignal(object)
    element_not_found = pyqtSignal(str)

    def __init__(
        self,
        root: QWidget,
        parent: Optional[QObject] = None,
        *,
        interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = _UNSET,
    ) -> None:
        super().__init__(parent)
        settings = TourSettings.instance
        self._root = root
        self.poller: ElementPoller[QWidget] = ElementPoller(
            lambda element_id: find_target_widget(self._root, element_id),
            interval_ms=interval_ms or settings.poll_interval_ms,
            timeout_ms=settings.element_timeout_ms if timeout_ms is _UNSET else timeout_ms,
        )
        self._timer = QTimer(self)
        self._timer.setInterval(self.poller.interval_ms)
        self._timer.timeout.connect(self._on_tick)  # type: ignore[attr-defined]
        self._subscriptions: list[Subscription] = []
        self._bus: Optional[EventBus] = None

    @property
    def element(self) -> Optional[QWidget]:
        return self.poller.element

    @property
    def is_polling(self) -> bool:
        return self._timer.isActive()

    def track(self, is_active: bool, step: Optional[TourStep]) -> None:
        """Follow the controller state; restarts the search when the target changes."""
        if not is_active or step is None:
            self.reset()
            return
        if step.element_id == self.poller.element_id and self.poller.outcome is not PollOutcome.IDLE:
            return
        self.start(step.element_id)

    def start(self, element_id: str) -> None:
        self._timer.stop()
        self.poller.start(element_id)
        if not self._handle(self.poller.poll()):
            self._timer.start()

    def reset(self) -> None:
        self._timer.stop()
        self.poller.reset()

    def _on_tick(self) -> None:
        self._handle(self.poller.poll())

    def _handle(self, outcome: PollOutcome) -> bool:
        if outcome is PollOutcome.FOUND:
            self._timer.stop()
            self.element_found.emit(self.poller.element)
            return True
        if outcome is PollOutcome.NOT_FOUND:
            self._timer.stop()
            _log.warning(
                "Tour target '%s' not found after %d ms",
                self.poller.element_id,
                self.poller.elapsed_ms,
            )
            self.element_not_found.emit(self.poller.element_id or "")
            return True
        return False

    # Controller wiring -------------------------------------------------------
    def attach(self, controller: Any) -> None:
        """Track ``controller`` through its event bus (step changes and tour end)."""
        bus = controller.event_bus
        if bus is None:
            raise ValueError("Controller has no event bus")
        self.detach()
        self._bus = bus

        def refresh(_: Event) -> None:
            self.track(controller.is_active, controller.current_step_data)

        for name in (
            TourEvent.STEP_CHANGED,
            TourEvent.TOUR_COMPLETED,
            TourEvent.TOUR_SKIPPED,
            TourEvent.TOUR_EXITED,
        ):
            self._subscriptions.append(bus.subscribe(name, refresh))
        self.track(controller.is_active, controller.current_step_data)

    def detach(self) -> None:
        if self._bus is not None:
            for sub in self._subscriptions:
                self._bus.unsubscribe(sub)
        self._subscriptions = []
        self._bus = None
