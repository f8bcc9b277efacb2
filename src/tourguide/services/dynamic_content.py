"""Dynamic step content loading.

A step carrying a ``DynamicContent`` extension gets its text from a provider
when it becomes current. Providers either return a string directly or a
``concurrent.futures.Future``; while a future is pending the placeholder is
shown and navigation is not blocked.

Every ``load``/``cancel`` bumps a generation counter. A future that resolves
after the step changed or the tour was closed carries a stale generation and
its result is discarded instead of being applied. ``on_loaded`` runs on the
thread that completes the future; Qt callers should marshal to the GUI thread.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from threading import RLock
from typing import Callable, Dict, Optional

from tourguide.design.tour_steps import DynamicContent, TourStep
from tourguide.i18n import t

from .error_handling import guarded_call

__all__ = ["DynamicContentLoader"]

_log = logging.getLogger(__name__)


class DynamicContentLoader:
    def __init__(self, on_loaded: Optional[Callable[[str, str], None]] = None) -> None:
        self._on_loaded = on_loaded
        self._lock = RLock()
        self._generation = 0
        self._pending: Optional[TourStep] = None
        self._resolved: Dict[str, str] = {}

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def set_content(self, step_id: str, content: str) -> None:
        with self._lock:
            self._resolved[step_id] = content

    def _placeholder(self, ext: DynamicContent) -> str:
        return ext.placeholder if ext.placeholder is not None else t("tour.content.loading")

    def load(self, step: TourStep) -> str:
        """Start loading content for ``step``; returns the text to show now."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._pending = None
        ext = step.extension(DynamicContent)
        if ext is None:
            return self.content_for(step)
        result = guarded_call(ext.provider, label=f"{step.id}:content")
        value = result.value
        if isinstance(value, Future):
            with self._lock:
                self._pending = step
            value.add_done_callback(lambda fut: self._resolve(generation, step, fut))
            return self.content_for(step)
        content = value or step.content
        self.set_content(step.id, content)
        return content

    def _resolve(self, generation: int, step: TourStep, fut: "Future[str]") -> None:
        try:
            content = fut.result() or step.content
        except Exception as exc:  # noqa: BLE001 - provider failures fall back to static text
            _log.warning("Dynamic content for step %s failed: %s", step.id, exc)
            content = step.content
        # Check and store under one lock hold so a concurrent cancel() wins.
        with self._lock:
            if generation != self._generation:
                _log.debug("Discarding stale content for step %s", step.id)
                return
            self._pending = None
            self._resolved[step.id] = content
            if self._on_loaded is not None:
                self._on_loaded(step.id, content)

    def content_for(self, step: TourStep) -> str:
        with self._lock:
            if self._pending is not None and self._pending.id == step.id:
                ext = step.extension(DynamicContent)
                if ext is not None:
                    return self._placeholder(ext)
            return self._resolved.get(step.id, step.content)

    def cancel(self) -> None:
        """Forget any in-flight load; its result will be discarded."""
        with self._lock:
            self._generation += 1
            self._pending = None

    def reset(self) -> None:
        with self._lock:
            self.cancel()
            self._resolved.clear()
