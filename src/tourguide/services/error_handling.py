"""Error types and guarded callback execution for tours.

Tours run user-supplied callables everywhere: visibility conditions, branch
predicates, button callbacks and dynamic content providers. A failure in any
of them must degrade to "the tour does not advance" rather than tear down the
host window, so callers wrap them with ``guarded_call`` and inspect the
returned ``GuardedResult`` instead of relying on an outer exception hook.

Configuration problems (cycles, dangling ids) are a different category: they
raise ``TourConfigurationError`` when a path is registered in strict mode.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

__all__ = [
    "TourError",
    "TourConfigurationError",
    "GuardedResult",
    "guarded_call",
]

T = TypeVar("T")

_log = logging.getLogger(__name__)


class TourError(Exception):
    """Base class for tour engine errors."""


class TourConfigurationError(TourError, ValueError):
    """A tour path is mis-authored (cyclic or dangling references).

    Attributes
    ----------
    path_id: str
        Offending tour path.
    problems: list[str]
        Human readable problem descriptions.
    """

    def __init__(self, path_id: str, problems: Sequence[str]) -> None:
        self.path_id = path_id
        self.problems = list(problems)
        detail = "; ".join(self.problems) or "unknown problem"
        super().__init__(f"Invalid tour path '{path_id}': {detail}")


@dataclass(frozen=True)
class GuardedResult(Generic[T]):
    """Outcome of a guarded callback: either a value or a captured error."""

    value: Optional[T]
    error: Optional[BaseException] = None
    traceback_str: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def summary(self, max_len: int = 120) -> str:
        if self.error is None:
            return "ok"
        msg = f"{type(self.error).__name__}: {self.error}"
        return msg if len(msg) <= max_len else msg[: max_len - 3] + "..."


def guarded_call(
    fn: Callable[..., T], *args: Any, fallback: Optional[T] = None, label: str = "", **kwargs: Any
) -> GuardedResult[T]:
    """Invoke ``fn`` and capture any exception into the result.

    ``fallback`` becomes the result value when the call fails. ``label`` only
    feeds the log message.
    """
    try:
        return GuardedResult(value=fn(*args, **kwargs))
    except Exception as exc:  # noqa: BLE001 - user callbacks may raise anything
        _log.warning("Tour callback %s failed: %s", label or getattr(fn, "__name__", fn), exc)
        return GuardedResult(value=fallback, error=exc, traceback_str=traceback.format_exc())
