"""
Opt-in hot-path profiling for the repair parser.

Set JSONMEND_PROFILE in the environment before import to record how often
each parser method runs, how long it takes and how far it moves the cursor.
When unset, the decorator hands back the undecorated method.
"""

import functools
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import Protocol
from typing import TypeVar

PROFILE_HOT_PATHS = __debug__ and "JSONMEND_PROFILE" in os.environ


class _HasCursor(Protocol):
    index: int


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during parsing."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_consumed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns
        # Backtracking paths can move the cursor left
        self.chars_consumed += max(chars, 0)

    @property
    def mean_time_ns(self) -> float:
        return self.total_time_ns / self.call_count if self.call_count else 0.0


_hot_path_stats: dict[str, HotPathStats] = {}


def _record(name: str, duration_ns: int, chars: int) -> None:
    stats = _hot_path_stats.get(name)
    if stats is None:
        stats = _hot_path_stats[name] = HotPathStats(name)
    stats.record_call(duration_ns, chars)


F = TypeVar("F", bound=Callable[..., Any])


def profiled(name: str) -> Callable[[F], F]:
    """Wraps a parser method so each call is timed against its cursor delta."""

    def decorate(method: F) -> F:
        if not PROFILE_HOT_PATHS:
            return method

        @functools.wraps(method)
        def wrapper(parser: _HasCursor, *args: Any, **kwargs: Any) -> Any:
            start_index = parser.index
            start_time = time.perf_counter_ns()
            try:
                return method(parser, *args, **kwargs)
            finally:
                _record(
                    name,
                    time.perf_counter_ns() - start_time,
                    parser.index - start_index,
                )

        return wrapper  # type: ignore[return-value]

    return decorate


def get_hot_path_stats() -> dict[str, HotPathStats]:
    """Returns a snapshot of the profiling statistics (empty when disabled)."""
    return dict(_hot_path_stats)


def clear_hot_path_stats() -> None:
    _hot_path_stats.clear()
