# ============================================================================
# STL Reader -- Progress Coordinator (stlreader/core/progress.py)
# ============================================================================
#
# WHAT THIS FILE DOES:
#   Tracks how far a read has got (0.0 .. 1.0) and lets the caller cancel
#   it. Three pieces:
#
#   ProgressIndicator -- the root. Holds the overall position, forwards it
#                        to a callback every N seconds, and answers "has the
#                        user asked to stop?".
#   ProgressRange     -- a slice [start, start + span] of the indicator that
#                        a caller hands to a sub-task.
#   ProgressScope     -- opened on a range by the sub-task; splits it into
#                        steps with next(). The sub-task polls more() between
#                        units of work and stops when it returns False.
#
# UNKNOWN AMOUNT OF WORK:
#   A file may hold several concatenated STL blocks and nobody knows how
#   many until the end. An "infinite" scope maps step value v to
#   v / (v + max), so every next() gets a share of what remains: with
#   max=1 and steps of 2, the first block covers ~67% of the range, the
#   second ~13%, and so on, and the bar never reaches 100% by itself.
#
# SAFETY DESIGN:
#   - A callback exception propagates (the caller owns the callback)
#   - Updates are rate-limited (report_every_seconds), so reporting per
#     facet on a 10-million-facet file costs a clock read, not a redraw
#   - Without an indicator (ProgressRange()), everything is a no-op and
#     more() is always True
#
# INTERNET ACCESS: None
# ============================================================================

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .config import ProgressConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


class ProgressIndicator:
    """
    Root of a progress tree.

    callback(position, name) is called with the overall position in
    [0, 1] and the name of the innermost named scope.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        report_every_seconds: Optional[float] = None,
    ):
        self.callback = callback
        self.position = 0.0
        self.name = ""
        self._cancelled = False

        self.start_time = time.time()
        self.last_report = 0.0
        if report_every_seconds is None:
            # dataclass default, or STLREADER_PROGRESS_EVERY_S when set
            report_every_seconds = ProgressConfig().report_every_seconds
        self.report_every_seconds = report_every_seconds

    @classmethod
    def from_config(
        cls,
        progress_config: ProgressConfig,
        callback: Optional[ProgressCallback] = None,
    ) -> "ProgressIndicator":
        """Indicator using the progress: section of a loaded Config."""
        return cls(callback, progress_config.report_every_seconds)

    def start(self) -> "ProgressRange":
        """The full [0, 1] range, to pass to StlReader.read()."""
        return ProgressRange(self, 0.0, 1.0)

    def cancel(self) -> None:
        """Ask every scope on this indicator to stop at its next poll."""
        self._cancelled = True

    def user_break(self) -> bool:
        return self._cancelled

    def increment_to(self, position: float, name: str = "") -> None:
        """Move forward to position. The position never goes back."""
        position = min(max(position, 0.0), 1.0)
        if position > self.position:
            self.position = position
        if name:
            self.name = name
        self.maybe_report()

    def eta_seconds(self) -> Optional[float]:
        """Seconds left at the average rate so far (None before any progress)."""
        if self.position <= 0.0:
            return None
        elapsed = max(1e-6, time.time() - self.start_time)
        return elapsed * (1.0 - self.position) / self.position

    def report(self) -> None:
        """Push the current position to the callback now."""
        logger.debug("progress %.1f%% %s", self.position * 100.0, self.name)
        if self.callback is not None:
            self.callback(self.position, self.name)

    def maybe_report(self) -> None:
        """Report only if report_every_seconds has elapsed since the last one."""
        now = time.time()
        if now - self.last_report >= self.report_every_seconds:
            self.report()
            self.last_report = now


class ProgressRange:
    """
    A reserved slice of an indicator's [0, 1] scale.

    ProgressRange() with no indicator is the null range: it reports
    nothing and is never cancelled.
    """

    def __init__(
        self,
        indicator: Optional[ProgressIndicator] = None,
        start: float = 0.0,
        span: float = 0.0,
    ):
        self.indicator = indicator
        self.start = start
        self.span = span

    @property
    def is_null(self) -> bool:
        return self.indicator is None

    def user_break(self) -> bool:
        return self.indicator is not None and self.indicator.user_break()

    def close(self, name: str = "") -> None:
        """Mark the whole slice as done."""
        if self.indicator is not None:
            self.indicator.increment_to(self.start + self.span, name)


class ProgressScope:
    """
    Splits a ProgressRange into max_value steps.

    Use as a context manager so the range is completed on exit:

        with ProgressScope(progress_range, "Reading binary STL file", nb_facets) as ps:
            for facet in ...:
                if not ps.more():
                    break
                ...
                ps.next()
    """

    def __init__(
        self,
        progress_range: Optional[ProgressRange] = None,
        name: str = "",
        max_value: float = 1.0,
        infinite: bool = False,
    ):
        self._range = progress_range if progress_range is not None else ProgressRange()
        self.name = name
        self.max_value = max_value if max_value > 0 else 1.0
        self.infinite = infinite
        self.value = 0.0
        self._closed = False

    def __enter__(self) -> "ProgressScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def more(self) -> bool:
        """False once cancellation was requested."""
        return not self._range.user_break()

    def next(self, step: float = 1.0) -> ProgressRange:
        """Advance by step and return the sub-range covering that step."""
        start = self._to_global(self.value)
        self.value += step
        end = self._to_global(self.value)
        if self._range.indicator is not None:
            self._range.indicator.increment_to(start, self.name)
        return ProgressRange(self._range.indicator, start, end - start)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self.infinite:
            self._range.close(self.name)
        elif self._range.indicator is not None:
            self._range.indicator.increment_to(self._to_global(self.value), self.name)

    def fraction(self, value: Optional[float] = None) -> float:
        """Share of this scope's range covered at value (default: current)."""
        v = self.value if value is None else value
        if v <= 0.0:
            return 0.0
        if self.infinite:
            return v / (v + self.max_value)
        return min(v / self.max_value, 1.0)

    def _to_global(self, value: float) -> float:
        return self._range.start + self._range.span * self.fraction(value)
