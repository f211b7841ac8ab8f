"""
Live report state — latest chart data plus the observers to notify.

One channel is created when the server starts and closed when it stops.
recompute() may be called from any thread (a build hook, a request
handler); readers always see either the old or the new chart data.

Every observer gets its own single-worker executor: messages reach one
observer in order, and a slow observer only holds up its own deliveries.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional

from bundle_analyzer.analytics.chart_data import get_chart_data
from bundle_analyzer.config import AnalyzerOptions

CHART_DATA_UPDATED = "chartDataUpdated"

Observer = Callable[[dict], Any]


class ReportStateChannel:
    def __init__(
        self,
        chart_data: Optional[list[dict]],
        bundle_dir: Optional[str | Path] = None,
        options: Optional[AnalyzerOptions] = None,
    ):
        self.bundle_dir = bundle_dir
        self.options    = options or AnalyzerOptions()
        self._chart_data = chart_data
        self._observers: dict[int, tuple[Observer, ThreadPoolExecutor]] = {}
        self._next_token = 0
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_stats(
        cls,
        bundle_stats: dict,
        bundle_dir: Optional[str | Path] = None,
        options: Optional[AnalyzerOptions] = None,
    ) -> "ReportStateChannel":
        options = options or AnalyzerOptions()
        return cls(get_chart_data(bundle_stats, bundle_dir, options), bundle_dir, options)

    @property
    def chart_data(self) -> Optional[list[dict]]:
        with self._lock:
            return self._chart_data

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register `observer`; returns the function that unregisters it."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Report channel is closed")
            token = self._next_token
            self._next_token += 1
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="report-observer")
            self._observers[token] = (observer, executor)

        def unsubscribe() -> None:
            with self._lock:
                entry = self._observers.pop(token, None)
            if entry is not None:
                entry[1].shutdown(wait=False)

        return unsubscribe

    def recompute(self, bundle_stats: dict) -> bool:
        """
        Rebuild chart data from new stats and broadcast it.

        Returns False (state untouched, nobody notified) when the new stats
        produce nothing to report. Returns without waiting for observers.
        """
        chart_data = get_chart_data(bundle_stats, self.bundle_dir, self.options)
        if not chart_data:
            return False

        message = {"event": CHART_DATA_UPDATED, "data": chart_data}
        with self._lock:
            self._chart_data = chart_data
            # submit never blocks; holding the lock keeps executors from
            # being shut down underneath us
            for observer, executor in self._observers.values():
                executor.submit(self._deliver, observer, message)
        return True

    def close(self, wait: bool = False) -> None:
        """Drop every observer; `wait` blocks until queued deliveries finish."""
        with self._lock:
            self._closed = True
            executors = [executor for _, executor in self._observers.values()]
            self._observers.clear()
        for executor in executors:
            executor.shutdown(wait=wait)

    def _deliver(self, observer: Observer, message: dict) -> None:
        # at-most-once: a failing observer is logged and skipped
        try:
            observer(message)
        except Exception as err:
            self.options.logger.warning(f"Failed to notify report observer: {err}")
