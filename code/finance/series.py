import logging
import random
import threading
from typing import Iterable, Optional, Tuple

from .schemas import TimeSeriesPoint

logger = logging.getLogger(__name__)

REVENUE_JITTER = 125000.0
EXPENSES_JITTER = 75000.0
DEFAULT_TICK_SECONDS = 45.0

BASELINE_SERIES: Tuple[TimeSeriesPoint, ...] = (
    TimeSeriesPoint("Jan", 1250000.0, 875000.0),
    TimeSeriesPoint("Feb", 1300000.0, 900000.0),
    TimeSeriesPoint("Mar", 1200000.0, 850000.0),
    TimeSeriesPoint("Apr", 1375000.0, 950000.0),
    TimeSeriesPoint("May", 1450000.0, 1000000.0),
    TimeSeriesPoint("Jun", 1550000.0, 1050000.0),
    TimeSeriesPoint("Jul", 1600000.0, 1100000.0),
    TimeSeriesPoint("Aug", 1750000.0, 1200000.0),
)


def perturb_point(point: TimeSeriesPoint, rng: random.Random) -> TimeSeriesPoint:
    revenue = point.revenue + (rng.random() - 0.5) * REVENUE_JITTER
    expenses = point.expenses + (rng.random() - 0.5) * EXPENSES_JITTER
    return TimeSeriesPoint(point.month, max(0.0, revenue), max(0.0, expenses))


class SyntheticSeries:
    """Fixed-length monthly series that drifts randomly to look live.

    Single writer (``tick``); readers get the current tuple, which is never
    modified after it is published.
    """

    def __init__(
        self,
        points: Iterable[TimeSeriesPoint] = BASELINE_SERIES,
        rng: Optional[random.Random] = None,
    ):
        self._points: Tuple[TimeSeriesPoint, ...] = tuple(points)
        if not self._points:
            raise ValueError("series needs at least one point")
        self._rng = rng or random.Random()
        self._write_lock = threading.Lock()
        self.ticks = 0

    def snapshot(self) -> Tuple[TimeSeriesPoint, ...]:
        return self._points

    def latest(self) -> TimeSeriesPoint:
        return self._points[-1]

    def __len__(self) -> int:
        return len(self._points)

    def tick(self) -> Tuple[TimeSeriesPoint, ...]:
        with self._write_lock:
            updated = tuple(perturb_point(p, self._rng) for p in self._points)
            self._points = updated
            self.ticks += 1
        return updated


class SeriesTicker:
    """Periodic trigger driving ``SyntheticSeries.tick`` on a daemon thread."""

    def __init__(self, series: SyntheticSeries, interval: float = DEFAULT_TICK_SECONDS):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.series = series
        self.interval = interval
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            # One stop flag per thread.
            self._stop = threading.Event()
            self._thread = threading.Thread(target=self._run, args=(self._stop,), name="series-ticker", daemon=True)
            self._thread.start()
        logger.debug("series ticker started interval=%s", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._thread = None
            self._stop.set()
            self._stop = None
        thread.join(timeout)
        logger.debug("series ticker stopped after %s ticks", self.series.ticks)

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            self.series.tick()
