"""Fixed-interval scheduler with one run lease per stage."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_INTERVAL_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$", re.IGNORECASE)


def parse_interval(value: str | float) -> float:
    """Parse "30s", "15m", "4h", "1d" or a bare number of seconds."""
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _INTERVAL_RE.match(value)
        if not match:
            raise ValueError(f"invalid interval: {value!r}")
        unit = (match.group(2) or "s").lower()
        seconds = float(match.group(1)) * _UNIT_SECONDS[unit]
    if seconds <= 0:
        raise ValueError(f"interval must be positive: {value!r}")
    return seconds


class StageLease:
    """Non-blocking mutual exclusion for one stage.

    A run that finds the lease taken is skipped rather than queued.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()


@dataclass
class ScheduledJob:
    name: str
    interval: float
    func: Callable[[], Any]
    lease: StageLease = field(init=False)

    def __post_init__(self) -> None:
        self.lease = StageLease(self.name)


class Scheduler:
    def __init__(self, jobs: list[ScheduledJob], *, enabled: bool = True) -> None:
        self._jobs = {job.name: job for job in jobs}
        self.enabled = enabled
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._runs: list[threading.Thread] = []
        self._runs_lock = threading.Lock()

    @property
    def jobs(self) -> list[ScheduledJob]:
        return list(self._jobs.values())

    def run_job(self, name: str) -> bool:
        """Run one job if its previous run has finished.

        Returns False when the run was skipped. Errors are logged and
        swallowed so the next interval still fires.
        """
        job = self._jobs[name]
        with job.lease.hold() as acquired:
            if not acquired:
                logger.warning("Skipping %s: previous run still in progress", name)
                return False
            logger.info("Starting scheduled %s...", name)
            try:
                job.func()
            except Exception:
                logger.exception("Scheduled %s failed", name)
            return True

    def _loop(self, job: ScheduledJob) -> None:
        while not self._stop.wait(job.interval):
            # Each tick gets its own thread so a long run never delays the timer
            run = threading.Thread(
                target=self.run_job, args=(job.name,), name=f"{job.name}-run", daemon=True
            )
            with self._runs_lock:
                self._runs = [t for t in self._runs if t.is_alive()]
                self._runs.append(run)
                run.start()

    def start(self) -> None:
        if not self.enabled:
            logger.info("Auto-generation disabled, scheduler not started")
            return
        self._stop.clear()
        for job in self._jobs.values():
            thread = threading.Thread(
                target=self._loop, args=(job,), name=f"{job.name}-timer", daemon=True
            )
            thread.start()
            self._threads.append(thread)
            logger.info("Scheduled %s every %.0fs", job.name, job.interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads.clear()
        # Timers are stopped, so no new runs can be added
        with self._runs_lock:
            runs, self._runs = self._runs, []
        for run in runs:
            run.join(timeout)

    def run_forever(self) -> None:
        self.start()
        try:
            while not self._stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping scheduler")
        finally:
            self.stop(timeout=1.0)
