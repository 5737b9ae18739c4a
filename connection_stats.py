"""Lock-protected aggregate of probe outcomes.

One ``ConnectionStatistics`` is created per run and handed to every probe
thread. All outcome counters are mutated under ``lock``; readers go through
``snapshot()`` so they only ever see whole updates.

``launched`` is kept behind its own small lock. A probe may hold ``lock``
for its whole lookup and connect, and the scheduler must be able to count
a launch without waiting for it.
"""

import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StatisticsSnapshot:
    attempted: int
    connected: int
    failed: int
    launched: int
    min_latency: float
    max_latency: float
    total_latency: float
    total_handshake: float = 0.0

    @property
    def completed(self) -> int:
        return self.connected + self.failed

    @property
    def success_rate(self) -> Optional[float]:
        """Connected over ``attempted``; ``attempted`` only counts successes."""
        if self.attempted == 0:
            return None
        return self.connected / self.attempted * 100

    @property
    def completion_rate(self) -> Optional[float]:
        """Connected over every probe that reached an outcome."""
        if self.completed == 0:
            return None
        return self.connected / self.completed * 100

    @property
    def average_latency(self) -> Optional[float]:
        if self.connected == 0:
            return None
        return self.total_latency / self.connected

    @property
    def average_handshake(self) -> Optional[float]:
        if self.connected == 0:
            return None
        return self.total_handshake / self.connected


class ConnectionStatistics:
    def __init__(self):
        self.lock = threading.Lock()
        self._launch_lock = threading.Lock()
        self.attempted = 0
        self.connected = 0
        self.failed = 0
        self.launched = 0
        # 0.0 means unset until the first success
        self.min_latency = 0.0
        self.max_latency = 0.0
        self.total_latency = 0.0
        self.total_handshake = 0.0

    def record_launch(self):
        with self._launch_lock:
            self.launched += 1

    def launch_count(self) -> int:
        with self._launch_lock:
            return self.launched

    def record_failure(self, locked: bool = False):
        if locked:
            self._apply_failure()
            return
        with self.lock:
            self._apply_failure()

    def record_success(self, duration: float, handshake: Optional[float] = None, locked: bool = False):
        """Tally a connected probe.

        ``duration`` spans the whole probe, lookup included. ``handshake`` is
        the TCP connect alone and defaults to ``duration``.
        """
        if handshake is None:
            handshake = duration
        if duration < 0 or handshake < 0:
            raise ValueError(f"durations must be non-negative, got {duration} and {handshake}")
        if locked:
            self._apply_success(duration, handshake)
            return
        with self.lock:
            self._apply_success(duration, handshake)

    def _apply_failure(self):
        self.failed += 1

    def _apply_success(self, duration: float, handshake: float):
        self.connected += 1
        self.total_latency += duration
        self.total_handshake += handshake
        if self.connected == 1 or duration < self.min_latency:
            self.min_latency = duration
        if duration > self.max_latency:
            self.max_latency = duration
        self.attempted += 1

    def _build_snapshot(self) -> StatisticsSnapshot:
        return StatisticsSnapshot(
            attempted=self.attempted,
            connected=self.connected,
            failed=self.failed,
            launched=self.launch_count(),
            min_latency=self.min_latency,
            max_latency=self.max_latency,
            total_latency=self.total_latency,
            total_handshake=self.total_handshake,
        )

    def snapshot(self, locked: bool = False) -> StatisticsSnapshot:
        if locked:
            return self._build_snapshot()
        with self.lock:
            return self._build_snapshot()
