from __future__ import annotations

import threading

import pytest

from connection_stats import ConnectionStatistics


def test_fresh_statistics_have_no_rates() -> None:
    snap = ConnectionStatistics().snapshot()

    assert (snap.attempted, snap.connected, snap.failed, snap.launched) == (0, 0, 0, 0)
    assert snap.min_latency == 0.0
    assert snap.success_rate is None
    assert snap.completion_rate is None
    assert snap.average_latency is None


def test_outcomes_are_tallied_with_legacy_attempted_semantics() -> None:
    stats = ConnectionStatistics()
    for duration in (0.25, 0.5, 0.125):
        stats.record_success(duration)
    stats.record_failure()
    stats.record_failure()

    snap = stats.snapshot()
    assert snap.connected == 3
    assert snap.failed == 2
    # attempted only moves on the success path
    assert snap.attempted == 3
    assert snap.completed == 5
    assert snap.success_rate == 100.0
    assert snap.completion_rate == 60.0
    assert snap.min_latency == 0.125
    assert snap.max_latency == 0.5
    assert snap.average_latency == pytest.approx(0.875 / 3)


def test_zero_duration_counts_as_the_first_minimum() -> None:
    stats = ConnectionStatistics()
    stats.record_success(0.0)
    stats.record_success(0.5)

    snap = stats.snapshot()
    assert snap.min_latency == 0.0
    assert snap.min_latency <= snap.average_latency <= snap.max_latency


def test_negative_duration_is_rejected() -> None:
    with pytest.raises(ValueError):
        ConnectionStatistics().record_success(-0.1)


def test_locked_updates_require_the_caller_to_hold_the_lock() -> None:
    stats = ConnectionStatistics()
    with stats.lock:
        stats.record_success(0.25, locked=True)
        stats.record_failure(locked=True)

    snap = stats.snapshot()
    assert (snap.connected, snap.failed) == (1, 1)


def test_concurrent_writers_never_expose_partial_updates() -> None:
    stats = ConnectionStatistics()
    writers = 8
    per_writer = 400
    durations = (0.125, 0.25, 0.5)
    start = threading.Barrier(writers + 1)
    done = threading.Event()
    problems = []

    def write(index: int) -> None:
        start.wait()
        for i in range(per_writer):
            if (index + i) % 4 == 0:
                stats.record_failure()
            else:
                stats.record_success(durations[i % len(durations)])

    def read() -> None:
        start.wait()
        while not done.is_set():
            snap = stats.snapshot()
            if snap.attempted != snap.connected:
                problems.append(("attempted", snap))
            if snap.connected and not (snap.min_latency <= snap.average_latency <= snap.max_latency):
                problems.append(("latency", snap))
            if snap.total_latency < snap.connected * 0.125:
                problems.append(("total", snap))

    threads = [threading.Thread(target=write, args=(n,)) for n in range(writers)]
    reader = threading.Thread(target=read)
    reader.start()
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    done.set()
    reader.join()

    expected_failures = sum(1 for n in range(writers) for i in range(per_writer) if (n + i) % 4 == 0)
    snap = stats.snapshot()
    assert problems == []
    assert snap.failed == expected_failures
    assert snap.connected == writers * per_writer - expected_failures
    assert snap.min_latency == 0.125
    assert snap.max_latency == 0.5


def test_launches_are_counted_while_the_outcome_lock_is_held() -> None:
    stats = ConnectionStatistics()

    with stats.lock:
        counter = threading.Thread(target=stats.record_launch)
        counter.start()
        counter.join(timeout=1)
        assert not counter.is_alive()
        assert stats.launch_count() == 1


def test_handshake_total_defaults_to_the_probe_duration() -> None:
    stats = ConnectionStatistics()
    stats.record_success(0.5)
    stats.record_success(0.25, handshake=0.125)

    snap = stats.snapshot()
    assert snap.total_latency == 0.75
    assert snap.total_handshake == 0.625
    assert snap.average_handshake == 0.3125
