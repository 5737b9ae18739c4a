#!/usr/bin/env python3
"""Continuous TCP connectivity probe.

Usage:
  tcping <ip> <port>

Example:
  tcping 192.168.1.1 443

A probe is started every 550 ms until SIGINT or SIGTERM, then the
aggregate statistics are printed.
"""
import logging
import signal
import sys
import threading
import time

from config import get_int_setting, get_setting, setup_logging
from connection_stats import ConnectionStatistics
from console import YELLOW, init_console, paint
from ipinfo_client import IpInfoClient
from probe import LOCK_SCOPES, run_probe
from report import print_report
from validators import is_valid_ip, parse_port

log = logging.getLogger(__name__)

TICK_INTERVAL = 0.55
USAGE = "Usage: tcping <ip> <port>"


class Scheduler:
    def __init__(self, host: str, port: int, stats: ConnectionStatistics, lookup,
                 interval: float = TICK_INTERVAL, lock_scope: str = "probe", max_in_flight: int = 0):
        if lock_scope not in LOCK_SCOPES:
            raise ValueError(f"lock_scope must be one of {LOCK_SCOPES}, got {lock_scope!r}")
        self.host = host
        self.port = port
        self.stats = stats
        self.lookup = lookup
        self.interval = interval
        self.lock_scope = lock_scope
        self.ticks = 0
        self._stopped = False
        # 0 keeps spawning without bound
        self._slots = threading.BoundedSemaphore(max_in_flight) if max_in_flight > 0 else None

    @property
    def running(self) -> bool:
        return not self._stopped

    def stop(self):
        # no locks here: also called from signal handlers
        self._stopped = True

    def _on_signal(self, signum, frame):
        self.stop()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._on_signal)
        signal.signal(signal.SIGTERM, self._on_signal)

    def _worker(self):
        try:
            run_probe(self.host, self.port, self.stats, lookup=self.lookup, lock_scope=self.lock_scope)
        finally:
            if self._slots is not None:
                self._slots.release()

    def spawn(self) -> bool:
        if self._slots is not None and not self._slots.acquire(blocking=False):
            log.debug("All probe slots busy; skipping this tick")
            return False
        self.stats.record_launch()
        threading.Thread(target=self._worker, name="probe", daemon=True).start()
        return True

    def run(self):
        while self.running:
            self.ticks += 1
            self.spawn()
            time.sleep(self.interval)
        log.debug("Stopped after %d ticks, %d probes launched", self.ticks, self.stats.launch_count())


def _fail(message: str, code: int) -> int:
    print(message, file=sys.stderr)
    return code


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        return _fail(USAGE, 2)

    host = args[0]
    if not is_valid_ip(host):
        return _fail(f"Invalid IP address: {host}", 1)
    try:
        port = parse_port(args[1])
    except ValueError as exc:
        return _fail(f"Invalid port number: {exc}", 1)

    setup_logging()
    init_console()

    lock_scope = str(get_setting("PROBE_LOCK_SCOPE", "probe_lock_scope", "probe")).lower()
    if lock_scope not in LOCK_SCOPES:
        log.warning("PROBE_LOCK_SCOPE %r is not valid, using 'probe'", lock_scope)
        lock_scope = "probe"
    max_in_flight = get_int_setting("MAX_IN_FLIGHT", "max_in_flight", 0)
    try:
        lookup = IpInfoClient()
    except ValueError as exc:
        return _fail(f"Invalid configuration: {exc}", 1)

    stats = ConnectionStatistics()
    scheduler = Scheduler(
        host,
        port,
        stats,
        lookup=lookup,
        interval=TICK_INTERVAL,
        lock_scope=lock_scope,
        max_in_flight=max_in_flight,
    )
    scheduler.install_signal_handlers()

    print(f"\nConnecting to {paint(host, YELLOW)} on {paint(f'TCP {port}', YELLOW)}:\n")
    scheduler.run()
    print_report(stats)
    return 0


if __name__ == "__main__":
    sys.exit(main())
