"""One TCP connectivity probe: organization lookup, then a timed handshake."""

import contextlib
import ipaddress
import logging
import socket
import time

from connection_stats import ConnectionStatistics
from console import GREEN, RED, paint
from ipinfo_client import OrganizationLookupError, lookup_organization

log = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0
LOCK_SCOPES = ("probe", "update")


def _address_family(host: str) -> int:
    if ipaddress.ip_address(host).version == 6:
        return socket.AF_INET6
    return socket.AF_INET


def tcp_connect(host: str, port: int, timeout: float = CONNECT_TIMEOUT) -> float:
    """Open and close a TCP connection, returning the handshake time in seconds.

    Raises OSError (socket.timeout included) when the connection fails.
    """
    sock = socket.socket(_address_family(host), socket.SOCK_STREAM)
    sock.settimeout(timeout)
    try:
        start = time.perf_counter()
        sock.connect((host, port))
        return time.perf_counter() - start
    finally:
        sock.close()


def _probe(host: str, port: int, stats: ConnectionStatistics, lookup, locked: bool) -> bool:
    start = time.perf_counter()
    try:
        info = lookup(host)
    except OrganizationLookupError as exc:
        log.error(paint(f"Failed to get IP info: {exc}", RED))
        stats.record_failure(locked=locked)
        return False

    try:
        handshake = tcp_connect(host, port)
    except OSError as exc:
        log.error(paint("Connection timed out", RED))
        log.debug("connect to %s:%d failed: %s", host, port, exc)
        stats.record_failure(locked=locked)
        return False
    duration = time.perf_counter() - start

    log.info(
        "Connected to %s time=%s handshake=%s protocol=%s port=%s ISP=%s",
        paint(host, GREEN),
        paint(f"{duration * 1000:.2f}ms", GREEN),
        paint(f"{handshake * 1000:.2f}ms", GREEN),
        paint("TCP", GREEN),
        paint(port, GREEN),
        paint(info.org, GREEN),
    )
    stats.record_success(duration, handshake=handshake, locked=locked)
    return True


def run_probe(host: str, port: int, stats: ConnectionStatistics, lookup=lookup_organization,
              lock_scope: str = "probe") -> bool:
    """Run one probe and tally its outcome into ``stats``.

    With ``lock_scope="probe"`` the statistics lock is held across the lookup
    and the connect, so probes run one at a time and their log lines never
    interleave. With ``"update"`` only the counter update is locked.
    """
    if lock_scope not in LOCK_SCOPES:
        raise ValueError(f"lock_scope must be one of {LOCK_SCOPES}, got {lock_scope!r}")

    holding = stats.lock if lock_scope == "probe" else contextlib.nullcontext()
    with holding:
        try:
            return _probe(host, port, stats, lookup, locked=lock_scope == "probe")
        except Exception as exc:
            log.error(paint(f"Probe failed: {exc}", RED))
            log.debug("probe of %s:%d crashed", host, port, exc_info=True)
            stats.record_failure(locked=lock_scope == "probe")
            return False
