from __future__ import annotations

import signal
import socket
from typing import Iterator

import pytest

from ipinfo_client import OrganizationInfo


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def listening_port() -> Iterator[int]:
    """A port on 127.0.0.1 that completes TCP handshakes from its backlog."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(128)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port() -> int:
    """A port on 127.0.0.1 with nothing listening, so connects are refused."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def static_lookup():
    def _lookup(ip: str) -> OrganizationInfo:
        return OrganizationInfo(ip=ip, org="AS0 Loopback Networks")

    return _lookup


@pytest.fixture
def restore_signals() -> Iterator[None]:
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, handler in saved.items():
            signal.signal(sig, handler)
