"""Pytest configuration and shared fixtures for test suite"""

import socket
import tempfile
import threading
import time
from typing import Generator, List

import pytest

from gitecops.config import SinkConfig


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests requiring network")


class UDPCollector:
    """Loopback UDP listener recording every datagram it receives"""

    def __init__(self) -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.settimeout(0.1)
        self.port: int = self.sock.getsockname()[1]
        self.datagrams: List[bytes] = []
        self.running: bool = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def _run(self) -> None:
        while self.running:
            try:
                data, _ = self.sock.recvfrom(65535)
                self.datagrams.append(data)
            except socket.timeout:
                continue
            except OSError:
                break

    def wait_for(self, count: int = 1, timeout: float = 2.0) -> List[bytes]:
        deadline = time.time() + timeout
        while len(self.datagrams) < count and time.time() < deadline:
            time.sleep(0.01)
        return self.datagrams

    def stop(self) -> None:
        self.running = False
        self.thread.join(timeout=1.0)
        self.sock.close()


class TCPCollector:
    """Loopback TCP listener recording the bytes of each connection"""

    def __init__(self) -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(5)
        self.sock.settimeout(0.1)
        self.port: int = self.sock.getsockname()[1]
        self.streams: List[bytes] = []
        self.running: bool = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def _run(self) -> None:
        while self.running:
            try:
                client, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break

            chunks = []
            with client:
                client.settimeout(2.0)
                while True:
                    try:
                        data = client.recv(4096)
                    except OSError:
                        break
                    if not data:
                        break
                    chunks.append(data)
            self.streams.append(b''.join(chunks))

    def wait_for(self, count: int = 1, timeout: float = 2.0) -> List[bytes]:
        deadline = time.time() + timeout
        while len(self.streams) < count and time.time() < deadline:
            time.sleep(0.01)
        return self.streams

    def stop(self) -> None:
        self.running = False
        self.thread.join(timeout=1.0)
        self.sock.close()


@pytest.fixture
def udp_collector() -> Generator[UDPCollector, None, None]:
    """UDP collector on an ephemeral port"""
    collector = UDPCollector()
    yield collector
    collector.stop()


@pytest.fixture
def tcp_collector() -> Generator[TCPCollector, None, None]:
    """TCP collector on an ephemeral port"""
    collector = TCPCollector()
    yield collector
    collector.stop()


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def temp_policy_dir() -> Generator[str, None, None]:
    """Create temporary directory for policy files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def fixed_config() -> SinkConfig:
    """Config with a fixed client name so payloads are predictable"""
    return SinkConfig(target='127.0.0.1', port=514, client_name='CTE-123-V1234')


@pytest.fixture
def fixed_timestamp() -> str:
    return '2025:11:17:-10:30:45 +00:00'
