import socket
import threading
from unittest.mock import MagicMock

import pytest
import structlog

from tests.test_utils import SCENARIO_PREFIX, FixedEntropy
from wow.schemas.proto import Quote
from wow.services.pow_service import PuzzleService
from wow.transport.connection import Connection
from wow.transport.server import TCPServer


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any setup_logging() a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def quote():
    return Quote(content="Well done is better than well said.", author="Benjamin Franklin")


@pytest.fixture
def rewards(quote):
    provider = MagicMock()
    provider.get_random_quote.return_value = quote
    return provider


@pytest.fixture
def make_puzzle(rewards):
    """Build a PuzzleService with a fixed prefix and mocked rewards."""

    def _make(difficulty=3, prefix=SCENARIO_PREFIX, ttl_seconds=10.0, entropy=None):
        return PuzzleService(
            entropy or FixedEntropy(prefix),
            rewards,
            difficulty=difficulty,
            prefix_length=len(prefix),
            ttl_seconds=ttl_seconds,
        )

    return _make


@pytest.fixture
def run_server():
    """Start TCPServer instances on ephemeral ports; closed after the test."""
    started = []

    def _run(puzzle: PuzzleService) -> TCPServer:
        server = TCPServer(puzzle, "127.0.0.1:0", accept_interval=0.05)
        thread = threading.Thread(target=server.serve, daemon=True)
        thread.start()
        started.append((server, thread))
        return server

    yield _run

    for server, thread in started:
        server.close()
        thread.join(timeout=5)


@pytest.fixture
def connect():
    """Open raw protocol connections to a running server."""
    opened = []

    def _connect(server: TCPServer) -> Connection:
        conn = Connection(socket.create_connection(server.address, timeout=5))
        opened.append(conn)
        return conn

    yield _connect

    for conn in opened:
        conn.close()
