"""Pytest fixtures shared across the suite.

All tests are network-isolated: socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest

from tests.fakes import FakeCompletionClient, InMemoryFileSystem, InMemoryMatchScoreStore
from tests.support.errors import NetworkIsolationError

_original_socket_connect = socket.socket.connect


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    _ = (self, kwargs)
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    Tests that need a completion service should use FakeCompletionClient or
    a MagicMock session.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture
def in_memory_fs() -> InMemoryFileSystem:
    return InMemoryFileSystem()


@pytest.fixture
def in_memory_store() -> InMemoryMatchScoreStore:
    return InMemoryMatchScoreStore()


@pytest.fixture
def fake_completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()
