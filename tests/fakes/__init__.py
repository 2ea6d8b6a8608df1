"""Exports for test fakes."""

from .completion import FakeCompletionClient
from .filesystem import InMemoryFileSystem
from .store import InMemoryMatchScoreStore

__all__ = [
    "FakeCompletionClient",
    "InMemoryFileSystem",
    "InMemoryMatchScoreStore",
]
