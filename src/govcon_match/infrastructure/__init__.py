"""Concrete infrastructure implementations."""

from .io.filesystem import LocalFileSystem
from .io.http import RequestsCompletionClient, parse_retry_after
from .io.validation import IncomingDataError, validate_as, validate_json_as
from .store import JsonMatchScoreStore

__all__ = [
    "IncomingDataError",
    "JsonMatchScoreStore",
    "LocalFileSystem",
    "RequestsCompletionClient",
    "parse_retry_after",
    "validate_as",
    "validate_json_as",
]
