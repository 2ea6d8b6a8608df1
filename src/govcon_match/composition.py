"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .cli import CliDependencies, create_app
from .config import MatchConfig
from .infrastructure import JsonMatchScoreStore, LocalFileSystem, RequestsCompletionClient
from .protocols import CompletionClient


def build_cli_dependencies(*, config: MatchConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Scoring configuration (store location and AI client wiring).
    """
    fs = LocalFileSystem()
    store = JsonMatchScoreStore(root=Path(config.store_root), fs=fs)
    completion_client: CompletionClient | None = None
    if config.insights_available:
        completion_client = RequestsCompletionClient(
            api_key=config.ai_api_key,
            model=config.ai_model,
            api_url=config.ai_api_url,
            max_tokens=config.ai_max_tokens,
        )
    return CliDependencies(fs=fs, store=store, completion_client=completion_client)


app = create_app(build_cli_dependencies)
