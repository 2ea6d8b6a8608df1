"""HTTP completion client used for optional AI match insights.

Usage example:
    from govcon_match.infrastructure.io.http import RequestsCompletionClient

    client = RequestsCompletionClient(api_key="...", model="claude-3-5-haiku-latest")
    text = client.complete("Explain this match", system_prompt="...", timeout_seconds=20)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from typing_extensions import TypedDict, override

import requests

from ...exceptions import AuthenticationError, CompletionServiceError, RateLimitError
from ...observability import get_logger
from ...protocols import CompletionClient
from .validation import IncomingDataError, validate_json_as

logger = get_logger("govcon_match.infrastructure.http")

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"


class _ContentBlockInput(TypedDict, total=False):
    type: str
    text: str


class _MessagesResponseInput(TypedDict, total=False):
    content: list[_ContentBlockInput]
    stop_reason: str | None


def parse_retry_after(headers: Mapping[str, str] | None) -> int | None:
    """Parse Retry-After header into seconds, if available."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        dt = parsedate_to_datetime(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        delta = (dt - datetime.now(UTC)).total_seconds()
        return max(0, int(delta))
    except (AttributeError, OverflowError, TypeError, ValueError):
        return None


def _response_details(response: requests.Response) -> str:
    """Return a compact status/body summary for error reporting."""
    try:
        body = response.text
    except (UnicodeDecodeError, ValueError, requests.RequestException):
        body = "<unreadable>"
    body = " ".join(body.split())
    if len(body) > 300:
        body = body[:300] + "..."
    return f"status={response.status_code}, body={body}"


class RequestsCompletionClient(CompletionClient):
    """Messages-style completion client built on ``requests``.

    - 401 raises AuthenticationError
    - 429 raises RateLimitError with the Retry-After delay
    - any other transport or HTTP failure raises CompletionServiceError
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        api_url: str = DEFAULT_API_URL,
        max_tokens: int = 1500,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._max_tokens = max_tokens
        self._session = session or requests.Session()

    @override
    def complete(self, prompt: str, *, system_prompt: str, timeout_seconds: float) -> str:
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": DEFAULT_API_VERSION,
            "content-type": "application/json",
        }
        try:
            response = self._session.post(
                self._api_url, json=payload, headers=headers, timeout=timeout_seconds
            )
        except requests.Timeout as exc:
            raise CompletionServiceError(f"Completion request timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise CompletionServiceError(f"Completion request failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationError()
        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers) or 60
            logger.warning("Completion API rate limited; retry after %ss", retry_after)
            raise RateLimitError(retry_after)
        if response.status_code >= 400:
            raise CompletionServiceError(
                f"Completion request rejected ({_response_details(response)})"
            )

        try:
            body = validate_json_as(_MessagesResponseInput, response.text)
        except IncomingDataError as exc:
            raise CompletionServiceError(f"Unexpected completion response: {exc}") from exc
        text = "".join(
            block.get("text", "")
            for block in body.get("content", [])
            if block.get("type") == "text"
        )
        if not text.strip():
            raise CompletionServiceError("Completion response contained no text")
        return text
