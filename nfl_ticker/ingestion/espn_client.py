"""ESPN HTTP client for fetching the NFL scoreboard."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from nfl_ticker.errors import MalformedResponseError, TransportError, UpstreamStatusError

logger = logging.getLogger(__name__)
ESPN_BASE_URL = os.getenv("ESPN_BASE_URL", "https://site.api.espn.com").rstrip("/")
SCOREBOARD_BASE_PATH = "/apis/site/v2/sports"
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_USER_AGENT = "nfl-ticker/1.0 (+https://example.local)"
MAX_BODY_SNIPPET = 300


def build_scoreboard_url(sport: str = "football", league: str = "nfl") -> str:
    return f"{ESPN_BASE_URL}{SCOREBOARD_BASE_PATH}/{sport}/{league}/scoreboard"


def fetch_scoreboard(
    url: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """Fetch the scoreboard document once and return the decoded JSON body.

    Raises TransportError, UpstreamStatusError or MalformedResponseError.
    No retries here; the poller decides when to try again.
    """

    target = url or build_scoreboard_url()
    headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "application/json",
    }
    logger.info("Fetching data from ESPN url=%s", target)
    try:
        response = requests.get(target, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"ESPN request failed: {exc}") from exc

    if response.status_code != 200:
        body_snippet = (response.text or "")[:MAX_BODY_SNIPPET]
        logger.error(
            "ESPN scoreboard non-200 status=%s body=%s",
            response.status_code,
            body_snippet,
        )
        raise UpstreamStatusError(response.status_code, body_snippet)

    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(
            "ESPN returned non-JSON response: " + (response.text or "")[:MAX_BODY_SNIPPET]
        ) from exc
