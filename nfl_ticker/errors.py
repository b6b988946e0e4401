"""Error taxonomy for scoreboard fetch cycles."""

from __future__ import annotations


class ScoreboardError(RuntimeError):
    """Document-level failure of one fetch cycle."""

    kind = "scoreboard"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(ScoreboardError):
    kind = "transport"


class UpstreamStatusError(ScoreboardError):
    kind = "upstream_status"

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(
            f"ESPN returned non-200 response status={status_code}",
            status_code=status_code,
        )
        self.body = body


class MalformedResponseError(ScoreboardError):
    kind = "malformed_response"


class MalformedEventError(ValueError):
    """A single event could not be normalized; the builder skips it."""

    def __init__(self, message: str, event_id: str | None = None) -> None:
        super().__init__(message)
        self.event_id = event_id
