"""System clock adapter providing real UTC time."""

from __future__ import annotations

from datetime import UTC, datetime

from grounded_rag.application.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """Timestamps DocumentRecord.ingested_at in production."""

    def now(self) -> datetime:
        return datetime.now(UTC)
