from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of ingestion timestamps; tests inject a fixed clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...
