from __future__ import annotations

from abc import ABC, abstractmethod


class IGtfsArchiveProvider(ABC):
    """Port for obtaining the raw static GTFS zip archive."""

    @abstractmethod
    async def fetch_archive(self) -> bytes:
        """Return the archive bytes; raise on failure."""
