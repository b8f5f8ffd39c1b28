from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IGtfsRepository
from src.domain.models.gtfs import GtfsFeed

from .gtfs_tables import load_feed_from_directory


@dataclass(slots=True)
class LocalGtfsRepository(IGtfsRepository):
    """Loads a GTFS feed from a directory of .txt files.

    Env vars:
      - GTFS_PATH: directory containing stops.txt, stop_times.txt, trips.txt,
        calendar.txt, calendar_dates.txt and agency.txt
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    async def load_feed(self) -> GtfsFeed:
        base = self._base()
        if not base.is_dir():
            raise FileNotFoundError(f"GTFS directory not found: {base}")
        return await asyncio.to_thread(load_feed_from_directory, base)
