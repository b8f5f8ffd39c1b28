from __future__ import annotations

import asyncio
from dataclasses import dataclass

from src.app.ports.output import IGtfsArchiveProvider, IGtfsRepository
from src.domain.models.gtfs import GtfsFeed

from .gtfs_tables import parse_gtfs_zip


@dataclass(slots=True)
class ArchiveGtfsRepository(IGtfsRepository):
    """Builds the feed from a zipped GTFS archive supplied by a provider."""

    archive_provider: IGtfsArchiveProvider

    async def load_feed(self) -> GtfsFeed:
        content = await self.archive_provider.fetch_archive()
        # Parsing a metro feed takes seconds; keep it off the event loop.
        return await asyncio.to_thread(parse_gtfs_zip, content)
