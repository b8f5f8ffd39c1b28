from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from src.adapters.aws import s3_client
from src.app.ports.output import IGtfsArchiveProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class S3CachedGtfsArchiveProvider(IGtfsArchiveProvider):
    """Keeps the last downloaded GTFS archive in S3.

    This is an adapter-level decorator around another IGtfsArchiveProvider.
    Every successful upstream download is written through to S3; if the
    upstream fails, the stored copy is served instead, so a restarted process
    still has a feed while the agency endpoint is down.

    Env vars:
      - GTFS_ARCHIVE_BUCKET (required)
      - GTFS_ARCHIVE_KEY (default: gtfs/static.zip)
      - ENDPOINT_URL (preferred for LocalStack)
    """

    upstream: IGtfsArchiveProvider
    bucket: str | None = None
    key: str | None = None

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("GTFS_ARCHIVE_BUCKET")
        if not value:
            raise RuntimeError("Missing GTFS_ARCHIVE_BUCKET")
        return value

    def _key(self) -> str:
        value = self.key or os.getenv("GTFS_ARCHIVE_KEY") or "gtfs/static.zip"
        return value.strip("/")

    def _put(self, content: bytes) -> None:
        s3_client().put_object(Bucket=self._bucket(), Key=self._key(), Body=content)

    def _get(self) -> bytes:
        obj = s3_client().get_object(Bucket=self._bucket(), Key=self._key())
        return obj["Body"].read()

    async def fetch_archive(self) -> bytes:
        try:
            content = await self.upstream.fetch_archive()
        except Exception as exc:
            logger.warning("Upstream GTFS download failed (%s); using S3 copy", exc)
            return await asyncio.to_thread(self._get)

        try:
            await asyncio.to_thread(self._put, content)
        except Exception:
            # The download itself succeeded; a failed write only loses the backup.
            logger.exception("Could not store GTFS archive in S3")
        return content
