from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx

from src.app.ports.output import IGtfsArchiveProvider

logger = logging.getLogger(__name__)

DEFAULT_GTFS_ZIP_URL = "https://gtfsrt.api.translink.com.au/GTFS/SEQ_GTFS.zip"


@dataclass(slots=True)
class HttpGtfsArchiveProvider(IGtfsArchiveProvider):
    """Downloads the static GTFS zip over HTTP.

    Env vars:
      - GTFS_ZIP_URL: URL of the static GTFS archive
      - GTFS_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - GTFS_HTTP_TIMEOUT_S: request timeout (default 45)

    Caching and refresh cadence are handled by the feed snapshot cache, not here.
    """

    url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 45.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("GTFS_ZIP_URL") or DEFAULT_GTFS_ZIP_URL
        if self.headers_raw is None:
            self.headers_raw = os.getenv("GTFS_HEADERS")
        if os.getenv("GTFS_HTTP_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_HTTP_TIMEOUT_S"])

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/zip, application/x-zip-compressed, */*"}
        raw = (self.headers_raw or "").strip()
        for part in raw.split(";"):
            part = part.strip()
            if not part or ":" not in part:
                continue
            k, v = part.split(":", 1)
            k = k.strip()
            if k:
                headers[k] = v.strip()
        return headers

    async def fetch_archive(self) -> bytes:
        if not self.url:
            raise RuntimeError("GTFS_ZIP_URL is not configured")

        async with httpx.AsyncClient(
            timeout=self.timeout_s, follow_redirects=True, transport=self.transport
        ) as client:
            resp = await client.get(self.url, headers=self._headers())
            resp.raise_for_status()
            content = resp.content

        logger.info(
            "Downloaded GTFS archive (%d bytes) from %s", len(content), self.url
        )
        return content
