from __future__ import annotations

from functools import lru_cache

from src.adapters.config import ReachabilityConfig
from src.adapters.feeds.http_gtfs_archive_provider import HttpGtfsArchiveProvider
from src.adapters.feeds.s3_cached_gtfs_archive_provider import (
    S3CachedGtfsArchiveProvider,
)
from src.adapters.persistence import ArchiveGtfsRepository, LocalGtfsRepository
from src.app.ports.output import IGtfsArchiveProvider, IGtfsRepository
from src.app.services.feed_cache import FeedSnapshotCache
from src.app.services.reachability_service import ReachabilityService
from src.app.services.stop_access_service import StopAccessService


@lru_cache(maxsize=1)
def get_config() -> ReachabilityConfig:
    return ReachabilityConfig.from_env()


def build_gtfs_repository(cfg: ReachabilityConfig) -> IGtfsRepository:
    if cfg.gtfs_path:
        return LocalGtfsRepository(base_path=cfg.gtfs_path)

    provider: IGtfsArchiveProvider = HttpGtfsArchiveProvider()
    if cfg.archive_bucket:
        provider = S3CachedGtfsArchiveProvider(
            upstream=provider, bucket=cfg.archive_bucket
        )
    return ArchiveGtfsRepository(archive_provider=provider)


@lru_cache(maxsize=1)
def get_feed_cache() -> FeedSnapshotCache:
    # One cache per process: every request shares the same snapshots.
    cfg = get_config()
    return FeedSnapshotCache(
        repository=build_gtfs_repository(cfg),
        ttl_s=cfg.cache_ttl_s,
        fetch_timeout_s=cfg.fetch_timeout_s,
        retry_after_s=cfg.retry_after_s,
        default_time_zone=cfg.default_time_zone,
        bin_size_m=cfg.bin_size_m,
    )


def get_reachability_service() -> ReachabilityService:
    cfg = get_config()
    return ReachabilityService(
        feed_cache=get_feed_cache(),
        walk_speed_mps=cfg.walk_speed_mps,
        transfer_penalty_s=cfg.transfer_penalty_s,
    )


def get_stop_access_service() -> StopAccessService:
    return StopAccessService(feed_cache=get_feed_cache())
