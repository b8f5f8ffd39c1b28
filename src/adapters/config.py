from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.algorithms.access import DEFAULT_WALK_SPEED_MPS
from src.domain.algorithms.calendar import DEFAULT_FEED_TIME_ZONE
from src.domain.algorithms.propagation import DEFAULT_TRANSFER_PENALTY_S
from src.domain.algorithms.spatial_index import DEFAULT_BIN_SIZE_M


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


@dataclass(frozen=True, slots=True)
class ReachabilityConfig:
    """Runtime settings for feed loading and reachability defaults.

    Env vars:
      - GTFS_PATH: load from a local directory instead of downloading
      - GTFS_ARCHIVE_BUCKET: keep a copy of the downloaded archive in S3
      - GTFS_CACHE_TTL_S: snapshot lifetime (default 86400)
      - GTFS_FETCH_TIMEOUT_S: bound on one feed load (default 60)
      - GTFS_RETRY_AFTER_S: wait before retrying a failed load (default 60)
      - GTFS_DEFAULT_TIMEZONE: used when agency.txt has none
      - STOP_INDEX_BIN_M, WALK_SPEED_MPS, TRANSFER_PENALTY_S
    """

    gtfs_path: str | None
    archive_bucket: str | None
    cache_ttl_s: float
    fetch_timeout_s: float
    retry_after_s: float
    default_time_zone: str
    bin_size_m: float
    walk_speed_mps: float
    transfer_penalty_s: int

    @staticmethod
    def from_env() -> "ReachabilityConfig":
        return ReachabilityConfig(
            gtfs_path=env_str("GTFS_PATH"),
            archive_bucket=env_str("GTFS_ARCHIVE_BUCKET"),
            cache_ttl_s=env_float("GTFS_CACHE_TTL_S", 86400.0),
            fetch_timeout_s=env_float("GTFS_FETCH_TIMEOUT_S", 60.0),
            retry_after_s=env_float("GTFS_RETRY_AFTER_S", 60.0),
            default_time_zone=env_str("GTFS_DEFAULT_TIMEZONE")
            or DEFAULT_FEED_TIME_ZONE,
            bin_size_m=env_float("STOP_INDEX_BIN_M", DEFAULT_BIN_SIZE_M),
            walk_speed_mps=env_float("WALK_SPEED_MPS", DEFAULT_WALK_SPEED_MPS),
            transfer_penalty_s=int(
                env_float("TRANSFER_PENALTY_S", DEFAULT_TRANSFER_PENALTY_S)
            ),
        )
