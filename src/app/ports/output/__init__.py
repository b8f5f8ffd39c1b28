from .gtfs_archive_provider import IGtfsArchiveProvider
from .gtfs_repository import IGtfsRepository

__all__ = [
    "IGtfsArchiveProvider",
    "IGtfsRepository",
]
