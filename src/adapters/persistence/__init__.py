from .archive_gtfs_repository import ArchiveGtfsRepository
from .local_gtfs_repository import LocalGtfsRepository

__all__ = [
    "ArchiveGtfsRepository",
    "LocalGtfsRepository",
]
