from .access import AccessCell, AccessGrid, NearbyStop, NearestStops
from .geo import GeoPoint
from .gtfs import (
    CalendarEntry,
    ExceptionKind,
    GtfsFeed,
    ServiceException,
    StopTimeEntry,
    Weekday,
)
from .reachability import (
    LocalDateParts,
    ReachabilityMeta,
    ReachabilityQuery,
    ReachabilityResult,
)
from .stop import Stop

__all__ = [
    "AccessCell",
    "AccessGrid",
    "CalendarEntry",
    "ExceptionKind",
    "GeoPoint",
    "GtfsFeed",
    "LocalDateParts",
    "NearbyStop",
    "NearestStops",
    "ReachabilityMeta",
    "ReachabilityQuery",
    "ReachabilityResult",
    "ServiceException",
    "Stop",
    "StopTimeEntry",
    "Weekday",
]
