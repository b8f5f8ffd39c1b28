class ReachabilityError(Exception):
    """Base exception for reachability computation failures."""


class InvalidQuery(ReachabilityError, ValueError):
    """Raised when request parameters cannot be turned into a query."""
