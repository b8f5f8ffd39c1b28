from .reachability import InvalidQuery, ReachabilityError

__all__ = ["InvalidQuery", "ReachabilityError"]
