from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    """A boarding location from stops.txt."""

    id: str
    name: str
    location: GeoPoint
