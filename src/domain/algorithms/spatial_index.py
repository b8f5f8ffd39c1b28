from __future__ import annotations

import heapq
import math
from typing import Iterable, Iterator

from src.domain.models.stop import Stop

from .geo_utils import mercator_project_m

DEFAULT_BIN_SIZE_M = 800.0
NEAREST_MAX_RINGS = 24
NEAREST_K_MAX_RINGS = 48
MAX_K = 32

_BinKey = tuple[int, int]
_Point = tuple[float, float, str]  # (x, y, stop_id)


class SpatialStopIndex:
    """Uniform grid over Web-Mercator projected stops.

    The index is built once per stop-table version and never mutated; a new
    stop table means a new index.
    """

    __slots__ = ("_bin_size_m", "_bins", "_count")

    def __init__(
        self,
        points: Iterable[tuple[str, float, float]],
        *,
        bin_size_m: float = DEFAULT_BIN_SIZE_M,
    ) -> None:
        if bin_size_m <= 0:
            raise ValueError(f"bin_size_m must be positive, got {bin_size_m}")
        self._bin_size_m = float(bin_size_m)

        bins: dict[_BinKey, list[_Point]] = {}
        count = 0
        for stop_id, lat, lon in points:
            x, y = mercator_project_m(lat, lon)
            bins.setdefault(self._bin_of(x, y), []).append((x, y, stop_id))
            count += 1

        self._bins: dict[_BinKey, tuple[_Point, ...]] = {
            key: tuple(pts) for key, pts in bins.items()
        }
        self._count = count

    @classmethod
    def from_stops(
        cls, stops: Iterable[Stop], *, bin_size_m: float = DEFAULT_BIN_SIZE_M
    ) -> "SpatialStopIndex":
        return cls(
            ((s.id, s.location.lat, s.location.lon) for s in stops),
            bin_size_m=bin_size_m,
        )

    @property
    def bin_size_m(self) -> float:
        return self._bin_size_m

    def __len__(self) -> int:
        return self._count

    def _bin_of(self, x: float, y: float) -> _BinKey:
        return (
            math.floor(x / self._bin_size_m),
            math.floor(y / self._bin_size_m),
        )

    def _square(self, center: _BinKey, r: int) -> Iterator[tuple[_Point, ...]]:
        ix0, iy0 = center
        for dx in range(-r, r + 1):
            for dy in range(-r, r + 1):
                bucket = self._bins.get((ix0 + dx, iy0 + dy))
                if bucket:
                    yield bucket

    def _ring(self, center: _BinKey, r: int) -> Iterator[tuple[_Point, ...]]:
        """Buckets at Chebyshev distance exactly r from `center`."""

        if r == 0:
            bucket = self._bins.get(center)
            if bucket:
                yield bucket
            return

        ix0, iy0 = center
        for dx in range(-r, r + 1):
            # Top and bottom rows cover the full width; side columns skip corners.
            dys = range(-r, r + 1) if abs(dx) == r else (-r, r)
            for dy in dys:
                bucket = self._bins.get((ix0 + dx, iy0 + dy))
                if bucket:
                    yield bucket

    def _ring_lower_bound_m(self, r: int) -> float:
        # Any point in ring r is at least r-1 full bins away along one axis.
        return max(0, r - 1) * self._bin_size_m

    def within_radius(
        self, lat: float, lon: float, radius_m: float
    ) -> list[tuple[str, float]]:
        """Stops within `radius_m` planar meters, nearest first."""

        if not self._bins:
            return []
        x, y = mercator_project_m(lat, lon)
        r_bins = max(0, math.ceil(radius_m / self._bin_size_m))
        r2 = radius_m * radius_m

        out: list[tuple[str, float]] = []
        for bucket in self._square(self._bin_of(x, y), r_bins):
            for px, py, stop_id in bucket:
                sq = (px - x) ** 2 + (py - y) ** 2
                if sq <= r2:
                    out.append((stop_id, math.sqrt(sq)))

        out.sort(key=lambda item: item[1])
        return out

    def count_within_radius(self, lat: float, lon: float, radius_m: float) -> int:
        if not self._bins:
            return 0
        x, y = mercator_project_m(lat, lon)
        r_bins = max(0, math.ceil(radius_m / self._bin_size_m))
        r2 = radius_m * radius_m

        count = 0
        for bucket in self._square(self._bin_of(x, y), r_bins):
            for px, py, _ in bucket:
                if (px - x) ** 2 + (py - y) ** 2 <= r2:
                    count += 1
        return count

    def nearest_distance(self, lat: float, lon: float) -> float | None:
        """Planar distance to the nearest stop, or None if none is near enough.

        Rings are scanned outwards until the next ring cannot beat the best
        distance; after NEAREST_MAX_RINGS empty rings the area counts as empty.
        """

        if not self._bins:
            return None
        x, y = mercator_project_m(lat, lon)
        center = self._bin_of(x, y)

        best_sq = math.inf
        for r in range(NEAREST_MAX_RINGS + 1):
            bound = self._ring_lower_bound_m(r)
            if bound * bound > best_sq:
                break
            for bucket in self._ring(center, r):
                for px, py, _ in bucket:
                    sq = (px - x) ** 2 + (py - y) ** 2
                    if sq < best_sq:
                        best_sq = sq

        if math.isinf(best_sq):
            return None
        return math.sqrt(best_sq)

    def nearest_k(self, lat: float, lon: float, k: int) -> list[tuple[str, float]]:
        """Up to k nearest stops (k clamped to 1..32), nearest first."""

        if not self._bins:
            return []
        kk = max(1, min(MAX_K, int(k)))
        x, y = mercator_project_m(lat, lon)
        center = self._bin_of(x, y)

        # Max-heap of the current best candidates, keyed on negated squared distance.
        heap: list[tuple[float, str]] = []
        for r in range(NEAREST_K_MAX_RINGS + 1):
            bound = self._ring_lower_bound_m(r)
            if len(heap) >= kk and bound * bound > -heap[0][0]:
                break
            for bucket in self._ring(center, r):
                for px, py, stop_id in bucket:
                    sq = (px - x) ** 2 + (py - y) ** 2
                    if len(heap) < kk:
                        heapq.heappush(heap, (-sq, stop_id))
                    elif sq < -heap[0][0]:
                        heapq.heapreplace(heap, (-sq, stop_id))

        best = sorted((-neg_sq, stop_id) for neg_sq, stop_id in heap)
        return [(stop_id, math.sqrt(sq)) for sq, stop_id in best]
