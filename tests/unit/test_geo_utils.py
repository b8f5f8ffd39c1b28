from __future__ import annotations

import math

import pytest

from src.domain.algorithms.geo_utils import (
    MERCATOR_RADIUS_M,
    mercator_project_m,
    mercator_unproject,
)


def test_projection_origin_is_zero() -> None:
    assert mercator_project_m(0.0, 0.0) == pytest.approx((0.0, 0.0), abs=1e-9)


def test_one_degree_of_longitude_at_equator() -> None:
    x, _ = mercator_project_m(0.0, 1.0)
    assert x == pytest.approx(MERCATOR_RADIUS_M * math.pi / 180.0)
    assert 111_000.0 < x < 111_500.0


def test_latitude_is_clamped_near_the_poles() -> None:
    _, y85 = mercator_project_m(85.0, 0.0)
    _, y89 = mercator_project_m(89.9, 0.0)
    _, y_south = mercator_project_m(-90.0, 0.0)

    assert y89 == y85
    assert y_south == pytest.approx(-y85)
    assert math.isfinite(y85)


def test_unproject_inverts_projection() -> None:
    x, y = mercator_project_m(-27.4698, 153.0251)
    lat, lon = mercator_unproject(x, y)
    assert lat == pytest.approx(-27.4698)
    assert lon == pytest.approx(153.0251)
