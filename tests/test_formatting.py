from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from bikeradar.reporting.formatting import (
    INVALID_TIMESTAMP,
    availability_label,
    format_distance,
    format_last_updated,
    parse_timestamp,
)
from bikeradar.schemas.core import Location, Network, Station
from bikeradar.search.nearby import map_region, nearest_stations
from bikeradar.utils.geo import haversine_m


def test_last_updated_shows_time_only_for_today() -> None:
    now = datetime(2024, 2, 25, 12, 0, tzinfo=timezone.utc)
    assert format_last_updated("2024-02-25T08:34:42.895000Z", now=now) == "08:34"


def test_last_updated_shows_short_date_for_other_days() -> None:
    now = datetime(2024, 2, 26, 12, 0, tzinfo=timezone.utc)
    assert format_last_updated("2024-02-25T08:34:42.895000Z", now=now) == "25/02/2024, 08:34"


def test_last_updated_converts_to_requested_zone() -> None:
    cet = timezone(timedelta(hours=1))
    now = datetime(2024, 2, 25, 23, 0, tzinfo=cet)
    assert format_last_updated("2024-02-25T08:34:42.895000Z", now=now, tz=cet) == "09:34"


@pytest.mark.parametrize("value", ["", "yesterday", "2024-13-45T99:00:00Z"])
def test_last_updated_invalid_timestamp(value: str) -> None:
    assert format_last_updated(value) == INVALID_TIMESTAMP


def test_parse_timestamp_reads_naive_as_utc() -> None:
    dt = parse_timestamp("2024-02-25T08:34:42")
    assert dt is not None
    assert dt.tzinfo == timezone.utc


@pytest.mark.parametrize(
    ("meters", "expected"),
    [(0, "0 m"), (850, "850 m"), (850.25, "850.2 m"), (1000, "1 km"), (1234, "1.2 km"), (15500, "15.5 km")],
)
def test_format_distance(meters: float, expected: str) -> None:
    assert format_distance(meters) == expected


def test_format_distance_rejects_negative() -> None:
    assert format_distance(-1) is None
    assert format_distance(None) is None


def test_availability_label() -> None:
    assert availability_label(10, 14) == "Free bikes: 10 | Empty slots: 14"
    assert availability_label(3, None) == "Free bikes: 3 | Empty slots: ?"


def test_haversine_known_distance() -> None:
    # One degree of latitude is ~111.2 km.
    assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)
    assert haversine_m(55.6, 13.0, 55.6, 13.0) == 0.0


def test_nearest_stations_orders_by_distance() -> None:
    far = Station("far", None, 1, 1, 55.70, 13.20, "t")
    near = Station("near", None, 1, 1, 55.61, 13.00, "t")
    mid = Station("mid", None, 1, 1, 55.65, 13.05, "t")
    ranked = nearest_stations([far, near, mid], 55.60, 13.00)
    assert [s.station_id for s, _ in ranked] == ["near", "mid", "far"]
    assert [s.station_id for s, _ in nearest_stations([far, near, mid], 55.60, 13.00, limit=2)] == ["near", "mid"]


def test_map_region() -> None:
    network = Network("n", location=Location(latitude=55.6, longitude=13.0, city="Malmö", country="SE"))
    region = map_region(network)
    assert region is not None
    assert (region.center_lat, region.center_lon, region.lat_delta) == (55.6, 13.0, 0.1)
    assert map_region(Network("bare")) is None
