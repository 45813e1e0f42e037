from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from bikeradar.schemas.core import Network, Station
from bikeradar.utils.geo import haversine_m


@dataclass(frozen=True)
class MapRegion:
    center_lat: float
    center_lon: float
    lat_delta: float
    lon_delta: float


def map_region(network: Network, *, span_deg: float = 0.1) -> Optional[MapRegion]:
    # Networks without a location have nothing to centre on; callers fall back to fitting the stations.
    if network.location is None:
        return None
    return MapRegion(
        center_lat=network.location.latitude,
        center_lon=network.location.longitude,
        lat_delta=span_deg,
        lon_delta=span_deg,
    )


def nearest_stations(
    stations: Iterable[Station],
    lat: float,
    lon: float,
    *,
    limit: Optional[int] = None,
) -> list[tuple[Station, float]]:
    """
    Stations ordered by straight-line distance (meters) from `(lat, lon)`.

    Ties keep the input order. `limit=None` returns every station.
    """

    ranked = sorted(
        ((s, haversine_m(lat, lon, s.latitude, s.longitude)) for s in stations),
        key=lambda pair: pair[1],
    )
    if limit is not None:
        ranked = ranked[: max(int(limit), 0)]
    return ranked
