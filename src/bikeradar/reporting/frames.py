from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from bikeradar.reporting.formatting import format_distance
from bikeradar.schemas.core import Network, Station
from bikeradar.utils.geo import haversine_m


STATION_COLUMNS = [
    "station_id",
    "name",
    "free_bikes",
    "empty_slots",
    "lat",
    "lon",
    "timestamp",
]

NETWORK_COLUMNS = ["network_id", "name", "city", "country", "lat", "lon", "company"]


def stations_frame(
    stations: Iterable[Station],
    *,
    origin: Optional[tuple[float, float]] = None,
) -> pd.DataFrame:
    """
    Tabular view of a station list (one row per station).

    With `origin=(lat, lon)` the frame gains `distance_m` / `distance` columns and is sorted
    nearest-first; otherwise the upstream order is kept.
    """

    rows = [
        {
            "station_id": s.station_id,
            "name": s.name,
            "free_bikes": s.free_bikes,
            "empty_slots": s.empty_slots,
            "lat": s.latitude,
            "lon": s.longitude,
            "timestamp": s.timestamp,
        }
        for s in stations
    ]
    df = pd.DataFrame(rows, columns=STATION_COLUMNS)
    # Nullable ints keep "unknown slots" distinct from 0.
    df["empty_slots"] = df["empty_slots"].astype("Int64")
    if origin is None:
        return df

    lat0, lon0 = origin
    df["distance_m"] = [haversine_m(lat0, lon0, float(a), float(b)) for a, b in zip(df["lat"], df["lon"])]
    df["distance"] = df["distance_m"].map(format_distance)
    return df.sort_values("distance_m", kind="stable").reset_index(drop=True)


def networks_frame(networks: Iterable[Network]) -> pd.DataFrame:
    rows = []
    for n in networks:
        loc = n.location
        rows.append(
            {
                "network_id": n.network_id,
                "name": n.name,
                "city": None if loc is None else loc.city,
                "country": None if loc is None else loc.country,
                "lat": None if loc is None else loc.latitude,
                "lon": None if loc is None else loc.longitude,
                "company": ", ".join(n.company),
            }
        )
    return pd.DataFrame(rows, columns=NETWORK_COLUMNS)
