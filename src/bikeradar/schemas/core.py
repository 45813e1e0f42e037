from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    city: str
    country: str


@dataclass(frozen=True, eq=False)
class Station:
    """
    A docking point with live counts.

    Identity is the station id only: two snapshots of the same station compare equal even when
    their counts differ, so consumers can diff refreshed lists without churn.
    """

    station_id: str
    name: Optional[str]
    free_bikes: int
    empty_slots: Optional[int]
    latitude: float
    longitude: float
    timestamp: str  # producer-supplied ISO8601, kept verbatim
    extra: Optional[Mapping[str, Any]] = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Station):
            return NotImplemented
        return self.station_id == other.station_id

    def __hash__(self) -> int:
        return hash(self.station_id)


@dataclass(frozen=True)
class Network:
    network_id: str
    name: Optional[str] = None
    location: Optional[Location] = None
    company: tuple[str, ...] = ()
    href: Optional[str] = None
    stations: Optional[tuple[Station, ...]] = None

    @property
    def city(self) -> Optional[str]:
        return None if self.location is None else self.location.city
