from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CityBikesConfigOut(BaseModel):
    base_url: str
    stations_fields_only: bool


class SearchConfigOut(BaseModel):
    dedupe_cities: bool
    nearest_limit: int


class AppConfigOut(BaseModel):
    app_name: str
    citybikes: CityBikesConfigOut
    search: SearchConfigOut


class FetchStateOut(BaseModel):
    status: str = Field(..., examples=["idle", "fetching", "succeeded", "failed"])
    count: int
    error: Optional[str] = None


class StatusOut(BaseModel):
    networks: FetchStateOut
    stations: FetchStateOut
    stations_network_id: Optional[str] = None


class LocationOut(BaseModel):
    latitude: float
    longitude: float
    city: str
    country: str


class NetworkOut(BaseModel):
    id: str
    name: Optional[str] = None
    location: Optional[LocationOut] = None
    company: list[str] = Field(default_factory=list)
    href: Optional[str] = None


class CitiesOut(BaseModel):
    query: str
    items: list[str] = Field(default_factory=list)


class MapRegionOut(BaseModel):
    center_lat: float
    center_lon: float
    lat_delta: float
    lon_delta: float


class StationOut(BaseModel):
    id: str
    name: Optional[str] = None
    free_bikes: int
    empty_slots: Optional[int] = None
    lat: float
    lon: float
    timestamp: str
    last_updated: str = Field(..., examples=["08:34", "25/02/2024, 08:34", "Invalid Timestamp"])
    availability: str = Field(..., examples=["Free bikes: 10 | Empty slots: 14"])
    distance_m: Optional[float] = None
    distance: Optional[str] = Field(default=None, examples=["850 m", "1.2 km"])


class StationsResponseOut(BaseModel):
    network_id: str
    region: Optional[MapRegionOut] = None
    items: list[StationOut] = Field(default_factory=list)
