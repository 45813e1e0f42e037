from __future__ import annotations

# `asdict` turns the map region dataclass into response model kwargs.
from dataclasses import asdict
# `Optional[...]` marks query parameters the server fills from config defaults.
from typing import NoReturn, Optional

# FastAPI primitives:
# - `APIRouter` groups endpoints so the app factory can include them cleanly.
# - `Depends` injects the service per request (no global variables needed).
# - `HTTPException` converts fetch errors into proper HTTP status codes + JSON error payloads.
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from bikeradar.api.schemas import (
    AppConfigOut,
    CitiesOut,
    FetchStateOut,
    LocationOut,
    MapRegionOut,
    NetworkOut,
    StationOut,
    StationsResponseOut,
    StatusOut,
)
from bikeradar.config.models import AppConfig
from bikeradar.ingestion.http_base import FetchError, InvalidURLError, RequestError
from bikeradar.reporting.formatting import availability_label, format_distance, format_last_updated
from bikeradar.schemas.core import Network
from bikeradar.search.nearby import map_region, nearest_stations
# Dataflow: HTTP request -> route handler -> LocationsDataService -> CityBikesClient -> dataclasses -> Pydantic -> JSON.
from bikeradar.service.locations import LocationsDataService


router = APIRouter()


def get_service(request: Request) -> LocationsDataService:
    return request.app.state.locations_service  # type: ignore[attr-defined]


def get_config(request: Request) -> AppConfig:
    return request.app.state.config  # type: ignore[attr-defined]


def _raise_http(exc: FetchError) -> NoReturn:
    if isinstance(exc, InvalidURLError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, RequestError) and exc.status_code == 404:
        raise HTTPException(status_code=404, detail="Unknown network") from exc
    # Upstream problems (transport, invalid payloads) are a bad gateway from the caller's point of view.
    raise HTTPException(status_code=502, detail=str(exc)) from exc


def _network_out(network: Network) -> NetworkOut:
    loc = network.location
    return NetworkOut(
        id=network.network_id,
        name=network.name,
        location=None
        if loc is None
        else LocationOut(latitude=loc.latitude, longitude=loc.longitude, city=loc.city, country=loc.country),
        company=list(network.company),
        href=network.href,
    )


def _load_networks(service: LocationsDataService, *, refresh: bool = False) -> list[Network]:
    try:
        return service.fetch_networks() if refresh else service.ensure_networks()
    except FetchError as exc:
        _raise_http(exc)


@router.get("/config", response_model=AppConfigOut)
def read_config(config: AppConfig = Depends(get_config)) -> AppConfigOut:
    return AppConfigOut(
        app_name=config.app.name,
        citybikes={
            "base_url": config.citybikes.base_url,
            "stations_fields_only": config.citybikes.stations_fields_only,
        },
        search={
            "dedupe_cities": config.search.dedupe_cities,
            "nearest_limit": config.search.nearest_limit,
        },
    )


@router.get("/status", response_model=StatusOut)
def read_status(service: LocationsDataService = Depends(get_service)) -> StatusOut:
    # Failure is reported explicitly here instead of leaving clients in a perpetual "loading" state.
    return StatusOut(
        networks=FetchStateOut(
            status=service.networks_status.value.value,
            count=len(service.networks.value),
            error=None if service.networks_error is None else str(service.networks_error),
        ),
        stations=FetchStateOut(
            status=service.stations_status.value.value,
            count=len(service.stations.value),
            error=None if service.stations_error is None else str(service.stations_error),
        ),
        stations_network_id=service.stations_network_id,
    )


@router.get("/networks", response_model=list[NetworkOut])
def list_networks(
    refresh: bool = False,
    service: LocationsDataService = Depends(get_service),
) -> list[NetworkOut]:
    return [_network_out(n) for n in _load_networks(service, refresh=refresh)]


@router.get("/cities", response_model=CitiesOut)
def list_cities(
    q: str = Query("", description="Case-insensitive substring of the city name."),
    service: LocationsDataService = Depends(get_service),
) -> CitiesOut:
    _load_networks(service)
    return CitiesOut(query=q, items=service.cities_matching(q))


# Declared before `/networks/{network_id}` so "in" is not captured as an id.
@router.get("/networks/in", response_model=list[NetworkOut])
def list_networks_in_city(
    city: str = Query(..., min_length=1),
    service: LocationsDataService = Depends(get_service),
) -> list[NetworkOut]:
    _load_networks(service)
    return [_network_out(n) for n in service.networks_in(city)]


@router.get("/networks/{network_id}", response_model=NetworkOut)
def read_network(network_id: str, service: LocationsDataService = Depends(get_service)) -> NetworkOut:
    _load_networks(service)
    network = service.get_network(network_id)
    if network is None:
        raise HTTPException(status_code=404, detail=f"Unknown network: {network_id}")
    return _network_out(network)


@router.get("/networks/{network_id}/stations", response_model=StationsResponseOut)
def list_network_stations(
    network_id: str,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    limit: Optional[int] = Query(None, ge=1),
    service: LocationsDataService = Depends(get_service),
    config: AppConfig = Depends(get_config),
) -> StationsResponseOut:
    if (lat is None) != (lon is None):
        raise HTTPException(status_code=422, detail="lat and lon must be given together")

    try:
        stations = service.fetch_stations(network_id)
    except FetchError as exc:
        _raise_http(exc)

    if lat is not None and lon is not None:
        # Rank this request's own list; the shared one may already belong to another network.
        ranked = nearest_stations(stations, lat, lon, limit=limit or config.search.nearest_limit)
    else:
        ranked = [(s, None) for s in (stations if limit is None else stations[:limit])]

    # Region comes from the directory when it is loaded; the detail response may omit the location.
    network = service.get_network(network_id)
    region = None if network is None else map_region(network)

    return StationsResponseOut(
        network_id=network_id,
        region=None if region is None else MapRegionOut(**asdict(region)),
        items=[
            StationOut(
                id=s.station_id,
                name=s.name,
                free_bikes=s.free_bikes,
                empty_slots=s.empty_slots,
                lat=s.latitude,
                lon=s.longitude,
                timestamp=s.timestamp,
                last_updated=format_last_updated(s.timestamp),
                availability=availability_label(s.free_bikes, s.empty_slots),
                distance_m=d,
                distance=format_distance(d),
            )
            for s, d in ranked
        ],
    )
