from __future__ import annotations

# `logging` is used to record decode issues without hiding them behind silent failures.
import logging
# `re` drives the camelCase -> snake_case key folding applied before validation.
import re
# Typing helpers keep our parsing rules explicit while we still consume raw JSON dicts.
from typing import Any, Mapping, Optional
# Network ids are embedded into a path segment; `quote` percent-encodes them.
from urllib.parse import quote

# Pydantic validates the two upstream envelopes; wrong types surface as `ValidationError`.
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

# Typed settings tell this client which endpoint to call and how to shape the station request.
from bikeradar.config.models import CityBikesSettings
# `JsonHttpClient` handles sessions, timeouts and HTTP errors so this module stays focused on decoding.
from bikeradar.ingestion.http_base import (
    DecodingError,
    InvalidDataError,
    InvalidURLError,
    JsonHttpClient,
)
# Canonical dataclasses every consumer (service, API, reporting) works with.
from bikeradar.schemas.core import Location, Network, Station


logger = logging.getLogger(__name__)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Values under these keys are producer metadata and are passed through untouched.
_VERBATIM_KEYS = frozenset({"extra"})


def fold_key(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def fold_keys(value: Any) -> Any:
    """
    Recursively fold object keys to lower_snake_case (`emptySlots` -> `empty_slots`).

    Upstream responses are not consistent about the word separator; folding first means the
    record models below only need to know one spelling.
    """

    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for k, v in value.items():
            folded = fold_key(str(k))
            out[folded] = v if folded in _VERBATIM_KEYS else fold_keys(v)
        return out
    if isinstance(value, list):
        return [fold_keys(v) for v in value]
    return value


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class LocationRecord(_Record):
    latitude: float
    longitude: float
    city: str
    country: str


class StationRecord(_Record):
    id: str
    name: Optional[str] = None
    free_bikes: int
    empty_slots: Optional[int] = None
    latitude: float
    longitude: float
    timestamp: str
    extra: Optional[dict[str, Any]] = None


class _NetworkFields(_Record):
    name: Optional[str] = None
    location: Optional[LocationRecord] = None
    company: list[str] = []
    href: Optional[str] = None

    @field_validator("company", mode="before")
    @classmethod
    def _company_as_list(cls, value: Any) -> Any:
        # The directory returns a list, a single string, or null depending on the operator.
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class NetworkRecord(_NetworkFields):
    id: str


class NetworkDetailRecord(_NetworkFields):
    # With `?fields=stations` the detail endpoint only returns the station list.
    id: Optional[str] = None
    stations: list[StationRecord]


class NetworksEnvelope(_Record):
    networks: list[NetworkRecord]


class NetworkDetailEnvelope(_Record):
    network: NetworkDetailRecord


def _to_location(record: Optional[LocationRecord]) -> Optional[Location]:
    if record is None:
        return None
    return Location(
        latitude=record.latitude,
        longitude=record.longitude,
        city=record.city,
        country=record.country,
    )


def _to_station(record: StationRecord) -> Station:
    return Station(
        station_id=record.id,
        name=record.name,
        free_bikes=record.free_bikes,
        empty_slots=record.empty_slots,
        latitude=record.latitude,
        longitude=record.longitude,
        timestamp=record.timestamp,
        extra=record.extra,
    )


def decode_networks(payload: Any) -> list[Network]:
    """
    Decode the directory response `{"networks": [...]}`.

    - Missing `networks` key (or a non-object body) -> `InvalidDataError`.
    - Any record-level mismatch (missing id, partial location, wrong types) -> `DecodingError`.
    """

    if not isinstance(payload, Mapping) or "networks" not in payload:
        raise InvalidDataError("Directory response is missing the `networks` key")

    try:
        envelope = NetworksEnvelope.model_validate(fold_keys(payload))
    except ValidationError as exc:
        raise DecodingError(f"Directory response does not match the network schema: {exc}", cause=exc) from exc

    return [
        Network(
            network_id=rec.id,
            name=rec.name,
            location=_to_location(rec.location),
            company=tuple(rec.company),
            href=rec.href,
        )
        for rec in envelope.networks
    ]


def decode_network_detail(payload: Any, *, network_id: str) -> Network:
    """
    Decode the per-network response `{"network": {..., "stations": [...]}}`.

    `network_id` is the id the caller asked for; it fills in the id when the response was
    restricted to the stations field.
    """

    network_raw = payload.get("network") if isinstance(payload, Mapping) else None
    if not isinstance(network_raw, Mapping):
        raise InvalidDataError(f"Network response for {network_id!r} is missing the `network` object")
    stations_raw = network_raw.get("stations")
    if not isinstance(stations_raw, list):
        raise InvalidDataError(
            f"Network response for {network_id!r} has no station list (got {type(stations_raw).__name__})"
        )

    try:
        envelope = NetworkDetailEnvelope.model_validate(fold_keys(payload))
    except ValidationError as exc:
        raise DecodingError(f"Network response for {network_id!r} does not match the station schema: {exc}", cause=exc) from exc

    rec = envelope.network
    return Network(
        network_id=rec.id or network_id,
        name=rec.name,
        location=_to_location(rec.location),
        company=tuple(rec.company),
        href=rec.href,
        stations=tuple(_to_station(s) for s in rec.stations),
    )


# `CityBikesClient` wraps `JsonHttpClient` with the two directory endpoints and their decoding rules.
class CityBikesClient:
    def __init__(self, *, http: JsonHttpClient, settings: CityBikesSettings) -> None:
        self._http = http
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: CityBikesSettings) -> "CityBikesClient":
        http = JsonHttpClient(
            base_url=settings.base_url,
            timeout_s=settings.timeout_s,
            max_retries=settings.max_retries,
            backoff_factor=settings.backoff_factor,
            user_agent=settings.user_agent,
        )
        return cls(http=http, settings=settings)

    def networks_url(self) -> str:
        return self._http.build_url("networks")

    def network_url(self, network_id: str) -> str:
        # The id is percent-encoded so ids with `/`, `?` or spaces cannot reshape the request.
        # Dot-only ids are refused: `quote` leaves dots alone and they would resolve as path segments.
        if not isinstance(network_id, str) or not network_id.strip() or not network_id.strip(" ."):
            raise InvalidURLError(f"Cannot build a network URL from id {network_id!r}")
        return self._http.build_url(f"networks/{quote(network_id, safe='')}")

    def list_networks(self) -> list[Network]:
        data = self._http.get_json(self.networks_url())
        networks = decode_networks(data)
        logger.info("Fetched %s networks", len(networks))
        return networks

    def get_network(self, network_id: str, *, stations_only: Optional[bool] = None) -> Network:
        url = self.network_url(network_id)
        only = self._settings.stations_fields_only if stations_only is None else stations_only
        params = {"fields": "stations"} if only else None
        data = self._http.get_json(url, params=params)
        network = decode_network_detail(data, network_id=network_id)
        logger.info("Fetched %s stations for network %s", len(network.stations or ()), network_id)
        return network

    def list_stations(self, network_id: str) -> list[Station]:
        return list(self.get_network(network_id).stations or ())

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CityBikesClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
