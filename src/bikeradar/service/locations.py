from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from bikeradar.config.models import SearchSettings
from bikeradar.ingestion.citybikes import CityBikesClient
from bikeradar.ingestion.http_base import FetchCancelledError, FetchError
from bikeradar.schemas.core import Network, Station
from bikeradar.search.lookup import cities_matching, find_network, networks_in
from bikeradar.search.nearby import nearest_stations
from bikeradar.service.state import Dispatcher, FetchStatus, Observable

if TYPE_CHECKING:
    from bikeradar.service.tasks import FetchScope


logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Collection:
    """Published data, status and last error of one fetcher; single writer is the fetch completion."""

    def __init__(self, label: str, *, dispatcher: Optional[Dispatcher]) -> None:
        self.label = label
        self.data: Observable[tuple] = Observable((), dispatcher=dispatcher)
        self.status: Observable[FetchStatus] = Observable(FetchStatus.IDLE, dispatcher=dispatcher)
        self.last_error: Optional[FetchError] = None
        self.generation = 0


# `LocationsDataService` owns the network directory and the station list of the selected network.
# Route handlers, scripts and tests read its observables; only its fetch methods write them.
class LocationsDataService:
    def __init__(
        self,
        client: CityBikesClient,
        *,
        search: Optional[SearchSettings] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self._client = client
        self._search = search or SearchSettings()
        self._lock = threading.Lock()
        self._networks = _Collection("networks", dispatcher=dispatcher)
        self._stations = _Collection("stations", dispatcher=dispatcher)
        self._stations_network_id: Optional[str] = None

    @property
    def networks(self) -> Observable[tuple]:
        return self._networks.data

    @property
    def stations(self) -> Observable[tuple]:
        return self._stations.data

    @property
    def networks_status(self) -> Observable[FetchStatus]:
        return self._networks.status

    @property
    def stations_status(self) -> Observable[FetchStatus]:
        return self._stations.status

    @property
    def networks_error(self) -> Optional[FetchError]:
        return self._networks.last_error

    @property
    def stations_error(self) -> Optional[FetchError]:
        return self._stations.last_error

    @property
    def stations_network_id(self) -> Optional[str]:
        # Network the currently published stations belong to.
        return self._stations_network_id

    def _run(
        self,
        coll: _Collection,
        fetch: Callable[[], list[T]],
        *,
        scope: Optional["FetchScope"],
        on_publish: Optional[Callable[[], None]] = None,
    ) -> list[T]:
        if scope is not None and scope.cancelled:
            raise FetchCancelledError(f"Fetch of {coll.label} not started: scope cancelled")

        with self._lock:
            coll.generation += 1
            generation = coll.generation
            previous_status = coll.status.value
        coll.status.publish(FetchStatus.FETCHING)

        try:
            result = fetch()
        except FetchError as exc:
            # Previously published data stays in place; status and error make the failure visible.
            logger.warning("Fetching %s failed: %s", coll.label, exc)
            with self._lock:
                superseded = generation != coll.generation
                if not superseded:
                    coll.last_error = exc
            if not superseded:
                coll.status.publish(FetchStatus.FAILED)
            raise

        if scope is not None and scope.cancelled:
            logger.info("Dropping %s result: scope cancelled", coll.label)
            with self._lock:
                latest = generation == coll.generation
            if latest:
                coll.status.publish(previous_status)
            raise FetchCancelledError(f"Fetch of {coll.label} dropped: scope cancelled")

        with self._lock:
            stale = generation != coll.generation
        if stale:
            # A newer fetch owns the shared state; this caller still gets its own result.
            logger.debug("Not publishing %s result: superseded by a newer fetch", coll.label)
            return result

        coll.last_error = None
        if on_publish is not None:
            on_publish()
        coll.data.publish(tuple(result))
        coll.status.publish(FetchStatus.SUCCEEDED)
        return result

    def fetch_networks(self, *, scope: Optional["FetchScope"] = None) -> list[Network]:
        """
        Fetch the full network directory and publish it, replacing the previous list.

        Raises a `FetchError` subclass on failure; the previous list is kept.
        """

        return self._run(self._networks, self._client.list_networks, scope=scope)

    def fetch_stations(self, network_id: str, *, scope: Optional["FetchScope"] = None) -> list[Station]:
        """
        Fetch the stations of `network_id` and publish them wholesale.

        A fetch superseded by a later `fetch_stations` call still returns its stations to the
        caller but does not publish them, so a slow response never overwrites a newer selection.
        """

        def _select() -> None:
            self._stations_network_id = network_id

        return self._run(
            self._stations,
            lambda: self._client.list_stations(network_id),
            scope=scope,
            on_publish=_select,
        )

    def ensure_networks(self) -> list[Network]:
        # Fetch once per session unless a previous attempt failed or nothing was loaded yet.
        if self.networks_status.value is FetchStatus.SUCCEEDED:
            return list(self.networks.value)
        return self.fetch_networks()

    def cities_matching(self, query: str) -> list[str]:
        return cities_matching(self.networks.value, query, dedupe=self._search.dedupe_cities)

    def networks_in(self, city: str) -> list[Network]:
        return networks_in(self.networks.value, city)

    def get_network(self, network_id: str) -> Optional[Network]:
        return find_network(self.networks.value, network_id)

    def nearest_stations(self, lat: float, lon: float, *, limit: Optional[int] = None) -> list[tuple[Station, float]]:
        return nearest_stations(
            self.stations.value,
            lat,
            lon,
            limit=self._search.nearest_limit if limit is None else limit,
        )

    def close(self) -> None:
        self._client.close()
