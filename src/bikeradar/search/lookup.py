from __future__ import annotations

from typing import Iterable, Optional

from bikeradar.schemas.core import Network


def cities_matching(networks: Iterable[Network], query: str, *, dedupe: bool = True) -> list[str]:
    """
    City names whose casefolded form contains the casefolded `query`.

    Order follows the network list. With `dedupe=True` a city served by several networks is
    listed once (first spelling wins); with `dedupe=False` it is listed once per network.
    Networks without a location are skipped; an empty query matches every city.
    """

    needle = query.casefold()
    out: list[str] = []
    seen: set[str] = set()
    for network in networks:
        city = network.city
        if city is None or needle not in city.casefold():
            continue
        if dedupe:
            key = city.casefold()
            if key in seen:
                continue
            seen.add(key)
        out.append(city)
    return out


def networks_in(networks: Iterable[Network], city: str) -> list[Network]:
    # Exact match after casefolding: "Malmö" does not match "Malmö Stad".
    target = city.casefold()
    return [n for n in networks if n.city is not None and n.city.casefold() == target]


def find_network(networks: Iterable[Network], network_id: str) -> Optional[Network]:
    for network in networks:
        if network.network_id == network_id:
            return network
    return None
