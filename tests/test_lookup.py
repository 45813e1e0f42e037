from __future__ import annotations

from bikeradar.schemas.core import Location, Network, Station
from bikeradar.search.lookup import cities_matching, find_network, networks_in


def _network(network_id: str, city: str | None) -> Network:
    location = None if city is None else Location(latitude=0.0, longitude=0.0, city=city, country="XX")
    return Network(network_id=network_id, name=network_id.title(), location=location)


NETWORKS = [
    _network("bikemi", "Milano"),
    _network("mobike-malmo", "Malmö"),
    _network("malmobybike", "Malmö Stad"),
    _network("nowhere", None),
]


def test_networks_in_is_exact_and_case_insensitive() -> None:
    for query in ("Malmö", "malmö", "MALMÖ"):
        assert [n.network_id for n in networks_in(NETWORKS, query)] == ["mobike-malmo"]
    assert networks_in(NETWORKS, "Malm") == []


def test_cities_matching_substring() -> None:
    assert cities_matching(NETWORKS, "mal") == ["Malmö", "Malmö Stad"]
    assert cities_matching(NETWORKS, "mi") == ["Milano"]
    assert cities_matching(NETWORKS, "zzz") == []


def test_cities_matching_empty_query_lists_every_city() -> None:
    assert cities_matching(NETWORKS, "") == ["Milano", "Malmö", "Malmö Stad"]


def test_cities_matching_dedupe_is_explicit() -> None:
    networks = NETWORKS + [_network("second-milano", "Milano"), _network("lower", "milano")]
    assert cities_matching(networks, "mil") == ["Milano"]
    assert cities_matching(networks, "mil", dedupe=False) == ["Milano", "Milano", "milano"]


def test_find_network() -> None:
    assert find_network(NETWORKS, "bikemi") is NETWORKS[0]
    assert find_network(NETWORKS, "missing") is None


def test_station_identity_is_id_only() -> None:
    a = Station("s1", "One", 5, 3, 1.0, 2.0, "2024-02-25T08:34:42.895000Z")
    b = Station("s1", "One (renamed)", 0, 8, 1.0, 2.0, "2024-02-25T09:00:00.000000Z")
    c = Station("s2", "One", 5, 3, 1.0, 2.0, "2024-02-25T08:34:42.895000Z")
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2
