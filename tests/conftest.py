from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_configure() -> None:
    """
    Keep a `src/` layout while allowing `pytest` to run without requiring an editable install.
    """

    project_root = Path(__file__).resolve().parents[1]
    src_path = project_root / "src"
    sys.path.insert(0, str(src_path))


NETWORKS_PAYLOAD: dict[str, Any] = {
    "networks": [
        {
            "company": ["Clear Channel"],
            "href": "/v2/networks/bikemi",
            "id": "bikemi",
            "location": {"city": "Milano", "country": "IT", "latitude": 45.4642, "longitude": 9.19},
            "name": "BikeMi",
        },
        {
            "company": ["Mobike"],
            "href": "/v2/networks/mobike-malmo",
            "id": "mobike-malmo",
            "location": {"city": "Malmö", "country": "SE", "latitude": 55.605, "longitude": 13.0038},
            "name": "Mobike",
        },
        {
            "company": None,
            "href": "/v2/networks/malmobybike",
            "id": "malmobybike",
            "location": {"city": "Malmö Stad", "country": "SE", "latitude": 55.6, "longitude": 13.0},
            "name": "Malmö by bike",
        },
    ]
}

STATIONS_PAYLOAD: dict[str, Any] = {
    "network": {
        "stations": [
            {
                "empty_slots": 14,
                "extra": {"uid": "1", "slots": 24},
                "free_bikes": 10,
                "id": "87492ed48d78c573f95e99bc7f87ac9d",
                "latitude": 55.60899,
                "longitude": 12.99907,
                "name": "Malmö C Norra",
                "timestamp": "2024-02-25T08:34:42.895000Z",
            },
            {
                "emptySlots": None,
                "freeBikes": 3,
                "id": "b2",
                "latitude": 55.5935,
                "longitude": 13.0076,
                "name": "Triangeln",
                "timestamp": "2024-02-25T08:35:01.101000Z",
            },
        ]
    }
}


class FakeResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")


class FakeSession:
    """Stands in for `requests.Session`: returns queued bodies and records every GET."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.headers: dict[str, str] = {}
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def get(self, url: str, *, params=None, headers=None, timeout=None):  # type: ignore[no-untyped-def]
        self.calls.append((url, params))
        body = self.routes.get(url)
        if body is None:
            return FakeResponse(404, '{"error": "not found"}')
        if isinstance(body, Exception):
            raise body
        if isinstance(body, FakeResponse):
            return body
        if isinstance(body, str):
            return FakeResponse(200, body)
        return FakeResponse(200, json.dumps(body))

    def close(self) -> None:
        self.closed = True


BASE_URL = "http://api.citybik.es/v2"


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession(
        {
            f"{BASE_URL}/networks": NETWORKS_PAYLOAD,
            f"{BASE_URL}/networks/mobike-malmo": STATIONS_PAYLOAD,
        }
    )


@pytest.fixture
def client(fake_session: FakeSession):  # type: ignore[no-untyped-def]
    from bikeradar.config.models import CityBikesSettings
    from bikeradar.ingestion.citybikes import CityBikesClient
    from bikeradar.ingestion.http_base import JsonHttpClient

    settings = CityBikesSettings(base_url=BASE_URL)
    http = JsonHttpClient(base_url=settings.base_url, session=fake_session)
    return CityBikesClient(http=http, settings=settings)
