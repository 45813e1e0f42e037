from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import argparse
import logging

from bikeradar.config.loader import load_config
from bikeradar.ingestion.citybikes import CityBikesClient
from bikeradar.ingestion.http_base import FetchError
from bikeradar.service.locations import LocationsDataService
from bikeradar.utils.logging import configure_logging


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Find bike-share cities and networks by city name.")
    parser.add_argument("query", help="City name or part of it (case-insensitive).")
    parser.add_argument("--config", default=None, help="Config JSON path.")
    parser.add_argument(
        "--exact",
        action="store_true",
        help="List the networks of the city equal to QUERY instead of matching city names.",
    )
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging)

    service = LocationsDataService(CityBikesClient.from_settings(config.citybikes), search=config.search)
    try:
        service.fetch_networks()
    except FetchError as exc:
        logger.error("Could not load the network directory: %s", exc)
        return 1
    finally:
        service.close()

    if args.exact:
        networks = service.networks_in(args.query)
        if not networks:
            print(f"No networks in {args.query!r}")
        for n in networks:
            print(f"{n.network_id}\t{n.name or '-'}\t{', '.join(n.company) or '-'}")
        return 0

    cities = service.cities_matching(args.query)
    if not cities:
        print(f"No city matches {args.query!r}")
    for city in cities:
        print(city)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
