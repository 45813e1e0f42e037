from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

# `argparse` provides a stable CLI interface (no interactive prompts).
import argparse
from concurrent.futures import TimeoutError as FutureTimeoutError
import logging

from bikeradar.config.loader import load_config
from bikeradar.ingestion.citybikes import CityBikesClient
from bikeradar.ingestion.http_base import FetchError
from bikeradar.reporting.frames import stations_frame
from bikeradar.service.locations import LocationsDataService
from bikeradar.service.tasks import FetchScope
from bikeradar.utils.logging import configure_logging


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Export live station availability of one network to CSV.")
    parser.add_argument("network_id", help="Network id, e.g. `bikemi` or `mobike-malmo`.")
    parser.add_argument("--config", default=None, help="Config JSON path.")
    parser.add_argument("--out", default=None, help="CSV output path (default: stdout).")
    parser.add_argument("--near", nargs=2, type=float, metavar=("LAT", "LON"), help="Sort by distance from a point.")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for the station fetch.")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging)

    service = LocationsDataService(CityBikesClient.from_settings(config.citybikes), search=config.search)
    # The scope is cancelled on exit, so an interrupted run never publishes a late response.
    with FetchScope(name="export") as scope:
        try:
            stations = scope.fetch_stations(service, args.network_id).result(timeout=args.timeout)
        except FetchError as exc:
            logger.error("Could not fetch stations for %s: %s", args.network_id, exc)
            return 1
        except FutureTimeoutError:
            logger.error("Timed out after %ss waiting for stations of %s", args.timeout, args.network_id)
            return 1
        finally:
            service.close()

    df = stations_frame(stations, origin=None if args.near is None else (args.near[0], args.near[1]))
    if args.out is None:
        df.to_csv(sys.stdout, index=False)
    else:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out, index=False)
        print(f"Wrote {out} ({len(df)} stations)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
