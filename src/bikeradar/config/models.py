from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class AppSettings:
    name: str = "BikeRadar"


@dataclass(frozen=True)
class CityBikesSettings:
    base_url: str = "http://api.citybik.es/v2"
    timeout_s: float = 30.0
    max_retries: int = 0
    backoff_factor: float = 0.5
    user_agent: str = "bikeradar/0.1.0"
    stations_fields_only: bool = True


@dataclass(frozen=True)
class SearchSettings:
    dedupe_cities: bool = True
    nearest_limit: int = 10


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str
    file: Optional[Path] = None


@dataclass(frozen=True)
class WebSettings:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    citybikes: CityBikesSettings
    search: SearchSettings
    logging: LoggingSettings
    web: WebSettings
