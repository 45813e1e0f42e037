from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from bikeradar.config.models import (
    AppConfig,
    AppSettings,
    CityBikesSettings,
    LoggingSettings,
    SearchSettings,
    WebSettings,
)


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_path(value: str, *, base_dir: Path) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base_dir / candidate)


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    # Unrecognized values do not override the file config.
    return None


def load_config(path: Optional[str | Path] = None, *, base_dir: Optional[Path] = None) -> AppConfig:
    """
    Load typed application config from JSON.

    - Path resolution is relative to `base_dir` (defaults to current working directory).
    - `.env` is loaded first so env overrides can live there during development.
    - Env overrides: BIKERADAR_BASE_URL, BIKERADAR_LOG_LEVEL, BIKERADAR_DEDUPE_CITIES.
    """

    load_dotenv()

    config_path = Path(path or os.getenv("BIKERADAR_CONFIG_PATH", "config/default.json")).resolve()
    base_dir = (base_dir or Path.cwd()).resolve()

    raw = json.loads(config_path.read_text(encoding="utf-8"))

    app_raw: Mapping[str, Any] = raw.get("app", {})
    app = AppSettings(name=str(app_raw.get("name", "BikeRadar")))

    cb_raw: Mapping[str, Any] = raw.get("citybikes", {})
    base_url = os.getenv("BIKERADAR_BASE_URL") or cb_raw.get("base_url")
    if not base_url:
        raise ValueError("Config missing required field: citybikes.base_url")
    citybikes = CityBikesSettings(
        base_url=str(base_url),
        timeout_s=float(cb_raw.get("timeout_s", 30.0)),
        max_retries=int(cb_raw.get("max_retries", 0)),
        backoff_factor=float(cb_raw.get("backoff_factor", 0.5)),
        user_agent=str(cb_raw.get("user_agent", "bikeradar/0.1.0")),
        stations_fields_only=bool(cb_raw.get("stations_fields_only", True)),
    )
    if citybikes.timeout_s <= 0:
        raise ValueError(f"citybikes.timeout_s must be > 0 (got {citybikes.timeout_s})")
    if citybikes.max_retries < 0:
        raise ValueError(f"citybikes.max_retries must be >= 0 (got {citybikes.max_retries})")

    search_raw: Mapping[str, Any] = raw.get("search", {})
    dedupe = _env_bool("BIKERADAR_DEDUPE_CITIES")
    search = SearchSettings(
        dedupe_cities=bool(search_raw.get("dedupe_cities", True)) if dedupe is None else dedupe,
        nearest_limit=int(search_raw.get("nearest_limit", 10)),
    )
    if search.nearest_limit < 1:
        raise ValueError(f"search.nearest_limit must be >= 1 (got {search.nearest_limit})")

    logging_raw: Mapping[str, Any] = raw.get("logging", {})
    file_value = logging_raw.get("file")
    log_file = None if not file_value else _as_path(str(file_value), base_dir=base_dir)
    logging_settings = LoggingSettings(
        level=str(os.getenv("BIKERADAR_LOG_LEVEL") or logging_raw.get("level", "INFO")),
        format=str(logging_raw.get("format", "%(asctime)s %(levelname)s %(name)s - %(message)s")),
        file=log_file,
    )

    web_raw: Mapping[str, Any] = raw.get("web", {})
    web = WebSettings(
        host=str(web_raw.get("host", "127.0.0.1")),
        port=int(web_raw.get("port", 8000)),
    )

    return AppConfig(app=app, citybikes=citybikes, search=search, logging=logging_settings, web=web)
