from __future__ import annotations

import json

import pytest

from bikeradar.config.loader import load_config


def _write_config(tmp_path, **overrides) -> str:  # type: ignore[no-untyped-def]
    cfg = {
        "app": {"name": "Test"},
        "citybikes": {"base_url": "http://json.base/v2", "timeout_s": 10, "max_retries": 0},
        "search": {"dedupe_cities": True, "nearest_limit": 5},
        "logging": {"level": "INFO", "format": "%(message)s", "file": "logs/app.log"},
        "web": {"host": "127.0.0.1", "port": 8001},
    }
    for section, values in overrides.items():
        cfg[section].update(values)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    for name in ("BIKERADAR_BASE_URL", "BIKERADAR_LOG_LEVEL", "BIKERADAR_DEDUPE_CITIES", "BIKERADAR_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_loads_typed_sections(tmp_path) -> None:  # type: ignore[no-untyped-def]
    cfg = load_config(_write_config(tmp_path), base_dir=tmp_path)
    assert cfg.app.name == "Test"
    assert cfg.citybikes.base_url == "http://json.base/v2"
    assert cfg.citybikes.timeout_s == 10.0
    assert cfg.citybikes.stations_fields_only is True
    assert cfg.search.nearest_limit == 5
    assert cfg.logging.file == tmp_path.resolve() / "logs" / "app.log"
    assert cfg.web.port == 8001


def test_env_overrides_base_url_and_log_level(monkeypatch, tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = _write_config(tmp_path)
    monkeypatch.setenv("BIKERADAR_BASE_URL", "http://env.base/v2")
    monkeypatch.setenv("BIKERADAR_LOG_LEVEL", "DEBUG")

    cfg = load_config(path, base_dir=tmp_path)
    assert cfg.citybikes.base_url == "http://env.base/v2"
    assert cfg.logging.level == "DEBUG"


def test_env_overrides_dedupe(monkeypatch, tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = _write_config(tmp_path)
    monkeypatch.setenv("BIKERADAR_DEDUPE_CITIES", "false")
    assert load_config(path, base_dir=tmp_path).search.dedupe_cities is False


def test_invalid_dedupe_does_not_override(monkeypatch, tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = _write_config(tmp_path, search={"dedupe_cities": False})
    monkeypatch.setenv("BIKERADAR_DEDUPE_CITIES", "maybe")
    assert load_config(path, base_dir=tmp_path).search.dedupe_cities is False


def test_config_path_from_env(monkeypatch, tmp_path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("BIKERADAR_CONFIG_PATH", _write_config(tmp_path))
    assert load_config(base_dir=tmp_path).app.name == "Test"


@pytest.mark.parametrize(
    "overrides",
    [
        {"citybikes": {"base_url": ""}},
        {"citybikes": {"timeout_s": 0}},
        {"citybikes": {"max_retries": -1}},
        {"search": {"nearest_limit": 0}},
    ],
)
def test_invalid_values_raise(tmp_path, overrides) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, **overrides), base_dir=tmp_path)


def test_repository_default_config_loads() -> None:
    from pathlib import Path

    default = Path(__file__).resolve().parents[1] / "config" / "default.json"
    cfg = load_config(default)
    assert cfg.citybikes.base_url == "http://api.citybik.es/v2"
    assert cfg.citybikes.max_retries == 0
