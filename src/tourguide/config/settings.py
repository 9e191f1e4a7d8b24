# src/tourguide/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/tourguide/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `TOURGUIDE_LOG_LEVEL`, `TOURGUIDE_TRIP_PRICER_API_KEY`)
- an external YAML file via `TOURGUIDE_CONFIG_PATH`

Design rule:
- Tuning knobs (radii, pool sizes, intervals) live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from tourguide.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `tourguide.config`."""
    text = resources.files("tourguide.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "TourGuide"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"
    test_mode: bool = True


class ProximitySettings(BaseModel):
    reward_radius_miles: float = Field(10, gt=0)
    nearby_radius_miles: float = Field(200, gt=0)


class WorkerSettings(BaseModel):
    tracking_pool_size: int = Field(32, ge=1)
    reward_pool_size: int = Field(64, ge=1)


class NearbySettings(BaseModel):
    result_limit: int = Field(5, ge=1)


class TrackerSettings(BaseModel):
    interval_seconds: float = Field(300, gt=0)


class CatalogSettings(BaseModel):
    path: str | None = None


class InternalUsersSettings(BaseModel):
    count: int = Field(100, ge=0)
    history_size: int = Field(3, ge=0)
    history_days: int = Field(30, ge=1)


class LocationIngestionSettings(BaseModel):
    base_url: str = "http://localhost:8081/location"


class PointsIngestionSettings(BaseModel):
    base_url: str = "http://localhost:8082/points"


class PricerIngestionSettings(BaseModel):
    base_url: str = "http://localhost:8083/offers"
    api_key: str = "test-server-api-key"


class IngestionSettings(BaseModel):
    mode: Literal["simulated", "http"] = "simulated"
    max_requests_per_minute: float | None = Field(default=None, gt=0)
    location: LocationIngestionSettings = Field(default_factory=LocationIngestionSettings)
    points: PointsIngestionSettings = Field(default_factory=PointsIngestionSettings)
    pricer: PricerIngestionSettings = Field(default_factory=PricerIngestionSettings)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    proximity: ProximitySettings = Field(default_factory=ProximitySettings)
    workers: WorkerSettings = Field(default_factory=WorkerSettings)
    nearby: NearbySettings = Field(default_factory=NearbySettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    internal_users: InternalUsersSettings = Field(default_factory=InternalUsersSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("TOURGUIDE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    user_count = os.getenv("TOURGUIDE_INTERNAL_USER_COUNT")
    if user_count:
        data.setdefault("internal_users", {})["count"] = int(user_count)

    mode = os.getenv("TOURGUIDE_INGESTION_MODE")
    if mode:
        data.setdefault("ingestion", {})["mode"] = mode

    api_key = os.getenv("TOURGUIDE_TRIP_PRICER_API_KEY")
    if api_key:
        data.setdefault("ingestion", {}).setdefault("pricer", {})["api_key"] = api_key

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("TOURGUIDE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
