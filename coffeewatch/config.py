"""Settings and deployment profiles."""

from __future__ import annotations

import dataclasses
import os
import pathlib
from dataclasses import dataclass
from typing import Any

import yaml

PROFILES_PATH = pathlib.Path(__file__).with_name("profiles.yml")
DEFAULT_PROFILE = "default"

POLICY_NAMES = ("strict", "subset", "nonempty-subset")
TIMESTAMP_SOURCES = ("published", "variant")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    base_url: str
    section: str
    cache_key: str = "items-v1"
    policy: str = "nonempty-subset"
    timestamp_source: str = "published"
    store_name: str = "Black & White"
    product_noun: str = "instant coffee"
    emoji: str = "☕️"
    currency_symbol: str = "$"
    title_suffix: str = " - Instant Coffee"
    timezone: str = "UTC"
    webhook_url: str | None = None
    diagnostics_url: str | None = None
    preview_url: str | None = None
    signing_secret: str = "change-me"
    token_max_age: int | None = None
    tile_size: int = 300
    tile_spacing: int = 20
    pixel_ratio: int = 2
    image_format: str = "WEBP"
    database_url: str = "sqlite:///coffeewatch.db"
    schedule_minutes: int = 15
    user_agent: str = "Mozilla/5.0"

    @property
    def products_endpoint(self) -> str:
        return f"{self.collection_url}/products.json"

    @property
    def collection_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/collections/{self.section}"


# Environment variable -> (field, converter)
ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "DISCORD_WEBHOOK_URL": ("webhook_url", str),
    "DISCORD_WEBHOOK_HEARTBEAT_URL": ("diagnostics_url", str),
    "PREVIEW_URL": ("preview_url", str),
    "SIGNING_SECRET": ("signing_secret", str),
    "SIGNED_URL_MAX_AGE": ("token_max_age", int),
    "DATABASE_URL": ("database_url", str),
    "CACHE_KEY": ("cache_key", str),
    "CHANGE_POLICY": ("policy", str),
    "IMAGE_FORMAT": ("image_format", str),
    "SCHEDULE_MINUTES": ("schedule_minutes", int),
}


def load_profiles(path: pathlib.Path = PROFILES_PATH) -> dict[str, dict[str, Any]]:
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Profiles file {path} must be a mapping")
    return data


def load_settings(profile: str | None = None, *, path: pathlib.Path = PROFILES_PATH) -> Settings:
    """Build settings from a named profile overlaid with environment variables."""
    name = profile or os.environ.get("COFFEEWATCH_PROFILE", DEFAULT_PROFILE)
    profiles = load_profiles(path)
    if name not in profiles:
        raise ConfigError(f"Unknown profile {name!r}; expected one of {sorted(profiles)}")
    values = dict(profiles[name] or {})
    for env_name, (field, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[field] = convert(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {env_name}: {raw!r}") from exc
    known = {f.name for f in dataclasses.fields(Settings)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown settings in profile {name!r}: {sorted(unknown)}")
    try:
        settings = Settings(**values)
    except TypeError as exc:
        raise ConfigError(f"Incomplete profile {name!r}: {exc}") from exc
    validate(settings)
    return settings


def validate(settings: Settings) -> None:
    if settings.policy not in POLICY_NAMES:
        raise ConfigError(f"Unknown change policy {settings.policy!r}")
    if settings.timestamp_source not in TIMESTAMP_SOURCES:
        raise ConfigError(f"Unknown timestamp source {settings.timestamp_source!r}")
    if settings.tile_size <= 0 or settings.tile_spacing < 0 or settings.pixel_ratio <= 0:
        raise ConfigError("Tile size and pixel ratio must be positive, spacing non-negative")
    if not 1 <= settings.schedule_minutes <= 59:
        raise ConfigError(f"schedule_minutes must be between 1 and 59, got {settings.schedule_minutes}")
