"""Centralized configuration — all env vars in one place."""

import os
import re
from dataclasses import dataclass

from errors import ConfigurationError

REQUIRED_ENV_VARS = ("GOOGLE_MAPS_API_KEY", "ALLOWED_PLACE_IDS", "ORIGIN", "FIELD_MASK")


@dataclass(frozen=True)
class OriginRule:
    """Permitted CORS origin: either a literal origin or a compiled pattern."""

    literal: str | None = None
    pattern: re.Pattern | None = None

    @classmethod
    def parse(cls, raw: str) -> "OriginRule":
        # "/^https:\/\/.*\.example\.com$/" style values are regexes
        # Starlette full-matches the pattern, so "/^example\.com/" no longer matches "https://example.com"
        if raw.startswith("/^") and raw.endswith("/") and len(raw) > 2:
            return cls(pattern=re.compile(raw[1:-1]))
        return cls(literal=raw)

    @property
    def is_pattern(self) -> bool:
        return self.pattern is not None

    def cors_kwargs(self) -> dict:
        """Keyword arguments for Starlette's CORSMiddleware."""
        if self.pattern is not None:
            return {"allow_origins": [], "allow_origin_regex": self.pattern.pattern}
        return {"allow_origins": [self.literal]}


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Google Places
        self.google_maps_api_key: str | None = os.getenv("GOOGLE_MAPS_API_KEY") or None
        self.field_mask: str | None = os.getenv("FIELD_MASK") or None
        self.places_base_url: str = os.getenv("PLACES_API_BASE_URL", "https://places.googleapis.com/v1")

        raw_ids = os.getenv("ALLOWED_PLACE_IDS", "")
        self.allowed_place_ids: list[str] = [pid.strip() for pid in raw_ids.split(",") if pid.strip()]

        raw_origin = os.getenv("ORIGIN")
        self.origin: OriginRule | None = OriginRule.parse(raw_origin) if raw_origin else None

        # Cache behaviour
        self.cache_ttl_seconds: float = _float_env("CACHE_TTL_SECONDS", 3600)
        self.close_lead_seconds: float = _float_env("CLOSE_LEAD_SECONDS", 15 * 60)
        self.upstream_timeout_seconds: float = _float_env("UPSTREAM_TIMEOUT_SECONDS", 10)
        self.refresh_interval_seconds: float = _float_env("REFRESH_INTERVAL_SECONDS", 0)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars."""
        return [var for var in REQUIRED_ENV_VARS if not getattr(self, _attr_for(var))]

    def require(self) -> None:
        """Raise ConfigurationError if any required env var is missing."""
        missing = self.validate()
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    def is_allowed(self, place_id: str | None) -> bool:
        return bool(place_id) and place_id in self.allowed_place_ids


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return float(default)
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "ALLOWED_PLACE_IDS": "allowed_place_ids",
        "ORIGIN": "origin",
    }
    return mapping.get(env_var, env_var.lower())
