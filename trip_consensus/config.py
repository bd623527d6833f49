"""Environment-driven settings for the consensus engine."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# Load .env file if present
load_dotenv()


@dataclass(frozen=True)
class EngineSettings:
    provider_timeout: float = 5.0
    seed: int = 0
    recommendation_count: int = 5
    currency: str = "USD"
    allowed_origins: tuple = ("*",)
    ticketmaster_api_key: str | None = None
    google_places_api_key: str | None = None

    @property
    def has_live_providers(self) -> bool:
        return bool(self.ticketmaster_api_key or self.google_places_api_key)


def load_settings() -> EngineSettings:
    """Build settings from the process environment.

    Numeric values that fail to parse are replaced by their defaults so a typo
    in a deployment variable never takes the service down.
    """
    defaults = EngineSettings()
    raw_origins = os.getenv("TRIP_CONSENSUS_ALLOWED_ORIGINS") or "*"
    allowed_origins: List[str] = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    if not allowed_origins:
        allowed_origins = ["*"]

    return EngineSettings(
        provider_timeout=_env_float("TRIP_CONSENSUS_PROVIDER_TIMEOUT", defaults.provider_timeout),
        seed=_env_int("TRIP_CONSENSUS_SEED", defaults.seed),
        recommendation_count=max(1, _env_int("TRIP_CONSENSUS_RECOMMENDATION_COUNT", defaults.recommendation_count)),
        currency=(os.getenv("TRIP_CONSENSUS_CURRENCY") or defaults.currency).upper(),
        allowed_origins=tuple(allowed_origins),
        ticketmaster_api_key=os.getenv("TICKETMASTER_API_KEY") or None,
        google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY") or None,
    )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r; using %s", name, raw, default)
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default
