"""Rough per-member flight cost heuristic."""
from __future__ import annotations

from typing import Mapping, Optional

from trip_consensus.rounding import round_half_up

BASE_FARE = 250.0
DEFAULT_FLIGHT_COST = 400  # unknown departure city


def airport_for_city(city: Optional[str], airport_codes: Mapping[str, str]) -> Optional[str]:
    if not city:
        return None
    return airport_codes.get(city.strip().lower())


def estimate_flight_cost(
    departure_city: Optional[str],
    destination_code: str,
    *,
    airport_codes: Mapping[str, str],
    zone_factors: Mapping[str, float],
    base_fare: float = BASE_FARE,
    default_cost: int = DEFAULT_FLIGHT_COST,
) -> int:
    """Estimate a one-member fare from a free-text departure city.

    Unknown cities get ``default_cost``; flying into your own airport is free;
    everything else is ``base_fare`` scaled by the origin's zone factor.
    """
    origin = airport_for_city(departure_city, airport_codes)
    if origin is None:
        return default_cost
    if origin == destination_code:
        return 0
    return round_half_up(base_fare * zone_factors.get(origin, 1.0))
