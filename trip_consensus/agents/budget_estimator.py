"""Group budget blending and per-destination cost estimates."""
from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Mapping

from trip_consensus.catalog import COST_CATEGORIES, DestinationCatalog, DestinationInfo
from trip_consensus.rounding import round_half_up
from trip_consensus.schemas import (
    BudgetAnswer,
    BudgetBreakdown,
    BudgetEstimate,
    DateWindow,
    GroupBudget,
    SurveyResponse,
)
from trip_consensus.tools.lookup_cache import (
    DestinationLookup,
    RunLookupCache,
    fetch_destination_data,
)
from trip_consensus.tools.providers import EventPriceProvider, PlaceInfoProvider

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# Daily rates implied by a moderate price level (2 on the 0-4 scale).
_PRICE_LEVEL_RATES: Dict[str, float] = {"food": 50, "activities": 40, "transport": 25}


def analyze_group_budget(
    responses: Iterable[SurveyResponse],
    catalog: DestinationCatalog,
    *,
    currency: str = "USD",
    question_id: str = "trip_budget",
) -> GroupBudget:
    """Mean of member budget midpoints, bounded by the observed extremes."""
    midpoints = []
    for response in responses:
        answer = response.get(question_id, BudgetAnswer)
        if answer is None:
            continue
        midpoints.append(answer.midpoint())

    if not midpoints:
        defaults = catalog.default_budget
        return GroupBudget(
            optimal=float(defaults["optimal"]),
            min=float(defaults["min"]),
            max=float(defaults["max"]),
            currency=currency,
            sample_size=0,
        )

    return GroupBudget(
        optimal=float(round_half_up(sum(midpoint / len(midpoints) for midpoint in midpoints))),
        min=min(midpoints),
        max=max(midpoints),
        currency=currency,
        sample_size=len(midpoints),
    )


def estimate_budget(
    multiplier: float,
    duration_days: int,
    base_daily_costs: Mapping[str, float],
    *,
    rates: Mapping[str, float] | None = None,
    currency: str = "USD",
) -> BudgetEstimate:
    """Scale daily per-category costs by destination and trip length.

    ``rates`` replaces individual base constants (e.g. from live price data)
    before the same multiplication. The total is the sum of the rounded
    categories so the breakdown always adds up exactly.
    """
    days = max(1, int(duration_days))
    overrides = rates or {}
    amounts: Dict[str, int] = {}
    for category in COST_CATEGORIES:
        daily = overrides.get(category, base_daily_costs[category])
        amounts[category] = round_half_up(daily * multiplier * days)
    return BudgetEstimate(
        total=sum(amounts.values()),
        currency=currency,
        breakdown=BudgetBreakdown(**amounts),
    )


def derive_daily_rates(lookup: DestinationLookup | None) -> Dict[str, float]:
    """Translate provider data into per-category daily rate overrides.

    Place price level scales the food/activities/transport rates; a level of
    0 or anything outside 1-4 counts as moderate. Priced events, when present,
    set the activities rate to their mean entry price. Accommodation has no
    external source.
    """
    if lookup is None or lookup.empty:
        return {}
    rates: Dict[str, float] = {}
    if lookup.place is not None:
        level = lookup.place.price_level
        if not isinstance(level, int) or not 1 <= level <= 4:
            level = 2
        factor = level / 2
        rates = {category: base * factor for category, base in _PRICE_LEVEL_RATES.items()}
    entry_prices = [
        event.price_range.min
        for event in lookup.events
        if event.price_range is not None and event.price_range.min >= 0
    ]
    if entry_prices:
        rates["activities"] = sum(entry_prices) / len(entry_prices)
    return rates


async def estimate_destination_budget(
    label: str,
    info: DestinationInfo,
    duration_days: int,
    window: DateWindow,
    catalog: DestinationCatalog,
    *,
    places: PlaceInfoProvider,
    events: EventPriceProvider,
    timeout: float,
    cache: RunLookupCache | None = None,
    currency: str = "USD",
) -> BudgetEstimate:
    """Estimate with live rates when providers answer, base constants otherwise."""
    lookup = await fetch_destination_data(label, window, places, events, timeout=timeout, cache=cache)
    rates = derive_daily_rates(lookup)
    if rates:
        logger.info("Refined %s budget with provider rates for %s", label, ", ".join(sorted(rates)))
    else:
        logger.debug("No provider rates for %s; using base daily costs", label)
    return estimate_budget(
        info.cost_multiplier,
        duration_days,
        catalog.base_daily_costs,
        rates=rates,
        currency=currency,
    )
