import asyncio

import pytest

from trip_consensus.agents.budget_estimator import (
    analyze_group_budget,
    derive_daily_rates,
    estimate_budget,
    estimate_destination_budget,
)
from trip_consensus.catalog import BASE_DAILY_COSTS, default_catalog
from trip_consensus.surveys import build_response_set
from trip_consensus.tools.lookup_cache import DestinationLookup
from trip_consensus.tools.providers import EventListing, PlaceInfo, PriceRange


def _budget_responses(*values):
    return build_response_set(
        [{"member_id": f"m{index}", "answers": {"trip_budget": value}} for index, value in enumerate(values)]
    ).responses


def test_group_budget_blends_midpoints():
    budget = analyze_group_budget(_budget_responses(400, {"min": 300, "max": 700}, 600), default_catalog())

    assert (budget.optimal, budget.min, budget.max) == (500, 400, 600)
    assert budget.sample_size == 3


def test_group_budget_defaults_without_answers():
    budget = analyze_group_budget(_budget_responses(), default_catalog(), currency="EUR")

    assert (budget.optimal, budget.min, budget.max) == (500, 300, 700)
    assert budget.currency == "EUR"
    assert budget.sample_size == 0


def test_four_day_trip_at_base_costs():
    estimate = estimate_budget(1.0, 4, BASE_DAILY_COSTS)

    breakdown = estimate.breakdown
    assert (breakdown.accommodation, breakdown.food, breakdown.activities, breakdown.transport) == (300, 240, 160, 100)
    assert estimate.total == 800


@pytest.mark.parametrize("multiplier", [0.9, 1.0, 1.1, 1.3, 1.4])
@pytest.mark.parametrize("days", [1, 2, 4, 6, 7])
def test_total_is_sum_of_rounded_categories(multiplier, days):
    estimate = estimate_budget(multiplier, days, BASE_DAILY_COSTS)
    breakdown = estimate.breakdown

    assert estimate.total == breakdown.accommodation + breakdown.food + breakdown.activities + breakdown.transport
    assert all(value >= 0 for value in breakdown.model_dump().values())


def test_rate_overrides_replace_base_constants():
    estimate = estimate_budget(1.0, 2, BASE_DAILY_COSTS, rates={"food": 100})

    assert estimate.breakdown.food == 200
    assert estimate.breakdown.accommodation == 150


def test_derive_daily_rates_from_price_level_and_events():
    assert derive_daily_rates(None) == {}
    assert derive_daily_rates(DestinationLookup()) == {}

    expensive = derive_daily_rates(DestinationLookup(place=PlaceInfo(price_level=4, rating=4.5, address=None)))
    assert expensive == {"food": 100, "activities": 80, "transport": 50}

    odd_level = derive_daily_rates(DestinationLookup(place=PlaceInfo(price_level=9, rating=None, address=None)))
    assert odd_level["food"] == 50

    events = [
        EventListing(name="Game", date="2025-07-05", venue="Park", price_range=PriceRange(min=30, max=90)),
        EventListing(name="Show", date="2025-07-06", venue="Hall", price_range=PriceRange(min=50, max=120)),
        EventListing(name="Free Fest", date="2025-07-07", venue="Lawn"),
    ]
    rates = derive_daily_rates(DestinationLookup(events=events))
    assert rates == {"activities": 40}
    assert "accommodation" not in rates


def test_destination_budget_falls_back_when_providers_fail():
    catalog = default_catalog()

    class BrokenPlaces:
        async def lookup(self, destination):
            raise RuntimeError("quota exceeded")

    class SlowEvents:
        async def search(self, destination, window):
            await asyncio.sleep(5)
            return []

    async def run():
        return await estimate_destination_budget(
            "Austin",
            catalog.info_for("Austin"),
            4,
            catalog.window("Early July (1-15)"),
            catalog,
            places=BrokenPlaces(),
            events=SlowEvents(),
            timeout=0.05,
        )

    estimate = asyncio.run(run())

    assert estimate == estimate_budget(1.0, 4, catalog.base_daily_costs)


def test_huge_budgets_do_not_overflow_the_group_mean():
    responses = _budget_responses("inf", 1e308, 1e308)

    budget = analyze_group_budget(responses, default_catalog())

    assert budget.sample_size == 2
    assert budget.optimal == 1e308
    assert budget.max == 1e308


def test_huge_budget_range_has_a_finite_midpoint():
    budget = analyze_group_budget(_budget_responses({"min": 1.5e308, "max": 1.7e308}), default_catalog())

    assert budget.optimal == pytest.approx(1.6e308)


def test_category_amounts_round_halves_up():
    costs = {"accommodation": 62.5, "food": 0.5, "activities": 40, "transport": 25}

    estimate = estimate_budget(1.0, 1, costs)

    assert estimate.breakdown.accommodation == 63
    assert estimate.breakdown.food == 1
    assert estimate.total == 63 + 1 + 40 + 25


def test_zero_price_level_counts_as_moderate():
    free = derive_daily_rates(DestinationLookup(place=PlaceInfo(price_level=0, rating=None, address=None)))

    assert free == {"food": 50, "activities": 40, "transport": 25}
