# trip_consensus/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import os
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from trip_consensus.agents.budget_estimator import estimate_budget, estimate_destination_budget
from trip_consensus.agents.destination_ranker import RankedDestination, rank_destinations
from trip_consensus.agents.flight_cost import estimate_flight_cost
from trip_consensus.agents.itinerary_generator import generate_itinerary
from trip_consensus.agents.preference_aggregator import analyze_responses
from trip_consensus.catalog import DestinationCatalog, default_catalog
from trip_consensus.config import EngineSettings, load_settings
from trip_consensus.schemas import (
    BudgetEstimate,
    DateWindow,
    MemberCost,
    Recommendation,
    RecommendationResponse,
    ResponseSet,
    SurveyAnalysis,
    SurveyQuestion,
    TextAnswer,
    TripMember,
)
from trip_consensus.tools.lookup_cache import DestinationLookup, RunLookupCache, fetch_destination_data
from trip_consensus.tools.providers import (
    EventPriceProvider,
    GooglePlacesProvider,
    NullEventProvider,
    NullPlaceProvider,
    PlaceInfoProvider,
    TicketmasterEventProvider,
    price_level_label,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# ---------- synchronous planner (no external lookups) ----------
def plan_recommendations(
    response_set: ResponseSet,
    *,
    catalog: DestinationCatalog | None = None,
    members: Sequence[TripMember] | None = None,
    count: int | None = None,
    seed: int | None = None,
    questions: List[SurveyQuestion] | None = None,
    settings: EngineSettings | None = None,
) -> RecommendationResponse:
    """Produce recommendations from catalog constants alone."""
    settings = settings or load_settings()
    catalog = catalog or default_catalog()
    analysis = analyze_responses(response_set, catalog, questions, currency=settings.currency)
    recommendations = assemble_recommendations(
        analysis,
        catalog,
        resolve_members(response_set, members),
        count=count or settings.recommendation_count,
        seed=settings.seed if seed is None else seed,
        currency=settings.currency,
    )
    return RecommendationResponse(recommendations=recommendations, analysis=analysis)


def assemble_recommendations(
    analysis: SurveyAnalysis,
    catalog: DestinationCatalog,
    members: Sequence[TripMember],
    *,
    count: int,
    seed: int = 0,
    currency: str = "USD",
    budgets: Dict[str, BudgetEstimate] | None = None,
    lookups: Dict[str, DestinationLookup] | None = None,
    ranked: Sequence[RankedDestination] | None = None,
) -> List[Recommendation]:
    """Compose ranked destinations into recommendations, best match first.

    ``budgets`` and ``lookups`` carry provider-refined results keyed by
    destination label; anything missing is computed from catalog constants.
    """
    if ranked is None:
        ranked = rank_destinations(analysis.destinations, catalog, count)
    window = analysis.dates.optimal
    duration = analysis.duration.optimal_days
    start, end = trip_dates(window, duration)

    recommendations: List[Recommendation] = []
    for candidate in ranked:
        budget = (budgets or {}).get(candidate.label) or estimate_budget(
            candidate.info.cost_multiplier,
            duration,
            catalog.base_daily_costs,
            currency=currency,
        )
        lookup = (lookups or {}).get(candidate.label)
        recommendations.append(
            _build_recommendation(
                candidate,
                analysis,
                catalog,
                members,
                budget=budget,
                window=window,
                start=start,
                end=end,
                duration=duration,
                seed=seed,
                lookup=lookup,
            )
        )

    recommendations.sort(key=lambda rec: rec.match_score, reverse=True)
    logger.info(
        "Assembled %d recommendation(s); best %s (%d)",
        len(recommendations),
        recommendations[0].destination.label if recommendations else "n/a",
        recommendations[0].match_score if recommendations else 0,
    )
    return recommendations

# ---------- async planner with provider enrichment ----------
async def orchestrate_recommendations(
    response_set: ResponseSet,
    *,
    catalog: DestinationCatalog | None = None,
    members: Sequence[TripMember] | None = None,
    count: int | None = None,
    seed: int | None = None,
    questions: List[SurveyQuestion] | None = None,
    places: PlaceInfoProvider | None = None,
    events: EventPriceProvider | None = None,
    settings: EngineSettings | None = None,
) -> RecommendationResponse:
    """Aggregate, enrich each eligible destination concurrently, then assemble."""
    settings = settings or load_settings()
    catalog = catalog or default_catalog()
    if places is None or events is None:
        default_places, default_events = default_providers(settings)
        places = places or default_places
        events = events or default_events

    logger.info("Planning run start: %d response(s)", len(response_set.responses))
    analysis = analyze_responses(response_set, catalog, questions, currency=settings.currency)
    limit = count or settings.recommendation_count
    ranked = rank_destinations(analysis.destinations, catalog, limit)
    window = analysis.dates.optimal
    duration = analysis.duration.optimal_days
    cache = RunLookupCache()

    async def _enrich(candidate: RankedDestination) -> Tuple[str, BudgetEstimate, DestinationLookup]:
        budget = await estimate_destination_budget(
            candidate.label,
            candidate.info,
            duration,
            window,
            catalog,
            places=places,
            events=events,
            timeout=settings.provider_timeout,
            cache=cache,
            currency=settings.currency,
        )
        lookup = await fetch_destination_data(
            candidate.label, window, places, events, timeout=settings.provider_timeout, cache=cache
        )
        return candidate.label, budget, lookup

    enriched = await asyncio.gather(*[_enrich(candidate) for candidate in ranked])
    budgets = {label: budget for label, budget, _ in enriched}
    lookups = {label: lookup for label, _, lookup in enriched}
    logger.info("Completed %d destination lookup(s)", len(cache))

    recommendations = assemble_recommendations(
        analysis,
        catalog,
        resolve_members(response_set, members),
        count=limit,
        seed=settings.seed if seed is None else seed,
        currency=settings.currency,
        budgets=budgets,
        lookups=lookups,
        ranked=ranked,
    )
    return RecommendationResponse(recommendations=recommendations, analysis=analysis)

# ---------- helpers ----------
def default_providers(settings: EngineSettings) -> Tuple[PlaceInfoProvider, EventPriceProvider]:
    places: PlaceInfoProvider = (
        GooglePlacesProvider(api_key=settings.google_places_api_key)
        if settings.google_places_api_key
        else NullPlaceProvider()
    )
    events: EventPriceProvider = (
        TicketmasterEventProvider(api_key=settings.ticketmaster_api_key)
        if settings.ticketmaster_api_key
        else NullEventProvider()
    )
    return places, events


def trip_dates(window: DateWindow, duration_days: int) -> Tuple[date, date]:
    """Centre the trip inside the window; start at the window start if it does not fit."""
    offset = 0 if duration_days > window.days else (window.days - duration_days) // 2
    start = window.start + timedelta(days=offset)
    return start, start + timedelta(days=duration_days - 1)


def resolve_members(
    response_set: ResponseSet,
    members: Sequence[TripMember] | None = None,
) -> List[TripMember]:
    """Explicit trip members win; departure cities fall back to survey answers."""
    answered: Dict[str, Optional[str]] = {}
    names: Dict[str, Optional[str]] = {}
    for response in response_set.responses:
        city = response.get("departure_city", TextAnswer)
        answered[response.member_id] = city.value if city else None
        names[response.member_id] = response.name

    if not members:
        return [
            TripMember(member_id=member_id, name=names.get(member_id), departure_city=city)
            for member_id, city in answered.items()
        ]
    return [
        member
        if member.departure_city
        else member.model_copy(update={"departure_city": answered.get(member.member_id)})
        for member in members
    ]


def member_costs(
    members: Sequence[TripMember],
    airport_code: str,
    budget: BudgetEstimate,
    catalog: DestinationCatalog,
) -> List[MemberCost]:
    costs: List[MemberCost] = []
    for member in members:
        flight = estimate_flight_cost(
            member.departure_city,
            airport_code,
            airport_codes=catalog.airport_codes,
            zone_factors=catalog.zone_factors,
            base_fare=catalog.base_fare,
            default_cost=catalog.default_flight_cost,
        )
        costs.append(
            MemberCost(
                member_id=member.member_id,
                name=member.name,
                departure_city=member.departure_city,
                flight_cost=flight,
                local_cost=budget.total,
                total_cost=flight + budget.total,
            )
        )
    return costs


def _build_recommendation(
    candidate: RankedDestination,
    analysis: SurveyAnalysis,
    catalog: DestinationCatalog,
    members: Sequence[TripMember],
    *,
    budget: BudgetEstimate,
    window: DateWindow,
    start: date,
    end: date,
    duration: int,
    seed: int,
    lookup: DestinationLookup | None,
) -> Recommendation:
    itinerary = generate_itinerary(
        candidate.label,
        catalog.pools_for(candidate.label),
        start,
        duration,
        [pref.option_label for pref in analysis.activities if pref.weighted_score > 0],
        analysis.dining.preferred,
        seed=seed,
        live_events=lookup.events if lookup else (),
    )
    return Recommendation(
        destination=candidate.info.to_destination(candidate.label),
        match_score=candidate.match_score,
        budget=budget,
        date_window=window,
        trip_start=start,
        trip_end=end,
        duration_days=duration,
        itinerary=itinerary,
        member_costs=member_costs(members, candidate.info.airport_code, budget, catalog),
        notes=_recommendation_notes(candidate, budget, analysis, lookup),
    )


def _recommendation_notes(
    candidate: RankedDestination,
    budget: BudgetEstimate,
    analysis: SurveyAnalysis,
    lookup: DestinationLookup | None,
) -> List[str]:
    notes: List[str] = []
    target = analysis.budget.optimal
    delta = budget.total - target
    if delta > 0:
        notes.append(f"Estimated local cost {budget.total} {budget.currency} is over the group target {target:.0f} by {delta:.0f}.")
    elif delta < 0:
        notes.append(f"Estimated local cost {budget.total} {budget.currency} is under the group target {target:.0f} by {abs(delta):.0f}.")
    else:
        notes.append(f"Estimated local cost matches the group target of {target:.0f} {budget.currency}.")
    if candidate.preference.top_choice_count:
        notes.append(f"First choice for {candidate.preference.top_choice_count} member(s).")
    if lookup and lookup.place is not None:
        rating = f", rated {lookup.place.rating:.1f}" if lookup.place.rating is not None else ""
        notes.append(f"Local price level: {price_level_label(lookup.place.price_level)}{rating}.")
    if lookup and lookup.events:
        notes.append(f"{len(lookup.events)} ticketed event(s) found during the window.")
    return notes
