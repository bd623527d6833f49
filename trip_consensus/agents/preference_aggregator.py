"""Turn a batch of survey responses into per-category group preferences."""
from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, List, Sequence

from trip_consensus.agents.budget_estimator import analyze_group_budget
from trip_consensus.catalog import DestinationCatalog
from trip_consensus.rounding import round_half_up
from trip_consensus.schemas import (
    AggregatedPreference,
    ChoiceAnalysis,
    ChoiceTally,
    DateAnalysis,
    DurationAnalysis,
    MultipleChoiceAnswer,
    RankingAnswer,
    ResponseSet,
    SingleChoiceAnswer,
    SurveyAnalysis,
    SurveyQuestion,
    SurveyResponse,
    TextAnswer,
    WindowSupport,
)
from trip_consensus.surveys import TRIP_PLANNING_SURVEY, question_options

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

_IGNORED_SUGGESTIONS = {"n/a", "na", "none", "-"}


def aggregate_rankings(
    responses: Iterable[SurveyResponse],
    question_id: str,
    options: Sequence[str],
) -> List[AggregatedPreference]:
    """Score every option by rank inversion across all responses.

    With ``N`` valid options the entry at index ``i`` of a ranking earns
    ``N - i`` points; omitted options earn nothing. Labels outside ``options``
    are ignored but still occupy their position. Results are ordered by score,
    then by first-choice count, then by label so identical inputs always give
    identical output.
    """
    total = len(options)
    scores: Dict[str, int] = {option: 0 for option in options}
    top_choices: Dict[str, int] = {option: 0 for option in options}

    for response in responses:
        answer = response.get(question_id, RankingAnswer)
        if answer is None:
            continue
        ranking = answer.value
        if len(ranking) > total or len(set(ranking)) != len(ranking):
            logger.debug("Skipping malformed %s ranking from %s", question_id, response.member_id)
            continue
        for index, label in enumerate(ranking):
            if label not in scores:
                continue
            scores[label] += total - index
            if index == 0:
                top_choices[label] += 1

    ranked = [
        AggregatedPreference(option_label=option, weighted_score=scores[option], top_choice_count=top_choices[option])
        for option in options
    ]
    ranked.sort(key=lambda pref: (-pref.weighted_score, -pref.top_choice_count, pref.option_label))
    return ranked


def analyze_dates(
    responses: Iterable[SurveyResponse],
    catalog: DestinationCatalog,
    question_id: str = "availability",
) -> DateAnalysis:
    """Pick the window most members can make; earliest window wins ties."""
    windows = {window.label: window for window in catalog.date_windows}
    counts: Dict[str, int] = {}

    for response in responses:
        answer = response.get(question_id, MultipleChoiceAnswer)
        if answer is None:
            continue
        for label in set(answer.value):
            if label not in windows:
                continue
            counts[label] = counts.get(label, 0) + 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1], windows[item[0]].start))
    availability = [WindowSupport(window=label, supporter_count=count) for label, count in ordered]
    optimal = catalog.window(ordered[0][0] if ordered else None)
    return DateAnalysis(optimal=optimal, availability_ranked=availability)


def analyze_duration(
    responses: Iterable[SurveyResponse],
    catalog: DestinationCatalog,
    options: Sequence[str],
    question_id: str = "duration",
) -> DurationAnalysis:
    ranked = aggregate_rankings(responses, question_id, options)
    if ranked and ranked[0].weighted_score > 0:
        label = ranked[0].option_label
    else:
        label = next(
            (bucket for bucket, days in catalog.duration_buckets.items() if days == catalog.default_duration_days),
            options[0] if options else "default",
        )
    return DurationAnalysis(ranked=ranked, optimal_label=label, optimal_days=catalog.duration_days(label))


def analyze_choices(
    responses: Sequence[SurveyResponse],
    question_id: str,
    options: Sequence[str],
) -> ChoiceAnalysis:
    """Plurality tally for single- or multiple-choice questions."""
    counts: Dict[str, int] = {option: 0 for option in options}
    for response in responses:
        answer = response.answers.get(question_id)
        if isinstance(answer, SingleChoiceAnswer):
            picked = [answer.value]
        elif isinstance(answer, MultipleChoiceAnswer):
            picked = answer.value
        else:
            continue
        for label in picked:
            if label in counts:
                counts[label] += 1

    total = len(responses)
    order = {option: index for index, option in enumerate(options)}
    ranked = [
        ChoiceTally(option=option, count=count, percentage=round_half_up(count / total * 100) if total else 0)
        for option, count in sorted(counts.items(), key=lambda item: (-item[1], order[item[0]]))
    ]
    preferred = [tally.option for tally in ranked if tally.count > 0]
    top_choice = preferred[0] if preferred else (options[0] if options else None)
    return ChoiceAnalysis(ranked=ranked, top_choice=top_choice, preferred=preferred)


def collect_suggestions(
    responses: Iterable[SurveyResponse],
    question_id: str,
    *,
    split: bool = False,
) -> List[str]:
    suggestions: List[str] = []
    for response in responses:
        answer = response.get(question_id, TextAnswer)
        if answer is None or not answer.value:
            continue
        parts = answer.value.split(",") if split else [answer.value]
        for part in parts:
            cleaned = part.strip()
            if not cleaned or cleaned.lower() in _IGNORED_SUGGESTIONS:
                continue
            if cleaned not in suggestions:
                suggestions.append(cleaned)
    return suggestions


def analyze_responses(
    response_set: ResponseSet,
    catalog: DestinationCatalog,
    questions: List[SurveyQuestion] | None = None,
    currency: str = "USD",
) -> SurveyAnalysis:
    """Run every aggregation over one planning round."""
    schema = questions or TRIP_PLANNING_SURVEY
    responses = list(response_set.responses)

    destinations = aggregate_rankings(
        responses, "location_preferences", question_options(schema, "location_preferences")
    )
    activities = aggregate_rankings(
        responses, "activity_preferences", question_options(schema, "activity_preferences")
    )
    dates = analyze_dates(responses, catalog)
    duration = analyze_duration(responses, catalog, question_options(schema, "duration"))
    budget = analyze_group_budget(responses, catalog, currency=currency)

    response_rate = None
    if response_set.member_count:
        response_rate = round(len(responses) / response_set.member_count * 100, 1)

    analysis = SurveyAnalysis(
        total_responses=len(responses),
        response_rate=response_rate,
        budget=budget,
        dates=dates,
        duration=duration,
        destinations=destinations,
        activities=activities,
        accommodation=analyze_choices(responses, "accommodation_type", question_options(schema, "accommodation_type")),
        room_sharing=analyze_choices(responses, "room_sharing", question_options(schema, "room_sharing")),
        dining=analyze_choices(responses, "dining_preferences", question_options(schema, "dining_preferences")),
        location_suggestions=collect_suggestions(responses, "other_locations", split=True),
        activity_suggestions=collect_suggestions(responses, "other_activities"),
    )
    logger.info(
        "Aggregated %d response(s): top destination %s, window %s, %d day(s), group budget %.0f %s",
        analysis.total_responses,
        destinations[0].option_label if destinations else "n/a",
        dates.optimal.label,
        duration.optimal_days,
        budget.optimal,
        budget.currency,
    )
    return analysis
