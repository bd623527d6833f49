"""Match scoring and eligibility filtering for candidate destinations."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Sequence

from trip_consensus.catalog import DestinationCatalog, DestinationInfo
from trip_consensus.rounding import round_half_up
from trip_consensus.schemas import AggregatedPreference

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


@dataclass(frozen=True)
class RankedDestination:
    label: str
    info: DestinationInfo
    preference: AggregatedPreference
    position: int
    match_score: int


def match_score(preferences: Sequence[AggregatedPreference], position: int) -> int:
    """Composite 0-100 score for the candidate at ``position`` in ``preferences``.

    Half the score comes from the candidate's weighted score relative to the
    leader, up to 30 points from its rank position, and 5 points per member who
    ranked it first, capped at 100.
    """
    if not preferences:
        return 0
    candidate = preferences[position]
    max_score = preferences[0].weighted_score or 1
    count = len(preferences)
    location_part = candidate.weighted_score * 50 / max_score
    rank_bonus = (count - position) / count * 30
    top_choice_bonus = candidate.top_choice_count * 5
    return max(0, min(100, round_half_up(location_part + rank_bonus + top_choice_bonus)))


def rank_destinations(
    preferences: Sequence[AggregatedPreference],
    catalog: DestinationCatalog,
    count: int,
) -> List[RankedDestination]:
    """Walk the sorted preferences and keep up to ``count`` mapped destinations.

    Labels missing from the catalog are skipped with a warning, so the result
    can be shorter than ``count``.
    """
    ranked: List[RankedDestination] = []
    for position, preference in enumerate(preferences):
        if len(ranked) >= count:
            break
        info = catalog.info_for(preference.option_label)
        if info is None:
            logger.warning(
                "Skipping %s: not in destination table (score %d)",
                preference.option_label,
                preference.weighted_score,
            )
            continue
        ranked.append(
            RankedDestination(
                label=preference.option_label,
                info=info,
                preference=preference,
                position=position,
                match_score=match_score(preferences, position),
            )
        )
    logger.info(
        "Ranked %d eligible destination(s) from %d candidate(s)",
        len(ranked),
        len(preferences),
    )
    return ranked
