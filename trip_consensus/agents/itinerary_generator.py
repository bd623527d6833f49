"""Deterministic day-by-day itinerary skeletons."""
from __future__ import annotations

from collections import deque
from datetime import date, timedelta
from typing import Deque, Dict, Iterable, List, Mapping, Sequence

from trip_consensus.schemas import ItineraryDay, ItinerarySlot
from trip_consensus.tools.providers import EventListing, categorize_events

SLOT_TIMES: Dict[str, str] = {
    "morning": "9:00 AM - 12:00 PM",
    "lunch": "12:00 PM - 1:30 PM",
    "afternoon": "2:00 PM - 6:00 PM",
    "evening": "7:00 PM - Late",
}

# Offsets keep slots on the same day from landing on the same pool index.
_SLOT_OFFSETS: Dict[str, int] = {"morning": 0, "lunch": 1, "afternoon": 2, "evening": 3}

_DINING_TITLES = (
    ("high-end", "High-End Group Dinner"),
    ("sports bar", "Sports Bar Night"),
    ("bbq", "Group Catered BBQ"),
    ("cooking", "Group Cooking Session"),
)


def generate_itinerary(
    destination: str,
    pools: Mapping[str, Sequence[str]],
    start: date,
    duration_days: int,
    activity_preferences: Sequence[str],
    dining_preferences: Sequence[str] = (),
    *,
    seed: int = 0,
    live_events: Iterable[EventListing] = (),
) -> List[ItineraryDay]:
    """Lay out ``duration_days`` days of morning/lunch/afternoon/evening slots.

    Only the group's top three activities influence slotting. Whenever several
    pool entries qualify, the pick is ``pool[(seed + day + slot offset) % len]``
    so the same inputs and seed always produce the same itinerary.
    """
    duration = max(1, int(duration_days))
    top = [label.lower() for label in activity_preferences[:3]]
    wants_golf = any("golf" in label for label in top)
    wants_sports = any("sport" in label for label in top)
    wants_beach = any("beach" in label for label in top)
    wants_nightlife = any("nightlife" in label or "bars" in label for label in top)

    trip_end = start + timedelta(days=duration - 1)
    sports_pool = _sports_pool(pools.get("sports", ()), live_events, start, trip_end)
    golf_pool = [item for item in pools.get("outdoor", ()) if "golf" in item.lower()] or ["Group Golf Outing"]
    dinners = _dinner_queue(dining_preferences)

    itinerary: List[ItineraryDay] = []
    for day in range(1, duration + 1):
        current = start + timedelta(days=day - 1)
        is_last = day == duration and duration > 1

        if day == 1:
            morning = "Arrival and Check-in"
            lunch = "Lunch"
            afternoon = "Group Welcome Gathering"
            evening = "Group Welcome Dinner"
        else:
            if wants_golf and day in (2, duration - 1):
                morning = _pick(golf_pool, seed, day, "morning")
            else:
                morning = _pick(pools.get("outdoor", ()), seed, day, "morning")

            lunch = _pick(pools.get("food", ()), seed, day, "lunch")

            if wants_sports and day in (2, 3) and sports_pool:
                afternoon = _pick(sports_pool, seed, day, "afternoon")
            elif wants_beach and not is_last:
                afternoon = _pick(pools.get("beach", ()), seed, day, "afternoon")
            else:
                afternoon = _pick(pools.get("culture", ()), seed, day, "afternoon")

            if is_last:
                evening = "Final Group Dinner and Farewell"
            elif wants_nightlife:
                evening = _pick(pools.get("nightlife", ()), seed, day, "evening")
            else:
                evening = dinners.popleft() if dinners else "Group Dinner"

        itinerary.append(
            ItineraryDay(
                day_number=day,
                date=current,
                weekday=current.strftime("%A"),
                slots=[
                    ItinerarySlot(time_label="morning", time_range=SLOT_TIMES["morning"], title=morning),
                    ItinerarySlot(time_label="lunch", time_range=SLOT_TIMES["lunch"], title=lunch),
                    ItinerarySlot(time_label="afternoon", time_range=SLOT_TIMES["afternoon"], title=afternoon),
                    ItinerarySlot(time_label="evening", time_range=SLOT_TIMES["evening"], title=evening),
                ],
            )
        )
    return itinerary


def _pick(pool: Sequence[str], seed: int, day: int, slot: str) -> str:
    if not pool:
        return "Free time / Optional exploring"
    return pool[(seed + day + _SLOT_OFFSETS[slot]) % len(pool)]


def _sports_pool(
    catalog_pool: Sequence[str],
    live_events: Iterable[EventListing],
    start: date,
    end: date,
) -> List[str]:
    pool: List[str] = []
    for event in categorize_events(live_events)["sports"]:
        event_day = _event_date(event.date)
        if event_day is None or not start <= event_day <= end:
            continue
        if event.name not in pool:
            pool.append(event.name)
    for item in catalog_pool:
        if item not in pool:
            pool.append(item)
    return pool


def _event_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _dinner_queue(dining_preferences: Sequence[str]) -> Deque[str]:
    queue: Deque[str] = deque()
    for preference in dining_preferences:
        lowered = preference.lower()
        for keyword, title in _DINING_TITLES:
            if keyword in lowered and title not in queue:
                queue.append(title)
                break
    return queue
