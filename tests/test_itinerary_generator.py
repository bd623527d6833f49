from datetime import date

from trip_consensus.agents.itinerary_generator import SLOT_TIMES, generate_itinerary
from trip_consensus.catalog import DESTINATION_ACTIVITIES
from trip_consensus.tools.providers import EventListing

NASHVILLE = DESTINATION_ACTIVITIES["Nashville"]
START = date(2025, 7, 5)


def _titles(itinerary, slot):
    return [next(s.title for s in day.slots if s.time_label == slot) for day in itinerary]


def test_one_day_per_trip_day_with_fixed_slot_order():
    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 6, ["Casino"])

    assert len(itinerary) == 6
    assert [day.day_number for day in itinerary] == [1, 2, 3, 4, 5, 6]
    assert itinerary[0].date == START
    assert itinerary[-1].date == date(2025, 7, 10)
    assert itinerary[0].weekday == "Saturday"
    for day in itinerary:
        assert [s.time_label for s in day.slots] == ["morning", "lunch", "afternoon", "evening"]
        assert [s.time_range for s in day.slots] == list(SLOT_TIMES.values())


def test_first_and_last_day_are_fixed():
    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 4, [])

    assert _titles(itinerary, "morning")[0] == "Arrival and Check-in"
    assert _titles(itinerary, "evening")[0] == "Group Welcome Dinner"
    assert _titles(itinerary, "evening")[-1] == "Final Group Dinner and Farewell"


def test_same_seed_same_itinerary():
    first = generate_itinerary("Nashville", NASHVILLE, START, 6, ["Golf", "Bars/Nightlife"], seed=7)
    second = generate_itinerary("Nashville", NASHVILLE, START, 6, ["Golf", "Bars/Nightlife"], seed=7)

    assert first == second


def test_golf_fills_second_and_penultimate_mornings():
    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 5, ["Golf", "Concert"])
    mornings = _titles(itinerary, "morning")

    assert mornings[1] == "Golf at Hermitage"
    assert mornings[3] == "Golf at Hermitage"
    assert mornings[2] in NASHVILLE["outdoor"]


def test_golf_outside_top_three_is_ignored():
    prefs = ["Concert", "Casino", "Beach Activities", "Golf"]
    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 4, prefs)

    assert all(title in NASHVILLE["outdoor"] for title in _titles(itinerary, "morning")[1:])


def test_sports_then_beach_then_culture_afternoons():
    sports = _titles(generate_itinerary("Nashville", NASHVILLE, START, 5, ["Sporting Event"]), "afternoon")
    assert all(title in NASHVILLE["sports"] for title in sports[1:3])
    assert all(title in NASHVILLE["culture"] for title in sports[3:])

    beach = _titles(generate_itinerary("Nashville", NASHVILLE, START, 4, ["Beach Activities"]), "afternoon")
    assert all(title in NASHVILLE["beach"] for title in beach[1:3])
    assert beach[3] in NASHVILLE["culture"]


def test_nightlife_evenings_and_dining_titles():
    nights = _titles(generate_itinerary("Nashville", NASHVILLE, START, 4, ["Bars/Nightlife"]), "evening")
    assert all(title in NASHVILLE["nightlife"] for title in nights[1:3])

    dinners = _titles(
        generate_itinerary(
            "Nashville",
            NASHVILLE,
            START,
            5,
            ["Golf"],
            ["High-end meal (1 time as whole group)", "Group Cooking Session"],
        ),
        "evening",
    )
    assert dinners[1:] == [
        "High-End Group Dinner",
        "Group Cooking Session",
        "Group Dinner",
        "Final Group Dinner and Farewell",
    ]


def test_live_sports_events_inside_the_trip_join_the_pool():
    events = [
        EventListing(name="Predators vs Blues Game", date="2025-07-06", venue="Bridgestone Arena"),
        EventListing(name="Titans Game", date="2025-09-01", venue="Nissan Stadium"),
        EventListing(name="Summer Concert", date="2025-07-06", venue="Ryman"),
    ]

    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 4, ["Sporting Event"], live_events=events)

    # index (seed + day 2 + afternoon offset 2) % 4 lands on the live event
    assert _titles(itinerary, "afternoon")[1] == "Predators vs Blues Game"


def test_empty_pool_falls_back_to_free_time():
    pools = {key: [] for key in NASHVILLE}

    itinerary = generate_itinerary("Nowhere", pools, START, 3, [])

    assert _titles(itinerary, "lunch")[1] == "Free time / Optional exploring"


def test_single_day_trip():
    itinerary = generate_itinerary("Nashville", NASHVILLE, START, 1, ["Golf"])

    assert len(itinerary) == 1
    assert _titles(itinerary, "evening") == ["Group Welcome Dinner"]
