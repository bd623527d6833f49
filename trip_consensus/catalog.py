"""Destination and pricing tables consumed by the engine.

Everything the algorithms look up (destination facts, activity pools, base
daily costs, airport codes, the date-window calendar) lives on a
``DestinationCatalog`` value so callers can swap in their own data without
touching the scoring code.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional

from trip_consensus.schemas import DateWindow, Destination

ACTIVITY_CATEGORIES = ("sports", "outdoor", "beach", "nightlife", "food", "culture")
COST_CATEGORIES = ("accommodation", "food", "activities", "transport")


class ConfigurationError(ValueError):
    """Raised when the catalog cannot support any recommendation at all."""


@dataclass(frozen=True)
class DestinationInfo:
    city: str
    country: str
    latitude: float
    longitude: float
    timezone: str
    cost_multiplier: float
    airport_code: str

    def to_destination(self, label: str) -> Destination:
        return Destination(
            label=label,
            city=self.city,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
            timezone=self.timezone,
            airport_code=self.airport_code,
        )


@dataclass
class DestinationCatalog:
    destinations: Dict[str, DestinationInfo]
    activities: Dict[str, Dict[str, List[str]]]
    base_daily_costs: Dict[str, float] = field(default_factory=lambda: dict(BASE_DAILY_COSTS))
    airport_codes: Dict[str, str] = field(default_factory=lambda: dict(AIRPORT_CODES))
    zone_factors: Dict[str, float] = field(default_factory=lambda: dict(ZONE_FACTORS))
    date_windows: List[DateWindow] = field(default_factory=lambda: list(DATE_WINDOWS))
    duration_buckets: Dict[str, int] = field(default_factory=lambda: dict(DURATION_BUCKETS))
    base_fare: float = 250.0
    default_flight_cost: int = 400
    default_window_label: str = "Early July (1-15)"
    default_duration_days: int = 4
    default_budget: Mapping[str, float] = field(
        default_factory=lambda: {"optimal": 500.0, "min": 300.0, "max": 700.0}
    )

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not self.destinations:
            raise ConfigurationError("destination table is empty")
        if not self.activities:
            raise ConfigurationError("activity table is empty")
        for label in self.destinations:
            pools = self.activities.get(label)
            if not pools:
                raise ConfigurationError(f"no activity pools configured for {label!r}")
            missing = [cat for cat in ACTIVITY_CATEGORIES if not pools.get(cat)]
            if missing:
                raise ConfigurationError(f"{label!r} has empty activity pools: {', '.join(missing)}")
        missing_costs = [cat for cat in COST_CATEGORIES if cat not in self.base_daily_costs]
        if missing_costs:
            raise ConfigurationError(f"base daily costs missing: {', '.join(missing_costs)}")
        if not self.date_windows:
            raise ConfigurationError("date window calendar is empty")

    def info_for(self, label: str) -> Optional[DestinationInfo]:
        return self.destinations.get(label)

    def pools_for(self, label: str) -> Dict[str, List[str]]:
        return self.activities[label]

    def window(self, label: str | None) -> DateWindow:
        by_label = {window.label: window for window in self.date_windows}
        if label and label in by_label:
            return by_label[label]
        return by_label.get(self.default_window_label, self.date_windows[0])

    def duration_days(self, bucket: str | None) -> int:
        if bucket and bucket in self.duration_buckets:
            return self.duration_buckets[bucket]
        return self.default_duration_days


BASE_DAILY_COSTS: Dict[str, float] = {
    "accommodation": 75,  # per person, shared
    "food": 60,
    "activities": 40,
    "transport": 25,
}

AIRPORT_CODES: Dict[str, str] = {
    "new york": "JFK",
    "newark": "EWR",
    "los angeles": "LAX",
    "chicago": "ORD",
    "houston": "IAH",
    "phoenix": "PHX",
    "philadelphia": "PHL",
    "san antonio": "SAT",
    "san diego": "SAN",
    "dallas": "DFW",
    "austin": "AUS",
    "nashville": "BNA",
    "boston": "BOS",
    "charleston": "CHS",
    "atlanta": "ATL",
    "denver": "DEN",
    "seattle": "SEA",
    "miami": "MIA",
    "orlando": "MCO",
}

ZONE_FACTORS: Dict[str, float] = {
    "JFK": 1.2, "EWR": 1.2, "LAX": 1.5, "ORD": 1.0,
    "ATL": 0.9, "DFW": 1.0, "DEN": 1.1, "SEA": 1.4,
    "MIA": 1.1, "BOS": 1.1, "PHX": 1.2, "IAH": 1.0,
}

DATE_WINDOWS: List[DateWindow] = [
    DateWindow(label="Late June (16-30)", start=date(2025, 6, 16), end=date(2025, 6, 30)),
    DateWindow(label="Early July (1-15)", start=date(2025, 7, 1), end=date(2025, 7, 15)),
    DateWindow(label="Late July (16-31)", start=date(2025, 7, 16), end=date(2025, 7, 31)),
    DateWindow(label="Early August (1-15)", start=date(2025, 8, 1), end=date(2025, 8, 15)),
    DateWindow(label="Late August (16-31)", start=date(2025, 8, 16), end=date(2025, 8, 31)),
]

DURATION_BUCKETS: Dict[str, int] = {
    "2 Days (Weekend)": 2,
    "3-4 Days (Long weekend)": 4,
    "5-7 Days (Full week)": 6,
}

DESTINATIONS: Dict[str, DestinationInfo] = {
    "Nashville": DestinationInfo("Nashville", "USA", 36.1627, -86.7816, "America/Chicago", 0.9, "BNA"),
    "NYC": DestinationInfo("New York City", "USA", 40.7128, -74.0060, "America/New_York", 1.4, "JFK"),
    "Chicago": DestinationInfo("Chicago", "USA", 41.8781, -87.6298, "America/Chicago", 1.1, "ORD"),
    "LA": DestinationInfo("Los Angeles", "USA", 34.0522, -118.2437, "America/Los_Angeles", 1.3, "LAX"),
    "Austin": DestinationInfo("Austin", "USA", 30.2672, -97.7431, "America/Chicago", 1.0, "AUS"),
    "Boston": DestinationInfo("Boston", "USA", 42.3601, -71.0589, "America/New_York", 1.2, "BOS"),
    "Charleston": DestinationInfo("Charleston", "USA", 32.7765, -79.9311, "America/New_York", 1.0, "CHS"),
}

DESTINATION_ACTIVITIES: Dict[str, Dict[str, List[str]]] = {
    "Nashville": {
        "sports": ["Sounds Baseball Game", "Titans Game", "Predators Game"],
        "outdoor": ["Cumberland River Kayaking", "Centennial Park", "Golf at Hermitage"],
        "beach": ["Percy Priest Lake", "Pool Day"],
        "nightlife": ["Broadway Bar Crawl", "Printers Alley", "The Gulch Bars"],
        "food": ["Hot Chicken Tour", "BBQ Trail", "Biscuit Love Brunch"],
        "culture": ["Country Music Hall of Fame", "Grand Ole Opry", "Ryman Auditorium"],
    },
    "NYC": {
        "sports": ["Yankees Game", "Mets Game", "Knicks Game"],
        "outdoor": ["Central Park", "High Line Walk", "Brooklyn Bridge Walk"],
        "beach": ["Coney Island", "Rockaway Beach"],
        "nightlife": ["Greenwich Village", "Rooftop Bars", "Brooklyn Brewery"],
        "food": ["Pizza Tour", "Chinatown", "Little Italy"],
        "culture": ["MET Museum", "Broadway Show", "Statue of Liberty"],
    },
    "Chicago": {
        "sports": ["Cubs at Wrigley", "White Sox Game", "Bulls Game"],
        "outdoor": ["Lakefront Trail", "Millennium Park", "Lincoln Park"],
        "beach": ["North Avenue Beach", "Oak Street Beach"],
        "nightlife": ["River North", "Wicker Park", "Blues Club"],
        "food": ["Deep Dish Pizza Tour", "Chicago Hot Dogs", "Steakhouse Dinner"],
        "culture": ["Art Institute", "Architecture Tour", "Field Museum"],
    },
    "LA": {
        "sports": ["Dodgers Game", "Lakers Game", "Clippers Game"],
        "outdoor": ["Griffith Park Hike", "Hollywood Hills", "Venice Boardwalk"],
        "beach": ["Santa Monica", "Venice Beach", "Malibu"],
        "nightlife": ["Hollywood Clubs", "Downtown LA", "Craft Brewery Tour"],
        "food": ["Taco Tour", "Korean BBQ", "Celebrity Chef Restaurant"],
        "culture": ["Getty Museum", "Hollywood Walk of Fame", "Universal Studios"],
    },
    "Austin": {
        "sports": ["UT Game", "Round Rock Express", "Austin FC"],
        "outdoor": ["Barton Springs", "Lady Bird Lake", "Zilker Park"],
        "beach": ["Lake Travis", "Barton Creek Greenbelt"],
        "nightlife": ["Sixth Street", "Rainey Street", "Live Music Venues"],
        "food": ["BBQ Trail", "Taco Crawl", "Food Truck Park"],
        "culture": ["State Capitol", "LBJ Library", "South Congress"],
    },
    "Boston": {
        "sports": ["Red Sox at Fenway", "Celtics Game", "Bruins Game"],
        "outdoor": ["Freedom Trail", "Boston Common", "Harbor Islands"],
        "beach": ["Carson Beach", "Revere Beach"],
        "nightlife": ["Faneuil Hall", "Fenway Bars", "Seaport District"],
        "food": ["Seafood Tour", "Italian in North End", "Oyster Bar"],
        "culture": ["Freedom Trail", "Harvard Tour", "Museum of Fine Arts"],
    },
    "Charleston": {
        "sports": ["RiverDogs Game", "College of Charleston"],
        "outdoor": ["Historic Walking Tour", "Shem Creek", "Angel Oak Tree"],
        "beach": ["Folly Beach", "Sullivans Island", "Isle of Palms"],
        "nightlife": ["King Street", "Upper King", "Cocktail Club"],
        "food": ["Lowcountry Cuisine", "Shrimp & Grits Tour", "Oyster Roast"],
        "culture": ["Historic District", "Fort Sumter", "Plantation Tours"],
    },
}


def default_catalog() -> DestinationCatalog:
    return DestinationCatalog(
        destinations=dict(DESTINATIONS),
        activities={label: {cat: list(items) for cat, items in pools.items()} for label, pools in DESTINATION_ACTIVITIES.items()},
    )
