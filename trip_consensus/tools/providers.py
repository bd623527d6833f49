"""External price and place lookups.

Providers are best-effort: every implementation returns an empty list or
``None`` instead of raising, including when no API key is configured.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol
import logging
import math
import os

import httpx

from trip_consensus.schemas import DateWindow

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float

@dataclass(frozen=True)
class EventListing:
    name: str
    date: Optional[str]
    venue: str
    price_range: Optional[PriceRange] = None
    url: Optional[str] = None

@dataclass(frozen=True)
class PlaceInfo:
    price_level: Optional[int]
    rating: Optional[float]
    address: Optional[str]

class EventPriceProvider(Protocol):
    async def search(self, destination: str, window: DateWindow) -> List[EventListing]: ...

class PlaceInfoProvider(Protocol):
    async def lookup(self, destination: str) -> Optional[PlaceInfo]: ...

class NullEventProvider:
    async def search(self, destination: str, window: DateWindow) -> List[EventListing]:
        return []

class NullPlaceProvider:
    async def lookup(self, destination: str) -> Optional[PlaceInfo]:
        return None

class TicketmasterEventProvider:
    """Ticketed events from the Ticketmaster discovery API."""
    SEARCH_ENDPOINT = "https://app.ticketmaster.com/discovery/v2/events.json"

    def __init__(self, *, api_key: Optional[str] = None, timeout: float = 10.0, page_size: int = 50):
        self.api_key = api_key or os.getenv("TICKETMASTER_API_KEY")
        self.timeout = timeout
        self.page_size = page_size

    async def search(self, destination: str, window: DateWindow) -> List[EventListing]:
        if not self.api_key:
            return []
        params = {
            "apikey": self.api_key,
            "city": destination,
            "startDateTime": f"{window.start.isoformat()}T00:00:00Z",
            "endDateTime": f"{window.end.isoformat()}T23:59:59Z",
            "size": self.page_size,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.SEARCH_ENDPOINT, params=params)
                response.raise_for_status()
                data = response.json()
        except Exception:
            logger.warning("Ticketmaster search failed for %s", destination, exc_info=True)
            return []
        raw_events = _as_dict(_as_dict(data).get("_embedded")).get("events")
        if not isinstance(raw_events, list):
            return []
        return [listing for listing in (self._to_listing(raw) for raw in raw_events) if listing]

    @staticmethod
    def _to_listing(raw: Any) -> Optional[EventListing]:
        if not isinstance(raw, dict):
            return None
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        start = _as_dict(_as_dict(raw.get("dates")).get("start"))
        venues = _as_dict(raw.get("_embedded")).get("venues")
        venue = None
        if isinstance(venues, list) and venues:
            venue = _as_dict(venues[0]).get("name")
        price_range = None
        ranges = raw.get("priceRanges")
        if isinstance(ranges, list) and ranges:
            low, high = _as_dict(ranges[0]).get("min"), _as_dict(ranges[0]).get("max")
            if _is_amount(low) and _is_amount(high):
                price_range = PriceRange(min=float(low), max=float(high))
        when = start.get("localDate") or start.get("dateTime")
        url = raw.get("url")
        return EventListing(
            name=name.strip(),
            date=when if isinstance(when, str) else None,
            venue=venue if isinstance(venue, str) and venue else "Venue TBD",
            price_range=price_range,
            url=url if isinstance(url, str) else None,
        )

class GooglePlacesProvider:
    """Destination price level and rating via the Google Places API."""
    FIND_ENDPOINT = "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"
    DETAILS_ENDPOINT = "https://maps.googleapis.com/maps/api/place/details/json"

    def __init__(self, *, api_key: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key or os.getenv("GOOGLE_PLACES_API_KEY")
        self.timeout = timeout

    async def lookup(self, destination: str) -> Optional[PlaceInfo]:
        if not self.api_key:
            return None
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                found = await client.get(
                    self.FIND_ENDPOINT,
                    params={"input": destination, "inputtype": "textquery", "key": self.api_key},
                )
                found.raise_for_status()
                candidates = _as_dict(found.json()).get("candidates")
                place_id = _as_dict(candidates[0]).get("place_id") if isinstance(candidates, list) and candidates else None
                if not place_id:
                    logger.info("No place id found for %s", destination)
                    return None
                details = await client.get(
                    self.DETAILS_ENDPOINT,
                    params={
                        "place_id": place_id,
                        "fields": "price_level,rating,formatted_address",
                        "key": self.api_key,
                    },
                )
                details.raise_for_status()
                result = _as_dict(_as_dict(details.json()).get("result"))
        except Exception:
            logger.warning("Places lookup failed for %s", destination, exc_info=True)
            return None
        price_level = result.get("price_level")
        rating = result.get("rating")
        address = result.get("formatted_address")
        return PlaceInfo(
            price_level=price_level if isinstance(price_level, int) and not isinstance(price_level, bool) else None,
            rating=float(rating) if _is_amount(rating) else None,
            address=address if isinstance(address, str) else None,
        )

def categorize_events(events: Iterable[EventListing]) -> Dict[str, List[EventListing]]:
    """Bucket listings into sports, music and other by name keywords."""
    buckets: Dict[str, List[EventListing]] = {"sports": [], "music": [], "other": []}
    for event in events:
        name = event.name.lower()
        if "concert" in name or " live" in name or name.endswith(" tour"):
            buckets["music"].append(event)
        elif "game" in name or " vs" in name or "match" in name:
            buckets["sports"].append(event)
        else:
            buckets["other"].append(event)
    return buckets

def price_level_label(price_level: Optional[int]) -> str:
    return {
        0: "Free",
        1: "Inexpensive",
        2: "Moderate",
        3: "Expensive",
        4: "Very Expensive",
    }.get(price_level, "Price not available")

def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}

def _is_amount(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False
