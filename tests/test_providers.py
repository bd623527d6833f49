import asyncio
from datetime import date
from typing import List

import httpx

from trip_consensus.schemas import DateWindow
from trip_consensus.tools import providers
from trip_consensus.tools.providers import (
    EventListing,
    GooglePlacesProvider,
    PriceRange,
    TicketmasterEventProvider,
    categorize_events,
    price_level_label,
)

WINDOW = DateWindow(label="Early July (1-15)", start=date(2025, 7, 1), end=date(2025, 7, 15))


class DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://example.invalid")
            raise httpx.HTTPStatusError("boom", request=request, response=httpx.Response(self.status_code))
        return None

    def json(self):
        return self._payload


class DummyAsyncClient:
    def __init__(self, payloads, *args, **kwargs):
        self.payloads = list(payloads)
        self.requests: List[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def get(self, url, params=None):
        self.requests.append((url, params))
        return self.payloads.pop(0)


def _install_client(monkeypatch, *responses):
    client = DummyAsyncClient(responses)
    monkeypatch.setattr(providers.httpx, "AsyncClient", lambda *a, **kw: client)
    return client


def test_ticketmaster_parses_events_and_price_ranges(monkeypatch):
    payload = {
        "_embedded": {
            "events": [
                {
                    "name": "Predators vs Blues",
                    "url": "https://tm.example/e1",
                    "dates": {"start": {"localDate": "2025-07-04"}},
                    "_embedded": {"venues": [{"name": "Bridgestone Arena"}]},
                    "priceRanges": [{"min": 45, "max": 210}],
                },
                {"name": "Open Mic", "dates": {"start": {}}},
                {"name": "   "},
            ]
        }
    }
    client = _install_client(monkeypatch, DummyResponse(payload))

    events = asyncio.run(TicketmasterEventProvider(api_key="tm-key").search("Nashville", WINDOW))

    assert [event.name for event in events] == ["Predators vs Blues", "Open Mic"]
    assert events[0].price_range == PriceRange(min=45.0, max=210.0)
    assert events[0].venue == "Bridgestone Arena"
    assert events[1].venue == "Venue TBD"
    url, params = client.requests[0]
    assert url == TicketmasterEventProvider.SEARCH_ENDPOINT
    assert params["city"] == "Nashville"
    assert params["startDateTime"] == "2025-07-01T00:00:00Z"


def test_ticketmaster_without_key_or_on_error_returns_nothing(monkeypatch):
    monkeypatch.delenv("TICKETMASTER_API_KEY", raising=False)
    assert asyncio.run(TicketmasterEventProvider().search("Austin", WINDOW)) == []

    _install_client(monkeypatch, DummyResponse({}, status_code=503))
    assert asyncio.run(TicketmasterEventProvider(api_key="k").search("Austin", WINDOW)) == []


def test_google_places_two_step_lookup(monkeypatch):
    client = _install_client(
        monkeypatch,
        DummyResponse({"candidates": [{"place_id": "abc"}]}),
        DummyResponse({"result": {"price_level": 3, "rating": 4.4, "formatted_address": "Boston, MA"}}),
    )

    place = asyncio.run(GooglePlacesProvider(api_key="g-key").lookup("Boston"))

    assert place.price_level == 3
    assert place.rating == 4.4
    assert place.address == "Boston, MA"
    assert client.requests[1][1]["place_id"] == "abc"


def test_google_places_handles_missing_candidates(monkeypatch):
    _install_client(monkeypatch, DummyResponse({"candidates": []}))

    assert asyncio.run(GooglePlacesProvider(api_key="g-key").lookup("Atlantis")) is None


def test_categorize_events_by_name():
    events = [
        EventListing(name="Cubs vs Cardinals", date=None, venue="Wrigley"),
        EventListing(name="Summer Concert Series", date=None, venue="Park"),
        EventListing(name="Farmers Market", date=None, venue="Square"),
    ]

    buckets = categorize_events(events)

    assert [e.name for e in buckets["sports"]] == ["Cubs vs Cardinals"]
    assert [e.name for e in buckets["music"]] == ["Summer Concert Series"]
    assert [e.name for e in buckets["other"]] == ["Farmers Market"]


def test_price_level_labels():
    assert price_level_label(0) == "Free"
    assert price_level_label(2) == "Moderate"
    assert price_level_label(None) == "Price not available"


def test_ticketmaster_tolerates_unexpected_payload_shapes(monkeypatch):
    _install_client(monkeypatch, DummyResponse(["unexpected"]))
    assert asyncio.run(TicketmasterEventProvider(api_key="k").search("Austin", WINDOW)) == []

    _install_client(monkeypatch, DummyResponse({"_embedded": {"events": "none"}}))
    assert asyncio.run(TicketmasterEventProvider(api_key="k").search("Austin", WINDOW)) == []

    odd_entries = {
        "_embedded": {
            "events": [
                "x",
                None,
                {
                    "name": "Austin FC Match",
                    "dates": ["2025-07-04"],
                    "_embedded": {"venues": ["Q2 Stadium"]},
                    "priceRanges": [{"min": "cheap", "max": 80}],
                    "url": 42,
                },
            ]
        }
    }
    _install_client(monkeypatch, DummyResponse(odd_entries))
    events = asyncio.run(TicketmasterEventProvider(api_key="k").search("Austin", WINDOW))

    assert events == [EventListing(name="Austin FC Match", date=None, venue="Venue TBD")]


def test_google_places_tolerates_unexpected_payload_shapes(monkeypatch):
    _install_client(monkeypatch, DummyResponse(["unexpected"]))
    assert asyncio.run(GooglePlacesProvider(api_key="g").lookup("Austin")) is None

    _install_client(monkeypatch, DummyResponse({"candidates": ["abc"]}))
    assert asyncio.run(GooglePlacesProvider(api_key="g").lookup("Austin")) is None

    _install_client(
        monkeypatch,
        DummyResponse({"candidates": [{"place_id": "abc"}]}),
        DummyResponse({"result": ["not", "a", "dict"]}),
    )
    place = asyncio.run(GooglePlacesProvider(api_key="g").lookup("Austin"))
    assert place.price_level is None
    assert place.rating is None
    assert place.address is None

    _install_client(
        monkeypatch,
        DummyResponse({"candidates": [{"place_id": "abc"}]}),
        DummyResponse(["still", "wrong"]),
    )
    assert asyncio.run(GooglePlacesProvider(api_key="g").lookup("Austin")).price_level is None
