"""Per-run cache and fan-out for external destination lookups."""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from trip_consensus.schemas import DateWindow
from trip_consensus.tools.providers import (
    EventListing,
    EventPriceProvider,
    PlaceInfo,
    PlaceInfoProvider,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_CONSENSUS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


@dataclass(frozen=True)
class DestinationLookup:
    place: Optional[PlaceInfo] = None
    events: List[EventListing] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.place is None and not self.events


class RunLookupCache:
    """Memoise lookups for the lifetime of one planning run.

    Keys are ``(destination, window label)``. Concurrent callers asking for the
    same key share the in-flight task instead of issuing a second request.
    """

    def __init__(self) -> None:
        self._tasks: Dict[Tuple[str, str], asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    async def get_or_fetch(
        self,
        key: Tuple[str, str],
        factory: Callable[[], Awaitable[DestinationLookup]],
    ) -> DestinationLookup:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
        return await task


async def fetch_destination_data(
    destination: str,
    window: DateWindow,
    places: PlaceInfoProvider,
    events: EventPriceProvider,
    *,
    timeout: float,
    cache: RunLookupCache | None = None,
) -> DestinationLookup:
    """Query both providers concurrently; never raises.

    Each call gets its own timeout. A provider that errors or times out simply
    contributes nothing and the caller falls back to catalog constants.
    """

    async def _fetch() -> DestinationLookup:
        place_result, event_result = await asyncio.gather(
            _guarded(places.lookup(destination), timeout, f"place lookup for {destination}"),
            _guarded(events.search(destination, window), timeout, f"event search for {destination}"),
        )
        listings = [item for item in (event_result or []) if isinstance(item, EventListing)]
        place = place_result if isinstance(place_result, PlaceInfo) else None
        logger.debug(
            "Lookup for %s (%s): place=%s events=%d",
            destination,
            window.label,
            "yes" if place else "no",
            len(listings),
        )
        return DestinationLookup(place=place, events=listings)

    if cache is None:
        return await _fetch()
    return await cache.get_or_fetch((destination, window.label), _fetch)


async def _guarded(call: Awaitable, timeout: float, description: str):
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Timed out after %.1fs waiting for %s", timeout, description)
    except Exception:
        logger.warning("Provider failure during %s", description, exc_info=True)
    return None
