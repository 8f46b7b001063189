# app/channels/traffic_service.py
"""
TrafficService estimates the traffic delay for a route.

Both places are geocoded (concurrently, each under its own backoff loop),
then a driving route is requested; the delay is assumed to be 20% of the
baseline travel time, in whole minutes. The whole lookup is retried with
backoff as well, except when a place or route simply does not exist.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Tuple

import httpx

from app.channels.providers import ors
from app.common.clients import get_http_client
from app.orchestrator.temporal.common.backoff import BackoffPolicy, retry
from app.orchestrator.temporal.common.errors import NotFoundError

logger = logging.getLogger("freight.traffic")

# Share of baseline travel time assumed lost to congestion.
CONGESTION_FACTOR = 0.2


def compute_delay_minutes(base_duration_seconds: float) -> int:
    """
    Congestion delay, in whole minutes, for a route of the given baseline duration.

    Exact halves round to the even minute (Python's `round`): 150s -> 0,
    750s -> 2, 1950s -> 6. Rounding half away from zero would turn 150s into
    1 minute, and a 150s route is documented as no delay at all.
    """
    return int(round((base_duration_seconds * CONGESTION_FACTOR) / 60))


class TrafficService:
    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        policy: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api_key = api_key
        self._http = http_client
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    async def geocode(self, place: str) -> Optional[ors.Coordinates]:
        """Coordinates for `place`, or None if the provider knows no such place."""
        async def _attempt(attempt: int) -> Optional[ors.Coordinates]:
            logger.debug("Geocoding %r (attempt %d)", place, attempt)
            coords = await ors.geocode(self.http, self._api_key, place)
            if coords is None:
                logger.warning("No geocoding results for %r (attempt %d)", place, attempt)
            return coords

        return await retry(_attempt, policy=self._policy, sleep=self._sleep, name="geocode")

    async def _geocode_both(
        self, origin: str, destination: str
    ) -> Tuple[Optional[ors.Coordinates], Optional[ors.Coordinates]]:
        """Geocode both places concurrently; the first failure cancels the other lookup."""
        tasks = [
            asyncio.ensure_future(self.geocode(origin)),
            asyncio.ensure_future(self.geocode(destination)),
        ]
        try:
            origin_coords, dest_coords = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # wait for the cancelled lookup so nothing outlives this attempt
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return origin_coords, dest_coords

    async def get_delay_in_minutes(self, origin: str, destination: str) -> int:
        async def _attempt(attempt: int) -> int:
            started = time.monotonic()
            logger.info("Traffic lookup %s -> %s (attempt %d)", origin, destination, attempt)

            origin_coords, dest_coords = await self._geocode_both(origin, destination)
            if origin_coords is None or dest_coords is None:
                missing = origin if origin_coords is None else destination
                raise NotFoundError(f"no coordinates for {missing!r}", stage="geocoding")

            duration = await ors.route_duration_seconds(
                self.http, self._api_key, origin_coords, dest_coords
            )
            if duration is None:
                raise NotFoundError(f"no route from {origin!r} to {destination!r}", stage="routing")

            delay = compute_delay_minutes(duration)
            logger.info(
                "Traffic lookup done: delay=%d min base_duration=%.0fs elapsed_ms=%d",
                delay, duration, (time.monotonic() - started) * 1000,
            )
            return delay

        return await retry(_attempt, policy=self._policy, sleep=self._sleep, name="traffic")
