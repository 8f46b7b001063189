# app/channels/providers/ors.py
"""OpenRouteService geocoding and driving directions over httpx."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from app.orchestrator.temporal.common.errors import (
    TransientRemoteError,
    remote_error_for_status,
)

logger = logging.getLogger("freight.ors")

ORS_BASE_URL = "https://api.openrouteservice.org"
GEOCODE_URL = f"{ORS_BASE_URL}/geocode/search"
DIRECTIONS_URL = f"{ORS_BASE_URL}/v2/directions/driving-car"

Coordinates = Tuple[float, float]  # (lon, lat), as ORS returns them


async def _get_json(client: httpx.AsyncClient, url: str, params: Dict[str, Any]) -> Any:
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as e:
        logger.warning("ORS request failed with %s: %s", e.response.status_code, url)
        raise remote_error_for_status(e.response.status_code, e.response.text[:200]) from e
    except httpx.TransportError as e:
        raise TransientRemoteError(f"ORS transport error: {e}") from e
    except ValueError as e:
        raise TransientRemoteError(f"ORS returned invalid JSON: {e}") from e


async def geocode(client: httpx.AsyncClient, api_key: str, place: str) -> Optional[Coordinates]:
    """Best match for `place`, or None when the provider has no result."""
    data = await _get_json(client, GEOCODE_URL, {"api_key": api_key, "text": place, "size": 1})
    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list) or not features:
        return None
    try:
        lon, lat = features[0]["geometry"]["coordinates"][:2]
    except (KeyError, TypeError, ValueError):
        return None
    return float(lon), float(lat)


async def route_duration_seconds(
    client: httpx.AsyncClient,
    api_key: str,
    start: Coordinates,
    end: Coordinates,
) -> Optional[float]:
    """Baseline driving time between two points, or None when there is no route."""
    data = await _get_json(
        client,
        DIRECTIONS_URL,
        {
            "api_key": api_key,
            "start": f"{start[0]},{start[1]}",
            "end": f"{end[0]},{end[1]}",
        },
    )
    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list) or not features:
        return None
    return float(features[0]["properties"]["summary"]["duration"])
