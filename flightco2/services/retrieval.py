"""
Live flight data lookups: route distance and aircraft type.

Both lookups scrape a public HTML page and pull a single value out of it
with a regular expression. Any failure (network, HTTP status, no match)
comes back as ``None`` so callers apply one fallback policy.
"""
import logging
import re
from typing import Optional

import httpx

from flightco2.config import Settings, get_settings
from flightco2.services.routes import ROUTING_CORRECTION

logger = logging.getLogger(__name__)

DISTANCE_PATTERN = re.compile(r"(\d{2,5}) km", re.ASCII)
AIRCRAFT_TYPE_PATTERN = re.compile(r"([A-Z0-9\-]+)\s+Aircraft Type", re.ASCII)

MIN_FLIGHT_CODE_LENGTH = 3


class FlightDataService:
    """
    Background-side client for the two external lookups.

    Usage:
        service = FlightDataService()
        km = await service.resolve_distance("CDG", "LTN")
        aircraft = await service.resolve_aircraft_type("AF1234")
        await service.close()
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.settings.user_agent},
                timeout=httpx.Timeout(
                    self.settings.http_timeout_seconds,
                    connect=self.settings.connect_timeout_seconds,
                ),
                follow_redirects=True,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _fetch_text(self, url: str) -> Optional[str]:
        try:
            client = await self._get_client()
            response = await client.get(url)
            response.raise_for_status()
            return response.text
        except Exception as e:
            logger.error(f"❌ Request to {url} failed: {e}")
            return None

    async def resolve_distance(self, origin: str, destination: str) -> Optional[float]:
        """
        Distance in km between two airports, corrected for routing.

        Returns None when the page can't be fetched or has no "<n> km" token.
        """
        url = self.settings.distance_url_template.format(depart=origin, arrivee=destination)
        logger.info(f"📩 Fetching distance for: {origin} to {destination}")

        text = await self._fetch_text(url)
        if text is None:
            return None

        match = DISTANCE_PATTERN.search(text)
        if not match:
            logger.warning(f"No distance found for {origin}-{destination}")
            return None

        return int(match.group(1)) * ROUTING_CORRECTION

    async def resolve_aircraft_type(self, flight_code: Optional[str]) -> Optional[str]:
        """Aircraft type identifier (e.g. "A320-200") operating a flight, or None."""
        if not flight_code or len(flight_code) < MIN_FLIGHT_CODE_LENGTH:
            logger.info("❌ Invalid flight code")
            return None

        url = self.settings.aircraft_url_template.format(flight_code=flight_code)
        logger.info(f"📩 Fetching aircraft type for flight: {flight_code}")

        text = await self._fetch_text(url)
        if text is None:
            return None

        match = AIRCRAFT_TYPE_PATTERN.search(text)
        if not match:
            logger.warning(f"No aircraft type found for {flight_code}")
            return None

        return match.group(1)
