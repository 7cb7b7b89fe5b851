"""
Per-passenger CO2 estimate for a single flight.

The model is a fixed formula over distance and an aircraft profile:

    co2 = (distance * 3.7 * 3 * fuel_burn) / (capacity * 0.85)

3.7 is kg CO2 per kg of fuel, 3 is the multi-leg multiplier, 0.85 the
load factor. Missing inputs fall back to route and aircraft defaults, so
an estimate is always produced.
"""
import asyncio
import logging
from typing import Optional

from flightco2.services.aircraft import AircraftProfile, profile_for
from flightco2.services.messaging import BackgroundClient
from flightco2.services.routes import ROUTING_CORRECTION, fallback_distance_km

logger = logging.getLogger(__name__)

CO2_PER_KG_FUEL = 3.7
LEG_MULTIPLIER = 3
LOAD_FACTOR = 0.85


def effective_distance_km(origin: str, destination: str, live_distance_km: Optional[float] = None) -> float:
    """Live distance if known (already corrected), else the corrected fallback."""
    if live_distance_km is not None:
        return live_distance_km
    return fallback_distance_km(origin, destination) * ROUTING_CORRECTION


def co2_per_passenger(distance_km: float, profile: AircraftProfile) -> float:
    co2 = (distance_km * CO2_PER_KG_FUEL * LEG_MULTIPLIER * profile.fuel_burn_per_km) / (
        profile.passenger_capacity * LOAD_FACTOR
    )
    return round(co2, 1)


def estimate_co2(
    origin: str,
    destination: str,
    live_distance_km: Optional[float] = None,
    aircraft_type: Optional[str] = None,
) -> float:
    distance = effective_distance_km(origin, destination, live_distance_km)
    profile = profile_for(aircraft_type)
    return co2_per_passenger(distance, profile)


def format_label(co2: float) -> str:
    return f"🌍 CO₂ : {co2:.1f} kg/passager"


class EmissionsCalculator:
    """Page-side estimate: asks the background for live data, then applies the model."""

    def __init__(self, client: BackgroundClient):
        self.client = client

    async def calculate(self, origin: str, destination: str, flight_code: Optional[str] = None) -> float:
        logger.info(f"Calculating CO2 for {origin} to {destination}, flight {flight_code or '-'}")

        distance, aircraft_type = await asyncio.gather(
            self.client.fetch_distance(origin, destination),
            self._aircraft_type(flight_code),
        )

        if distance is None:
            logger.info(f"Could not fetch distance for {origin}-{destination}, using fallback table")
        if flight_code and aircraft_type is None:
            logger.info(f"No aircraft type for {flight_code}, using default profile")

        return estimate_co2(origin, destination, distance, aircraft_type)

    async def _aircraft_type(self, flight_code: Optional[str]) -> Optional[str]:
        if not flight_code:
            return None
        return await self.client.fetch_aircraft_type(flight_code)
