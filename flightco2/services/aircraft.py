from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AircraftProfile:
    fuel_burn_per_km: float  # kg of fuel per km
    passenger_capacity: int


DEFAULT_PROFILE = AircraftProfile(fuel_burn_per_km=5.0, passenger_capacity=180)

# Keys are matched as substrings of the resolved type, first hit wins,
# so order matters (e.g. "B737" before "B738").
AIRCRAFT_PROFILES: dict[str, AircraftProfile] = {
    "A320": AircraftProfile(2.5, 180),
    "A321": AircraftProfile(2.7, 220),
    "A319": AircraftProfile(2.3, 140),
    "B737": AircraftProfile(2.4, 160),
    "B738": AircraftProfile(2.6, 180),
    "B739": AircraftProfile(2.8, 190),
    "A380": AircraftProfile(4.7, 550),
    "B777": AircraftProfile(3.8, 350),
    "B787": AircraftProfile(3.2, 290),
    "A350": AircraftProfile(3.1, 330),
}


def profile_for(aircraft_type: Optional[str]) -> AircraftProfile:
    """Return the profile of the first table key contained in ``aircraft_type``."""
    if not aircraft_type:
        return DEFAULT_PROFILE

    for family, profile in AIRCRAFT_PROFILES.items():
        if family in aircraft_type:
            return profile

    logger.debug(f"No profile for aircraft type {aircraft_type}, using defaults")
    return DEFAULT_PROFILE
