from flightco2.services.aircraft import AircraftProfile, AIRCRAFT_PROFILES, DEFAULT_PROFILE, profile_for
from flightco2.services.routes import FALLBACK_DISTANCES_KM, route_key, fallback_distance_km
from flightco2.services.retrieval import FlightDataService
from flightco2.services.messaging import MessageBus, BackgroundClient
from flightco2.services.background import BackgroundService
from flightco2.services.emissions import EmissionsCalculator, estimate_co2, format_label

__all__ = [
    "AircraftProfile",
    "AIRCRAFT_PROFILES",
    "DEFAULT_PROFILE",
    "profile_for",
    "FALLBACK_DISTANCES_KM",
    "route_key",
    "fallback_distance_km",
    "FlightDataService",
    "MessageBus",
    "BackgroundClient",
    "BackgroundService",
    "EmissionsCalculator",
    "estimate_co2",
    "format_label",
]
