"""
Approximate route distances used when the live distance lookup fails.

Values are raw great-circle kilometres. The routing correction is applied
on top of them, the same way it is applied to live distances.
"""

# Great-circle to flown-route correction (+10%)
ROUTING_CORRECTION = 1.1

DEFAULT_DISTANCE_KM = 800

FALLBACK_DISTANCES_KM: dict[str, int] = {
    "CDG-LTN": 366,   # Paris - London Luton
    "CDG-LHR": 379,   # Paris - London Heathrow
    "CDG-MAD": 1062,  # Paris - Madrid
    "CDG-BCN": 831,   # Paris - Barcelona
    "CDG-MRS": 661,   # Paris - Marseille
    "CDG-AMS": 398,   # Paris - Amsterdam
    "CDG-FRA": 450,   # Paris - Frankfurt
    "CDG-FCO": 1107,  # Paris - Rome
}


def route_key(origin: str, destination: str) -> str:
    return f"{origin}-{destination}"


def fallback_distance_km(origin: str, destination: str) -> int:
    """Uncorrected distance for the route, or the default when it is unknown."""
    return FALLBACK_DISTANCES_KM.get(route_key(origin, destination), DEFAULT_DISTANCE_KM)
