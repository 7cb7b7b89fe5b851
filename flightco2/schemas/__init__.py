from flightco2.schemas.messages import (
    FetchDistanceRequest,
    FetchAircraftRequest,
    PingResponse,
    DistanceResponse,
    AircraftResponse,
)

__all__ = [
    "FetchDistanceRequest",
    "FetchAircraftRequest",
    "PingResponse",
    "DistanceResponse",
    "AircraftResponse",
]
