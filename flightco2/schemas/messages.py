from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional


class FetchDistanceRequest(BaseModel):
    action: Literal["fetchDistance"] = "fetchDistance"
    depart: str
    arrivee: str


class FetchAircraftRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["fetchAircraft"] = "fetchAircraft"
    flight_code: Optional[str] = Field(default=None, alias="flightCode")


class PingResponse(BaseModel):
    status: str = "ok"


class DistanceResponse(BaseModel):
    distance: Optional[float] = None


class AircraftResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    aircraft_type: Optional[str] = Field(default=None, alias="aircraftType")
