import logging
from typing import Optional

from pydantic import ValidationError

from flightco2.schemas.messages import (
    AircraftResponse,
    DistanceResponse,
    FetchAircraftRequest,
    FetchDistanceRequest,
    PingResponse,
)
from flightco2.services.retrieval import FlightDataService

logger = logging.getLogger(__name__)


class BackgroundService:
    """
    Answers page-side messages: ping, fetchDistance, fetchAircraft.

    One instance per activation. ``_first_message_logged`` belongs to the
    instance, so a new activation logs its first message again.
    """

    def __init__(self, data_service: Optional[FlightDataService] = None):
        self.data_service = data_service or FlightDataService()
        self._first_message_logged = False

    async def handle(self, message: dict) -> Optional[dict]:
        if not self._first_message_logged:
            logger.info("📩 First message received, background service is active")
            self._first_message_logged = True

        action = message.get("action") if isinstance(message, dict) else None
        logger.debug(f"📩 Received message: {action}")

        try:
            if action == "ping":
                return PingResponse().model_dump()

            if action == "fetchDistance":
                request = FetchDistanceRequest.model_validate(message)
                distance = await self.data_service.resolve_distance(request.depart, request.arrivee)
                return DistanceResponse(distance=distance).model_dump()

            if action == "fetchAircraft":
                request = FetchAircraftRequest.model_validate(message)
                aircraft_type = await self.data_service.resolve_aircraft_type(request.flight_code)
                return AircraftResponse(aircraft_type=aircraft_type).model_dump(by_alias=True)

        except ValidationError as e:
            logger.error(f"❌ Invalid {action} message: {e}")
            return None

        logger.warning(f"❓ Unknown action: {action}")
        return None

    async def close(self):
        await self.data_service.close()
