"""
Request/response messaging between the page side and the background side.

Every request is a dict with an ``action`` tag plus payload. ``MessageBus.send``
returns exactly one reply per request: whatever the handler produced, or
``None`` when the handler failed, timed out, or the bus is not running.
"""
import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

from flightco2.config import get_settings

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict], Awaitable[Any]]


class MessageBus:
    """
    Queue-backed dispatcher that correlates replies with futures.

    Usage:
        bus = MessageBus(background.handle)
        await bus.start()
        reply = await bus.send({"action": "ping"})
        await bus.stop()
    """

    def __init__(self, handler: MessageHandler, timeout: Optional[float] = None):
        self.handler = handler
        self.timeout = timeout if timeout is not None else get_settings().message_timeout_seconds
        self._queue: Optional[asyncio.Queue] = None
        self._pending: dict[str, asyncio.Future] = {}
        self._dispatcher: Optional[asyncio.Task] = None
        self._handlers: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    async def start(self):
        if self.is_running:
            logger.warning("Message bus already running")
            return
        self._queue = asyncio.Queue()
        self._dispatcher = asyncio.create_task(self._dispatch_loop())

    async def stop(self):
        if self._dispatcher:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None

        for task in list(self._handlers):
            task.cancel()

        for future in self._pending.values():
            if not future.done():
                future.set_result(None)
        self._pending.clear()

    async def send(self, message: dict) -> Optional[Any]:
        if not self.is_running:
            logger.info("Background context not available at this moment")
            return None

        correlation_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[correlation_id] = future
        await self._queue.put((correlation_id, message))

        try:
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"No reply to {message.get('action')} after {self.timeout}s")
            return None
        finally:
            self._pending.pop(correlation_id, None)

    async def _dispatch_loop(self):
        while True:
            correlation_id, message = await self._queue.get()
            task = asyncio.create_task(self._handle(correlation_id, message))
            self._handlers.add(task)
            task.add_done_callback(self._handlers.discard)

    async def _handle(self, correlation_id: str, message: dict):
        try:
            reply = await self.handler(message)
        except Exception as e:
            logger.error(f"Handler failed for {message.get('action')}: {e}")
            reply = None
        self._resolve(correlation_id, reply)

    def _resolve(self, correlation_id: str, reply: Any):
        future = self._pending.get(correlation_id)
        if future is not None and not future.done():
            future.set_result(reply)


class BackgroundClient:
    """Page-side wrapper that turns bus replies into plain values."""

    def __init__(self, bus: MessageBus):
        self.bus = bus

    async def ping(self) -> bool:
        reply = await self.bus.send({"action": "ping"})
        return isinstance(reply, dict) and reply.get("status") == "ok"

    async def fetch_distance(self, depart: str, arrivee: str) -> Optional[float]:
        reply = await self.bus.send({"action": "fetchDistance", "depart": depart, "arrivee": arrivee})
        if not isinstance(reply, dict):
            return None
        return reply.get("distance") or None

    async def fetch_aircraft_type(self, flight_code: str) -> Optional[str]:
        reply = await self.bus.send({"action": "fetchAircraft", "flightCode": flight_code})
        if not isinstance(reply, dict):
            return None
        return reply.get("aircraftType") or None
