"""
Refresh controller: keeps CO2 annotations current on a live results page.

Three APScheduler triggers run the same scan:
- startup: once, shortly after activation (late-loading results)
- polling: at a fixed interval for the life of the controller
- mutation: once per observed DOM change batch, after a short delay

The scan is idempotent. Listings already carrying the annotation are
skipped, and each remaining listing is processed in its own task so a
slow lookup never holds up the others.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.memory import MemoryJobStore

from flightco2.config import Settings, get_settings
from flightco2.scrapers.documents import FlightDocument
from flightco2.scrapers.extractors import extract_flight
from flightco2.services.emissions import EmissionsCalculator, format_label

logger = logging.getLogger(__name__)


@dataclass
class ControllerState:
    """
    Per-activation state. Created by ``RefreshController.__init__`` and only
    read or written by that controller.
    """
    started: bool = False
    observing: bool = False
    first_scan_logged: bool = False
    inflight: set[asyncio.Task] = field(default_factory=set)
    observer_task: Optional[asyncio.Task] = None


class RefreshController:
    def __init__(
        self,
        document: FlightDocument,
        calculator: EmissionsCalculator,
        settings: Optional[Settings] = None,
    ):
        self.document = document
        self.calculator = calculator
        self.settings = settings or get_settings()
        self.state = ControllerState()
        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            timezone=self.settings.scheduler_timezone,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self):
        """Schedule startup and polling scans, then observe once the page has loaded."""
        if self.state.started:
            logger.warning("Refresh controller already running")
            return

        self.scheduler.add_job(
            self._run_scan,
            trigger=DateTrigger(run_date=self._after(self.settings.startup_delay_seconds)),
            args=["startup"],
            id="startup_scan",
            name="Startup scan",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self._run_scan,
            trigger=IntervalTrigger(seconds=self.settings.poll_interval_seconds),
            args=["poll"],
            id="poll_scan",
            name="Polling scan",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self.state.started = True
        logger.info(
            f"Refresh controller started (startup in {self.settings.startup_delay_seconds}s, "
            f"polling every {self.settings.poll_interval_seconds}s)"
        )

        self.state.observer_task = asyncio.create_task(self._observe_when_loaded())

    async def stop(self):
        if not self.state.started:
            return
        if self.state.observer_task and not self.state.observer_task.done():
            self.state.observer_task.cancel()
        self.scheduler.shutdown(wait=False)
        self.state.started = False
        logger.info("Refresh controller stopped")

    async def drain(self):
        """Wait for in-flight listings to finish. Nothing is cancelled."""
        if self.state.inflight:
            await asyncio.gather(*list(self.state.inflight), return_exceptions=True)

    async def _observe_when_loaded(self):
        try:
            await self.document.wait_until_loaded()
            await self.document.observe(self.on_mutation)
            self.state.observing = True
            logger.info("Watching page for new flight listings")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Could not start page observer: {e}")

    def on_mutation(self):
        """Schedule one delayed scan for this batch of DOM changes."""
        if not self.state.started:
            return
        self.scheduler.add_job(
            self._run_scan,
            trigger=DateTrigger(run_date=self._after(self.settings.mutation_debounce_seconds)),
            args=["mutation"],
            name="Mutation scan",
        )

    def _after(self, seconds: float) -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=seconds)

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    async def _run_scan(self, trigger: str):
        try:
            await self.scan_and_annotate()
        except Exception as e:
            logger.error(f"Error in {trigger} scan: {e}")

    async def scan_and_annotate(self) -> list[asyncio.Task]:
        """
        Start processing every unannotated listing.

        Returns the tasks started by this scan. They run independently;
        callers only await them when they need the results.
        """
        candidates = await self.document.candidates(self.settings.flight_selectors)

        if not self.state.first_scan_logged:
            logger.info(f"First scan found {len(candidates)} flight elements")
            self.state.first_scan_logged = True
        else:
            logger.debug(f"Found {len(candidates)} flight elements")

        # A listing whose lookup is still running is not annotated yet, so
        # later scans start another pipeline for it. Repeat lookups are
        # bounded by message_timeout_seconds / poll_interval_seconds per listing.
        tasks = []
        for element in candidates:
            try:
                skip = await self.document.is_annotated(element)
            except Exception as e:
                logger.error(f"Error checking flight element: {e}")
                skip = True
            if skip:
                await self.document.release(element)
                continue

            task = asyncio.create_task(self.process_listing(element))
            self.state.inflight.add(task)
            task.add_done_callback(self.state.inflight.discard)
            tasks.append(task)

        return tasks

    async def process_listing(self, element: Any) -> Optional[float]:
        """Extract, estimate and annotate one listing. Never raises."""
        try:
            flight = extract_flight(await self.document.snapshot(element))
            if flight is None:
                return None

            logger.info(f"Found flight from {flight.origin} to {flight.destination}")
            co2 = await self.calculator.calculate(flight.origin, flight.destination, flight.flight_code)

            if await self.document.annotate(element, format_label(co2)):
                logger.info(f"Adding CO2 info: {co2} kg/passenger ({flight.route_key})")
            else:
                logger.debug(f"{flight.route_key} already annotated by another scan")
            return co2

        except Exception as e:
            logger.error(f"Error processing flight element: {e}")
            return None

        finally:
            await self.document.release(element)
