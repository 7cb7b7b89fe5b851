import argparse
import asyncio
import logging
import pathlib
import sys
from typing import Optional

from flightco2.config import get_settings
from flightco2.scheduler import RefreshController
from flightco2.scrapers.documents import FlightDocument, SoupDocument
from flightco2.services.background import BackgroundService
from flightco2.services.emissions import EmissionsCalculator
from flightco2.services.messaging import BackgroundClient, MessageBus

settings = get_settings()

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class Pipeline:
    """Wires the background service, message bus and refresh controller for one page."""

    def __init__(self, document: FlightDocument, background: Optional[BackgroundService] = None):
        self.background = background or BackgroundService()
        self.bus = MessageBus(self.background.handle)
        self.client = BackgroundClient(self.bus)
        self.controller = RefreshController(document, EmissionsCalculator(self.client))

    async def __aenter__(self) -> "Pipeline":
        await self.bus.start()
        if await self.client.ping():
            logger.info("✅ Background service is running")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.controller.stop()
        await self.controller.drain()
        await self.bus.stop()
        await self.background.close()


async def annotate_file(source: pathlib.Path, output: pathlib.Path) -> int:
    document = SoupDocument(source.read_text(encoding="utf-8"))

    async with Pipeline(document) as pipeline:
        tasks = await pipeline.controller.scan_and_annotate()
        results = await asyncio.gather(*tasks)

    annotated = sum(1 for co2 in results if co2 is not None)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document.html(), encoding="utf-8")
    logger.info(f"✅ Wrote {output} with {annotated} annotated flights")
    return annotated


async def watch_url(url: str, seconds: Optional[float], headless: bool):
    from flightco2.scrapers.browser import BrowserSession, PlaywrightDocument

    async with BrowserSession(headless=headless) as session:
        page = await session.open(url)
        async with Pipeline(PlaywrightDocument(page)) as pipeline:
            await pipeline.controller.start()
            if seconds is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(seconds)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="flightco2", description="Annotate flight results with CO2 per passenger")
    ap.add_argument("--log-level", default=None)
    sub = ap.add_subparsers(dest="command", required=True)

    annotate = sub.add_parser("annotate", help="annotate a saved results page")
    annotate.add_argument("input")
    annotate.add_argument("-o", "--output", default=None)

    watch = sub.add_parser("watch", help="open a results page and keep it annotated")
    watch.add_argument("url")
    watch.add_argument("--seconds", type=float, default=None)
    watch.add_argument("--headed", action="store_true")

    return ap


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "annotate":
        source = pathlib.Path(args.input)
        if not source.is_file():
            logger.error(f"❌ No such file: {source}")
            return 2
        output = pathlib.Path(args.output) if args.output else source.with_name(f"{source.stem}.co2.html")
        asyncio.run(annotate_file(source, output))
        return 0

    try:
        asyncio.run(watch_url(args.url, args.seconds, headless=settings.headless and not args.headed))
    except KeyboardInterrupt:
        logger.info("🛑 Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
