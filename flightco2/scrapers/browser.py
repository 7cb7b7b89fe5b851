import logging
from typing import Optional, Sequence

from playwright.async_api import async_playwright, Browser, ElementHandle, Page, Playwright

from flightco2.config import get_settings
from flightco2.scrapers.documents import (
    ANNOTATION_CLASS,
    ANNOTATION_STYLE,
    FlightDocument,
    MutationCallback,
)

logger = logging.getLogger(__name__)

MUTATION_BINDING = "__flightco2OnMutation"

# Runs in the page: checking the marker and appending happen in one JS turn.
ANNOTATE_JS = """
(element, args) => {
    if (element.querySelector('.' + args.marker)) {
        return false;
    }
    const node = document.createElement('div');
    node.classList.add(args.marker);
    node.textContent = args.label;
    for (const [prop, value] of Object.entries(args.style)) {
        node.style.setProperty(prop, value);
    }
    element.appendChild(node);
    return true;
}
"""

IS_ANNOTATED_JS = "(element, marker) => !!element.querySelector('.' + marker)"

OBSERVE_JS = """
(binding) => {
    const observer = new MutationObserver(() => window[binding]());
    observer.observe(document.body, { childList: true, subtree: true });
}
"""


class PlaywrightDocument(FlightDocument):
    """Live page driven through Playwright."""

    def __init__(self, page: Page):
        self.page = page
        self._observing = False

    async def candidates(self, selectors: Sequence[str]) -> list[ElementHandle]:
        return await self.page.query_selector_all(", ".join(selectors))

    async def is_annotated(self, element: ElementHandle) -> bool:
        return await element.evaluate(IS_ANNOTATED_JS, ANNOTATION_CLASS)

    async def snapshot(self, element: ElementHandle) -> str:
        return await element.evaluate("element => element.outerHTML")

    async def annotate(self, element: ElementHandle, label: str) -> bool:
        return await element.evaluate(
            ANNOTATE_JS,
            {"marker": ANNOTATION_CLASS, "label": label, "style": ANNOTATION_STYLE},
        )

    async def release(self, element: ElementHandle):
        try:
            await element.dispose()
        except Exception as e:
            logger.debug(f"Element handle dispose failed: {e}")

    async def wait_until_loaded(self):
        await self.page.wait_for_load_state("load")

    async def observe(self, callback: MutationCallback):
        if self._observing:
            logger.warning("Page observer already installed")
            return
        await self.page.expose_function(MUTATION_BINDING, callback)
        await self.page.evaluate(OBSERVE_JS, MUTATION_BINDING)
        self._observing = True


class BrowserSession:
    """
    Owns a Chromium instance and one page for the ``watch`` command.

    Usage:
        async with BrowserSession() as session:
            page = await session.open(url)
    """

    BROWSER_ARGS = [
        "--disable-blink-features=AutomationControlled",
        "--no-sandbox",
        "--disable-dev-shm-usage",
    ]

    def __init__(self, headless: Optional[bool] = None):
        settings = get_settings()
        self.headless = settings.headless if headless is None else headless
        self.user_agent = settings.user_agent
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=self.BROWSER_ARGS,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def open(self, url: str) -> Page:
        context = await self._browser.new_context(
            viewport={"width": 1366, "height": 900},
            user_agent=self.user_agent,
        )
        page = await context.new_page()
        logger.info(f"🌐 Loading {url}")
        await page.goto(url, wait_until="domcontentloaded")
        return page

    async def close(self):
        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"Browser close failed: {e}")
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug(f"Playwright stop failed: {e}")
            self._playwright = None
