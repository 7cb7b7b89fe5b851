"""
Host page abstraction used by the refresh controller.

A document exposes candidate flight listings, a snapshot of each, and a
single write operation that appends the CO2 annotation. The annotation
node doubles as the "already processed" marker: ``annotate`` checks for it
and appends in one step, so a listing is never annotated twice.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

ANNOTATION_CLASS = "pollution-info"

ANNOTATION_STYLE = {
    "color": "green",
    "font-size": "14px",
    "margin-top": "5px",
    "padding": "4px",
    "border-radius": "4px",
    "background-color": "#f9f9f9",
    "border": "1px solid #ccc",
}

MutationCallback = Callable[[], None]


def annotation_style_attr() -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in ANNOTATION_STYLE.items())


class FlightDocument(ABC):
    """A page holding flight listings. Elements are opaque backend handles."""

    @abstractmethod
    async def candidates(self, selectors: Sequence[str]) -> list[Any]:
        pass

    @abstractmethod
    async def is_annotated(self, element: Any) -> bool:
        pass

    @abstractmethod
    async def snapshot(self, element: Any) -> str:
        """Outer HTML of the element at this moment."""
        pass

    @abstractmethod
    async def annotate(self, element: Any, label: str) -> bool:
        """Append the annotation unless one is present. Returns True if written."""
        pass

    async def release(self, element: Any):
        """Drop any backend resources held for ``element``. No-op by default."""
        pass

    @abstractmethod
    async def wait_until_loaded(self):
        pass

    @abstractmethod
    async def observe(self, callback: MutationCallback):
        """Call ``callback`` once per batch of child additions/removals under <body>."""
        pass


class SoupDocument(FlightDocument):
    """
    In-memory page backed by BeautifulSoup.

    Used for saved result pages and tests. Host-page changes go through
    ``insert_html``/``remove``, which notify observers once per call.
    """

    def __init__(self, html: str, loaded: bool = True):
        self.soup = BeautifulSoup(html, "lxml")
        self._loaded = asyncio.Event()
        if loaded:
            self._loaded.set()
        self._observers: list[MutationCallback] = []

    @property
    def is_loaded(self) -> bool:
        return self._loaded.is_set()

    def mark_loaded(self):
        self._loaded.set()

    async def candidates(self, selectors: Sequence[str]) -> list[Tag]:
        return self.soup.select(", ".join(selectors))

    async def is_annotated(self, element: Tag) -> bool:
        return element.select_one(f".{ANNOTATION_CLASS}") is not None

    async def snapshot(self, element: Tag) -> str:
        return str(element)

    async def annotate(self, element: Tag, label: str) -> bool:
        if element.select_one(f".{ANNOTATION_CLASS}") is not None:
            return False

        node = self.soup.new_tag("div", attrs={"class": ANNOTATION_CLASS, "style": annotation_style_attr()})
        node.string = label
        element.append(node)
        self._notify()
        return True

    async def wait_until_loaded(self):
        await self._loaded.wait()

    async def observe(self, callback: MutationCallback):
        self._observers.append(callback)

    def insert_html(self, parent_selector: str, html: str) -> Optional[Tag]:
        """Simulate the host page appending content under ``parent_selector``."""
        parent = self.soup.select_one(parent_selector)
        if parent is None:
            return None
        fragment = BeautifulSoup(html, "html.parser")
        added = [child for child in fragment.contents]
        for child in added:
            parent.append(child)
        self._notify()
        return added[0] if added and isinstance(added[0], Tag) else None

    def remove(self, selector: str) -> int:
        removed = self.soup.select(selector)
        for element in removed:
            element.decompose()
        if removed:
            self._notify()
        return len(removed)

    def _notify(self):
        for callback in list(self._observers):
            try:
                callback()
            except Exception as e:
                logger.error(f"Mutation observer failed: {e}")

    def html(self) -> str:
        return str(self.soup)
