"""
Heuristic flight identifier extraction from a result-card snapshot.

Result cards carry no structured data, so identifiers are recovered from
free text:

1. Airport codes: the first two text nodes containing a 3-letter
   uppercase token give origin and destination.
2. Flight code: the first 2-letter + digits token anywhere in the card.

The two passes are independent, so a card without a flight code still
yields a route. A card without two airport codes yields nothing.
"""

import re
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, Doctype

logger = logging.getLogger(__name__)

AIRPORT_CODE_PATTERN = re.compile(r"\b([A-Z]{3})\b", re.ASCII)
FLIGHT_CODE_PATTERN = re.compile(r"\b([A-Z]{2}[0-9]{1,4})\b", re.ASCII)

NON_TEXT_PARENTS = {"script", "style", "noscript", "template"}


@dataclass(frozen=True)
class FlightIdentifiers:
    """Identifiers recovered from one flight listing."""
    origin: str
    destination: str
    flight_code: Optional[str] = None

    @property
    def route_key(self) -> str:
        return f"{self.origin}-{self.destination}"


def _as_tag(snapshot: Union[str, Tag]) -> Tag:
    if isinstance(snapshot, Tag):
        return snapshot
    return BeautifulSoup(snapshot, "lxml")


def iter_text_nodes(root: Tag) -> Iterator[str]:
    """Trimmed, non-empty text nodes under ``root`` in document order."""
    for node in root.find_all(string=True):
        if isinstance(node, (Comment, Doctype)):
            continue
        if node.parent is not None and node.parent.name in NON_TEXT_PARENTS:
            continue
        text = node.strip()
        if text:
            yield text


def find_airport_codes(texts: list[str]) -> tuple[Optional[str], Optional[str]]:
    origin = None
    destination = None

    for text in texts:
        match = AIRPORT_CODE_PATTERN.search(text)
        if not match:
            continue
        if origin is None:
            origin = match.group(1)
        else:
            destination = match.group(1)
            break

    return origin, destination


def find_flight_code(texts: list[str]) -> Optional[str]:
    for text in texts:
        match = FLIGHT_CODE_PATTERN.search(text)
        if match:
            return match.group(1)
    return None


def extract_flight(snapshot: Union[str, Tag]) -> Optional[FlightIdentifiers]:
    """
    Recover (origin, destination, flight code) from a listing snapshot.

    Args:
        snapshot: Outer HTML of the listing, or an already parsed tag

    Returns:
        FlightIdentifiers, or None when fewer than two airport codes are present
    """
    texts = list(iter_text_nodes(_as_tag(snapshot)))

    origin, destination = find_airport_codes(texts)
    if not origin or not destination:
        logger.debug(f"Skipping listing: airport codes incomplete ({origin}, {destination})")
        return None

    return FlightIdentifiers(
        origin=origin,
        destination=destination,
        flight_code=find_flight_code(texts),
    )
