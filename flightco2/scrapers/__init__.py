from flightco2.scrapers.extractors import FlightIdentifiers, extract_flight
from flightco2.scrapers.documents import ANNOTATION_CLASS, FlightDocument, SoupDocument

__all__ = [
    "FlightIdentifiers",
    "extract_flight",
    "ANNOTATION_CLASS",
    "FlightDocument",
    "SoupDocument",
]
