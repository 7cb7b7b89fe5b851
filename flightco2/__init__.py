"""Flight CO2 annotations for travel-booking result pages."""

__version__ = "0.1.0"
