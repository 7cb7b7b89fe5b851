"""
Test fixtures for flightco2 tests.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from flightco2.config import Settings
from flightco2.services.messaging import BackgroundClient


CDG_LTN_CARD = """
<div data-testid="flight-card" id="cdg-ltn">
  <div class="leg"><span>10:05</span><span>CDG</span></div>
  <div class="leg"><span>11:20</span><span>LTN</span></div>
  <span class="carrier">easyJet</span>
  <span class="price">89 €</span>
</div>
"""

AF_CARD = """
<div class="css-gzf2z3" id="cdg-mad">
  <div><span>07:40</span><span>CDG</span></div>
  <div><span>09:55</span><span>MAD</span></div>
  <span>Air France AF1234</span>
</div>
"""

ONE_AIRPORT_CARD = """
<div class="css-kkzho4" id="one-airport">
  <span>CDG</span>
  <span>Paris Charles de Gaulle</span>
</div>
"""


def results_page(*cards: str) -> str:
    return f"<html><body><main id='results'>{''.join(cards)}</main></body></html>"


@pytest.fixture
def test_settings():
    """Settings with long timers so nothing fires unless a test asks for it."""
    return Settings(
        startup_delay_seconds=60,
        poll_interval_seconds=60,
        mutation_debounce_seconds=60,
        message_timeout_seconds=1.0,
    )


@pytest.fixture
def offline_client():
    """Background client whose lookups are all unavailable."""
    client = MagicMock(spec=BackgroundClient)
    client.fetch_distance = AsyncMock(return_value=None)
    client.fetch_aircraft_type = AsyncMock(return_value=None)
    client.ping = AsyncMock(return_value=True)
    return client
