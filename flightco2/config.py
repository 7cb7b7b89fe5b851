from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    env: str = "dev"
    log_level: str = "INFO"

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    http_timeout_seconds: float = 10.0
    connect_timeout_seconds: float = 5.0
    message_timeout_seconds: float = 15.0

    distance_url_template: str = "https://www.airmilescalculator.com/distance/{depart}-to-{arrivee}/"
    aircraft_url_template: str = "https://fr.trip.com/flights/status-{flight_code}/"

    # Opodo result cards
    flight_selectors: list[str] = [
        ".css-gzf2z3",
        ".css-kkzho4",
        '[data-testid="flight-card"]',
    ]

    startup_delay_seconds: float = 1.5
    poll_interval_seconds: float = 3.0
    mutation_debounce_seconds: float = 0.5
    scheduler_timezone: str = "UTC"

    headless: bool = True

    def model_post_init(self, __context):
        for name in ("startup_delay_seconds", "poll_interval_seconds", "mutation_debounce_seconds"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    class Config:
        env_file = ".env"
        env_prefix = "FLIGHTCO2_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
