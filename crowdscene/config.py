# crowdscene/config.py
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

# Project root, where an optional .env lives
PROJECT_ROOT = Path(__file__).parent.parent

MILLIS_PER_HOUR = 60 * 60 * 1000


class Settings(BaseSettings):
    """Service configuration, read once at process start."""

    # Storage
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./crowdscene.db",
        validation_alias="DATABASE_URL"
    )
    SQL_ECHO: bool = Field(default=False, validation_alias="SQL_ECHO")

    # Crowd scoring
    DECAY_HOURS: float = Field(
        default=2.0,
        gt=0,
        validation_alias="DECAY_HOURS",
        description="Decay time-constant (TAU) in hours"
    )

    # Google Places (external nearby). Unset key disables /api/places/nearby only.
    GOOGLE_PLACES_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_PLACES_API_KEY"
    )
    GOOGLE_PLACES_URL: str = Field(
        default="https://maps.googleapis.com/maps/api/place/nearbysearch/json",
        validation_alias="GOOGLE_PLACES_URL"
    )
    PLACES_TIMEOUT: float = Field(default=10.0, gt=0, validation_alias="PLACES_TIMEOUT")

    # Listener
    HOST: str = Field(default="0.0.0.0", validation_alias="HOST")
    PORT: int = Field(default=4000, validation_alias="PORT")

    # Admission control
    IP_RATE_LIMIT: int = Field(default=100, gt=0, validation_alias="IP_RATE_LIMIT")
    IP_RATE_WINDOW: float = Field(default=60, gt=0, validation_alias="IP_RATE_WINDOW")
    CHECKIN_RATE_LIMIT: int = Field(default=3, gt=0, validation_alias="CHECKIN_RATE_LIMIT")
    CHECKIN_RATE_WINDOW: float = Field(default=60 * 30, gt=0, validation_alias="CHECKIN_RATE_WINDOW")

    # Live channel
    SUBSCRIBER_QUEUE_SIZE: int = Field(default=100, gt=0, validation_alias="SUBSCRIBER_QUEUE_SIZE")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    class Config:
        env_file = PROJECT_ROOT / ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def decay_tau_ms(self) -> float:
        return self.DECAY_HOURS * MILLIS_PER_HOUR

    @property
    def places_api_key(self) -> Optional[str]:
        key = (self.GOOGLE_PLACES_API_KEY or "").strip()
        return key or None

    def describe(self) -> str:
        """One-line summary for the startup log (no secrets)."""
        return (
            f"db={self.DATABASE_URL} decay={self.DECAY_HOURS}h "
            f"places={'on' if self.places_api_key else 'off'}"
        )


settings = Settings()
