"""
Runtime settings for TripChat.

Values come from the environment (a local .env file is loaded first), so the
same code runs locally, in CI and in production without edits.
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    google_places_api_key: Optional[str] = None
    mongodb_uri: Optional[str] = None
    mongodb_db: str = "tripchat"

    # MVP policy: itineraries never exceed this many days
    max_trip_days: int = 7
    # below this share of the requested days an itinerary is flagged as partial
    partial_itinerary_ratio: float = 0.8
    places_limit: int = 5


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY"),
        mongodb_uri=os.getenv("MONGODB_URI"),
        mongodb_db=os.getenv("MONGODB_DB", "tripchat"),
        max_trip_days=_int_env("TRIPCHAT_MAX_DAYS", 7),
        partial_itinerary_ratio=_float_env("TRIPCHAT_PARTIAL_RATIO", 0.8),
        places_limit=_int_env("TRIPCHAT_PLACES_LIMIT", 5),
    )
