import logging
import re
from typing import Optional

from tripchat.models.trip_slots import RawTripInfo

logger = logging.getLogger(__name__)

# Language-independent sentinel the assistant emits once it has enough details
TRIP_READY_MARKER = "TRIP_READY"

_MARKER_RE = re.compile(rf"(?<![A-Za-z0-9_]){TRIP_READY_MARKER}(?![A-Za-z0-9_])")


def normalize_key(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.strip().lower())


def has_trip_ready(text: str) -> bool:
    return bool(text) and _MARKER_RE.search(text) is not None


def parse_trip_ready(text: str) -> Optional[RawTripInfo]:
    """
    Parse the key: value block that accompanies the TRIP_READY marker.

    Returns None when the marker is absent. Lines without a colon, with an
    empty key or value, or carrying the marker itself are skipped. A repeated
    key keeps its last value.
    """
    if not has_trip_ready(text):
        return None

    info: RawTripInfo = {}
    for line in text.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        if TRIP_READY_MARKER in key or TRIP_READY_MARKER in value:
            continue
        clean_key = normalize_key(key)
        # markdown emphasis around the value ("**Destination:** Tokyo")
        value = value.strip().strip("*_`").strip()
        if clean_key and value:
            info[clean_key] = value

    logger.info("TRIP_READY block parsed with keys: %s", sorted(info))
    return info
