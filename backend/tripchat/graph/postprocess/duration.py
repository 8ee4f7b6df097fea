import logging
import re
from typing import Optional

from tripchat.config import get_settings
from tripchat.graph.slots.vocabulary import merged
from tripchat.graph.utils import alternation

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 5
# A bare number this small is read as weeks ("2" -> two weeks), anything larger as days
WEEKS_THRESHOLD = 4


def _unit_re(key: str) -> "re.Pattern[str]":
    return re.compile(rf"(\d+)\s*-?\s*(?:{alternation(merged(key))})(?!\w)", re.IGNORECASE)


_WEEKS = _unit_re("week_words")
_MONTHS = _unit_re("month_words")
_DAYS = _unit_re("day_words")
_BARE_INT = re.compile(r"\d+")


def normalize_duration(text: Optional[str], cap: Optional[int] = None) -> int:
    """
    Turn a human duration ("2 weeks", "10 jours", "3") into a day count.

    Keyword matches are tried before the bare-number fallback so that
    "2 weeks" is never read as two days. The result is capped at `cap`
    (MVP policy, 7 by default) and is never below one day.
    """
    if cap is None:
        cap = get_settings().max_trip_days
    cap = max(1, cap)
    text = text or ""

    def _capped(days: int) -> int:
        return max(1, min(days, cap))

    match = _WEEKS.search(text)
    if match:
        return _capped(int(match.group(1)) * 7)

    match = _MONTHS.search(text)
    if match:
        # months always exceed the cap; give the traveler as many days as allowed
        return cap

    match = _DAYS.search(text)
    if match:
        return _capped(int(match.group(1)))

    match = _BARE_INT.search(text)
    if match:
        n = int(match.group(0))
        if n <= WEEKS_THRESHOLD:
            return _capped(n * 7)
        return _capped(n)

    logger.info("No duration found in %r; defaulting to %d days", text, DEFAULT_DAYS)
    return _capped(DEFAULT_DAYS)
