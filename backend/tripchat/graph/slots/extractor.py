"""
Slot extraction from a single chat utterance.

The extractor is a rule table: for every slot an ordered list of rules, each a
pure function text -> value or None. The first rule that yields a value wins,
and a slot that is already filled is never looked at again. Rules are compiled
from the locale vocabularies, so the same code serves English, French and
Spanish input.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from tripchat.graph.slots.vocabulary import (
    DEFAULT_LOCALES,
    GAZETTEER,
    CANONICAL_PLACES,
    canonical_place,
    merged,
    merged_families,
    merged_months,
)
from tripchat.graph.utils import alternation, pick, pick_longest
from tripchat.models.trip_slots import SLOT_FIELDS, TripSlots

logger = logging.getLogger(__name__)

ORDINAL = r"(?:st|nd|rd|th|er|ème)?"
CAPITALIZED = r"[A-ZÀ-ÖØ-Þ][\w'’-]*"
PLACE_NAME = rf"{CAPITALIZED}(?:\s+(?:(?:de|da|do|del|la)\s+)?{CAPITALIZED})*"


class SlotRule(NamedTuple):
    slot: str
    name: str
    apply: Callable[[str], Optional[str]]


def _valid_day(value: str) -> bool:
    return 1 <= int(value) <= 31


def _destination_rules(locales: Iterable[str]) -> List[SlotRule]:
    months = merged_months(locales)
    stopwords = {w.lower() for w in merged("stopwords", locales)}
    gazetteer = list(GAZETTEER) + list(CANONICAL_PLACES)
    known = {name.lower() for name in gazetteer}

    def _compile(key: str) -> re.Pattern:
        preps = alternation(merged(key, locales))
        return re.compile(rf"(?<!\w)(?i:{preps})\s+({PLACE_NAME})")

    strong = _compile("destination_prepositions")
    weak = _compile("weak_destination_prepositions")

    def _rejected(word: str) -> bool:
        return word.lower() in stopwords or word.lower() in months

    def _places(pattern: re.Pattern, text: str) -> Iterable[str]:
        for match in pattern.finditer(text):
            words = match.group(1).split()
            if _rejected(words[0]):
                continue
            while words and _rejected(words[-1]):
                words.pop()
            if words:
                yield " ".join(words)

    def by_gazetteer(text: str) -> Optional[str]:
        hit = pick_longest(text, gazetteer)
        return canonical_place(hit) if hit else None

    def by_preposition(text: str) -> Optional[str]:
        for place in _places(strong, text):
            return canonical_place(place)
        # "I live in London", "in Love with": an unknown name after a weak
        # preposition only counts when no known place is mentioned at all
        fallback = None
        for place in _places(weak, text):
            if place.lower() in known:
                return canonical_place(place)
            fallback = fallback or place
        if fallback and by_gazetteer(text) is None:
            return canonical_place(fallback)
        return None

    return [
        SlotRule("destination", "destination_by_preposition", by_preposition),
        SlotRule("destination", "destination_by_gazetteer", by_gazetteer),
    ]


def _origin_rules(locales: Iterable[str]) -> List[SlotRule]:
    months = merged_months(locales)
    preps = alternation(merged("origin_prepositions", locales))
    # connectors are matched lower-case only: a capitalized word is part of the name
    connectors = alternation(merged("connectors", locales))
    pattern = re.compile(
        rf"(?<!\w)(?i:{preps})\s+(.+?)(?=\s+(?:{connectors})(?!\w)|[,.!?;:\n]|$)"
    )

    def by_preposition(text: str) -> Optional[str]:
        for match in pattern.finditer(text):
            value = match.group(1).strip(" \t.,!?;:")
            if not value or value[0].isdigit():
                continue
            words = value.split()
            if words[0].lower() in months or len(words) > 4:
                continue
            return canonical_place(value)
        return None

    return [SlotRule("origin", "origin_by_preposition", by_preposition)]


def _travelers_rules(locales: Iterable[str]) -> List[SlotRule]:
    rules = []
    for label, words in merged_families("travelers", locales).items():
        def by_keyword(text: str, _label=label, _words=words) -> Optional[str]:
            return _label if pick(text, _words) else None
        rules.append(SlotRule("travelers", f"travelers_{label}", by_keyword))

    people = alternation(merged("people_words", locales))
    count = re.compile(rf"(?<!\w)(\d+)\s+(?:{people})(?!\w)", re.IGNORECASE)

    def by_head_count(text: str) -> Optional[str]:
        match = count.search(text)
        if not match:
            return None
        n = int(match.group(1))
        if n <= 0:
            return None
        return "1 person" if n == 1 else f"{n} people"

    rules.append(SlotRule("travelers", "travelers_by_head_count", by_head_count))
    return rules


def _dates_rules(locales: Iterable[str]) -> List[SlotRule]:
    months = merged_months(locales)
    month = alternation(months)
    starts = alternation(merged("range_starts", locales))
    joiners = alternation(merged("range_joiners", locales))
    lead_ins = alternation(merged("month_lead_ins", locales))
    ambiguous = set(merged("ambiguous_months", locales))
    day = rf"(?:the\s+)?(\d{{1,2}}){ORDINAL}"

    cross_month = re.compile(
        rf"(?<!\w)(?:{starts})\s+{day}\s+(?:of\s+)?({month})\s*(?:{joiners})\s*{day}\s+(?:of\s+)?({month})(?!\w)",
        re.IGNORECASE,
    )
    same_month = re.compile(
        rf"(?<!\w)(?:{starts})\s+{day}\s*(?:{joiners})\s*{day}\s+(?:of\s+)?({month})(?!\w)",
        re.IGNORECASE,
    )
    single = re.compile(rf"(?<!\w)(\d{{1,2}}){ORDINAL}\s+(?:of\s+|de\s+)?({month})(?!\w)", re.IGNORECASE)
    lead_in = re.compile(rf"(?<!\w)(?:{lead_ins})[\s-]+({month})(?!\w)", re.IGNORECASE)
    bare = re.compile(rf"(?<!\w)({month})(?!\w)", re.IGNORECASE)

    def name(raw: str) -> str:
        return months[raw.lower()]

    def by_range(text: str) -> Optional[str]:
        match = cross_month.search(text)
        if match and _valid_day(match.group(1)) and _valid_day(match.group(3)):
            return f"{int(match.group(1))} {name(match.group(2))} - {int(match.group(3))} {name(match.group(4))}"
        match = same_month.search(text)
        if match and _valid_day(match.group(1)) and _valid_day(match.group(2)):
            m = name(match.group(3))
            return f"{int(match.group(1))} {m} - {int(match.group(2))} {m}"
        return None

    def by_day_and_month(text: str) -> Optional[str]:
        for match in single.finditer(text):
            if _valid_day(match.group(1)):
                return f"{int(match.group(1))} {name(match.group(2))}"
        return None

    def by_month_lead_in(text: str) -> Optional[str]:
        for match in lead_in.finditer(text):
            raw = match.group(1)
            # "this may", "in march" style verbs only count when written as a proper noun
            if raw.lower() in ambiguous and not raw[0].isupper():
                continue
            return f"1 {name(raw)}"
        return None

    def by_bare_month(text: str) -> Optional[str]:
        for match in bare.finditer(text):
            if match.group(1).lower() in ambiguous:
                continue
            return f"1 {name(match.group(1))}"
        return None

    return [
        SlotRule("dates", "dates_by_range", by_range),
        SlotRule("dates", "dates_by_day_and_month", by_day_and_month),
        SlotRule("dates", "dates_by_month_lead_in", by_month_lead_in),
        SlotRule("dates", "dates_by_bare_month", by_bare_month),
    ]


def _duration_rules(locales: Iterable[str]) -> List[SlotRule]:
    days = re.compile(
        rf"(?<!\w)(\d+)\s*-?\s*(?:{alternation(merged('day_words', locales))})(?!\w)", re.IGNORECASE
    )
    weeks = re.compile(
        rf"(?<!\w)(\d+)\s*-?\s*(?:{alternation(merged('week_words', locales))})(?!\w)", re.IGNORECASE
    )

    def by_days(text: str) -> Optional[str]:
        match = days.search(text)
        return f"{int(match.group(1))} days" if match else None

    def by_weeks(text: str) -> Optional[str]:
        match = weeks.search(text)
        return f"{int(match.group(1))} weeks" if match else None

    return [
        SlotRule("duration", "duration_by_days", by_days),
        SlotRule("duration", "duration_by_weeks", by_weeks),
    ]


def _purpose_rules(locales: Iterable[str]) -> List[SlotRule]:
    rules = []
    for label, words in merged_families("purpose", locales).items():
        def by_keyword(text: str, _label=label, _words=words) -> Optional[str]:
            return _label if pick(text, _words) else None
        rules.append(SlotRule("purpose", f"purpose_{label}", by_keyword))
    return rules


def build_rules(locales: Iterable[str] = DEFAULT_LOCALES) -> Dict[str, List[SlotRule]]:
    """Compile the per-slot rule table for the given locales."""
    locales = tuple(locales)
    return {
        "destination": _destination_rules(locales),
        "origin": _origin_rules(locales),
        "travelers": _travelers_rules(locales),
        "dates": _dates_rules(locales),
        "duration": _duration_rules(locales),
        "purpose": _purpose_rules(locales),
    }


DEFAULT_RULES = build_rules()


def extract_slots(
    text: str,
    current: Optional[TripSlots] = None,
    rules: Optional[Dict[str, List[SlotRule]]] = None,
    skip: Iterable[str] = (),
) -> TripSlots:
    """
    Run the rule table over one utterance.

    Slots already filled in `current` are not re-derived. The result carries
    only newly detected values; everything else stays None.
    """
    current = current or TripSlots()
    table = rules or DEFAULT_RULES
    skipped = set(skip)
    found: Dict[str, str] = {}
    if not text:
        return TripSlots()

    for slot in SLOT_FIELDS:
        if getattr(current, slot):
            continue
        for rule in table.get(slot, []):
            if rule.name in skipped:
                continue
            value = rule.apply(text)
            if value:
                found[slot] = value
                logger.debug("Slot %s filled by %s: %r", slot, rule.name, value)
                break

    return TripSlots(**found)
