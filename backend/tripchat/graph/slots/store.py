from typing import Set

from tripchat.models.trip_slots import SLOT_FIELDS, TripSlots


def merge(current: TripSlots, candidate: TripSlots) -> TripSlots:
    """
    Fill empty slots of `current` from `candidate`; filled slots are never overwritten.

    Returns a new TripSlots. Merging the same candidate twice is a no-op.
    """
    merged = current.model_copy()
    for field in SLOT_FIELDS:
        if getattr(current, field):
            continue
        value = getattr(candidate, field)
        if value:
            setattr(merged, field, value)
    return merged


def missing_fields(slots: TripSlots) -> Set[str]:
    return {f for f in SLOT_FIELDS if not getattr(slots, f)}


def is_complete(slots: TripSlots) -> bool:
    return not missing_fields(slots)
