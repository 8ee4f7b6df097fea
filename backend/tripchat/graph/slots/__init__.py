"""
Slot filling for the trip chat: per-utterance extraction and the
first-write-wins store that accumulates it across a conversation.
"""

from .extractor import SlotRule, build_rules, extract_slots
from .store import is_complete, merge, missing_fields

__all__ = [
    'SlotRule',
    'build_rules',
    'extract_slots',
    'is_complete',
    'merge',
    'missing_fields',
]
