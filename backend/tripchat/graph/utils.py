import re
from typing import Iterable, List, Optional


def _word_pattern(term: str) -> str:
    # \b does not fire next to apostrophes or accents at the edges, so spell it out
    return r"(?<![\w])" + re.escape(term) + r"(?![\w])"


def contains_word(text: str, term: str) -> bool:
    """Case-insensitive whole-word (or whole-phrase) containment."""
    if not text or not term:
        return False
    return re.search(_word_pattern(term), text, re.IGNORECASE) is not None


def pick(text: str, options: Iterable[str]) -> Optional[str]:
    """
    Return the first option found in text as a whole word (case-insensitive).
    """
    if not text:
        return None
    for opt in options:
        if contains_word(text, opt):
            return opt
    return None


def pick_longest(text: str, options: Iterable[str]) -> Optional[str]:
    """
    Return the longest option found in text as a whole word.

    Longest-first keeps "New York" from losing to "York" and "San Francisco"
    from losing to "Francisco".
    """
    if not text:
        return None
    for opt in sorted(options, key=len, reverse=True):
        if contains_word(text, opt):
            return opt
    return None


def alternation(words: Iterable[str]) -> str:
    """Regex alternation of literal words, longest first so prefixes never shadow."""
    return "|".join(re.escape(w) for w in sorted(set(words), key=len, reverse=True))


def first_int(text: str) -> Optional[int]:
    if not text:
        return None
    match = re.search(r"\d+", text)
    return int(match.group(0)) if match else None


def user_text(history: Optional[List[dict]]) -> str:
    """Concatenate the user side of a conversation history."""
    if not history:
        return ""
    return "\n".join(
        str(m.get("content", ""))
        for m in history
        if isinstance(m, dict) and m.get("role") == "user"
    )
