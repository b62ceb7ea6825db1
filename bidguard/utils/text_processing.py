"""Post-processing rules applied to generated proposal text."""
import re
from typing import List

from bidguard.domain.constants import UK_SPELLINGS, BANNED_WORDS

_UK_PATTERNS = [
    (re.compile(rf"\b{american}\b", re.IGNORECASE), british)
    for american, british in UK_SPELLINGS
]


def _match_case(original: str, replacement: str) -> str:
    if original.isupper():
        return replacement.upper()
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def enforce_uk_spelling(text: str) -> str:
    """Replace American spellings with British ones, keeping the original capitalisation."""
    for pattern, british in _UK_PATTERNS:
        text = pattern.sub(lambda m, b=british: _match_case(m.group(0), b), text)
    return text


def find_banned_words(text: str) -> List[str]:
    lowered = text.lower()
    return [word for word in BANNED_WORDS if re.search(rf"\b{word}\b", lowered)]


def word_count(text: str) -> int:
    return len((text or "").split())
