"""
Industry Auto-Classification

Classifies tenders from keywords in their title and description.
"""
import re
from typing import Dict, List

from bidguard.domain.constants import INDUSTRY_KEYWORDS, INDUSTRY_LABELS


def classify_tender(title: str, description: str) -> str:
    """
    Return the best matching industry for a tender, or 'general'.

    Short keywords (3 chars or fewer, e.g. 'nhs', 'mod') must match on word
    boundaries and score 2 per occurrence; longer keywords score once, 3 if
    they are longer than 8 characters and 2 otherwise.
    """
    text = f"{title or ''} {description or ''}".lower()
    scores: Dict[str, int] = {}

    for industry, keywords in INDUSTRY_KEYWORDS.items():
        score = 0
        for keyword in keywords:
            if len(keyword) <= 3:
                matches = re.findall(rf"\b{re.escape(keyword)}\b", text)
                score += len(matches) * 2
            elif keyword in text:
                score += 3 if len(keyword) > 8 else 2
        if score > 0:
            scores[industry] = score

    if not scores:
        return "general"

    # max() keeps the first declared industry on ties
    return max(scores, key=scores.get)


def get_industry_label(industry: str) -> str:
    """Human-readable label for an industry id"""
    return INDUSTRY_LABELS.get(industry) or industry[:1].upper() + industry[1:]


def get_all_industries() -> List[Dict[str, str]]:
    return [{"id": industry, "label": get_industry_label(industry)} for industry in INDUSTRY_KEYWORDS]
