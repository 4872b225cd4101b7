"""Regex and frequency heuristics used when no model is available.

Both extractors are pure functions of their input text; the mock
synthesizer relies on that for reproducible output.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import List

from ..schemas.insights import Keyword, NamedEntity

STOP_WORDS = frozenset(
    ["the", "is", "at", "which", "on", "and", "or", "but", "in", "with", "for", "to", "of", "a", "an"]
)

# runs of two or more adjacent Capitalised words, e.g. "Contact John Smith"
_CAPITALISED_RUN_RX = re.compile(r"\b[A-Z][a-z]+(?: [A-Z][a-z]+)+\b")
_EMAIL_RX = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_MONEY_RX = re.compile(r"\$[\d,]+(?:\.\d{2})?")
_PUNCT_RX = re.compile(r"[^\w\s]")

# Capitalised words that open sentences or letters rather than names.
_NOT_A_NAME = frozenset(
    [
        "A", "An", "The", "This", "That", "These", "Those", "And", "But", "Or",
        "Contact", "Dear", "Hello", "Hi", "Please", "Attn", "Attention", "From",
        "To", "Cc", "Re", "Subject", "Sincerely", "Regards", "Thanks", "Signed",
        "By", "For", "With", "At", "On", "In", "Of", "If", "When", "Mr", "Mrs",
        "Ms", "Dr", "Prof",
    ]
)


def _person_names(text: str) -> List[str]:
    names: List[str] = []
    for m in _CAPITALISED_RUN_RX.finditer(text):
        words = m.group(0).split(" ")
        while words and words[0] in _NOT_A_NAME:
            words.pop(0)
        # pair the remainder the way a non-overlapping two-word scan would
        for i in range(0, len(words) - 1, 2):
            names.append(f"{words[i]} {words[i + 1]}")
    return names


def extract_named_entities(text: str) -> List[NamedEntity]:
    """PERSON, then EMAIL, then MONEY matches, each in text order.

    Patterns run independently, so overlapping matches are kept.
    """
    entities: List[NamedEntity] = []
    entities += [NamedEntity(text=name, type="PERSON", confidence=0.8) for name in _person_names(text)]
    entities += [NamedEntity(text=e, type="EMAIL", confidence=0.95) for e in _EMAIL_RX.findall(text)]
    entities += [NamedEntity(text=a, type="MONEY", confidence=0.9) for a in _MONEY_RX.findall(text)]
    return entities


def extract_keywords(text: str, top_n: int = 10) -> List[Keyword]:
    """Most frequent non-stop-words longer than three characters.

    Relevance is each count divided by the top count, so the first keyword
    always scores 1.0. Ties keep first-seen order.
    """
    words = _PUNCT_RX.sub("", text.lower()).split()
    counts = Counter(w for w in words if len(w) > 3 and w not in STOP_WORDS)
    top = counts.most_common(top_n)
    if not top:
        return []

    max_freq = top[0][1]
    return [Keyword(text=word, relevance=freq / max_freq) for word, freq in top]
