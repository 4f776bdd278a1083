"""Common heuristic rules for the Sylva resolver.

Includes vocabulary normalization, count-question detection and the
exclusivity phrasings recognised by the heuristic parser.
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern

from .vocab import SynonymTable


# -----------------
# Normalizers
# -----------------

def normalize_term(value: str | None, table: SynonymTable) -> str | None:
    """Map ``value`` onto a canonical label of ``table``.

    Comparison is trimmed and case-insensitive against both the labels and
    their synonyms. Unknown values, whitespace-only ones included, are
    returned unchanged; None and "" become None.
    """
    if not value or not isinstance(value, str):
        return None
    key = value.strip().lower()
    for canonical, synonyms in table.items():
        if canonical.lower() == key:
            return canonical
        if any(syn.lower() == key for syn in synonyms):
            return canonical
    return value


def find_label(text: str, table: SynonymTable) -> str | None:
    """Return the first label whose synonym occurs in ``text`` (substring)."""
    lowered = (text or "").lower()
    for canonical, synonyms in table.items():
        if any(syn.lower() in lowered for syn in synonyms):
            return canonical
    return None


# -----------------
# Count questions
# -----------------

_COUNT_RE = re.compile(r"how many|number of|count", re.IGNORECASE)


def is_count_query(question: str | None) -> bool:
    """True when the question asks for a cardinality rather than a listing."""
    return bool(_COUNT_RE.search(question or ""))


# -----------------
# Exclusivity ("only") phrasings on parts used
# -----------------

# Applied to the lower-cased question; group 1 captures the part token.
ONLY_PART_PATTERNS: List[Pattern[str]] = [
    re.compile(r"only the ([a-z]+) are used"),  # only the leaves are used
    re.compile(r"([a-z]+) are the only part used"),  # leaves are the only part used
    re.compile(r"parts used is only ([a-z]+)"),  # parts used is only leaves
    re.compile(r"the only value in partsused is ([a-z]+)"),  # the only value in PartsUsed is leaves
]


def match_only_part(question: str) -> Optional[str]:
    """Return the raw part token of the first matching exclusivity phrase."""
    lowered = (question or "").lower()
    for pat in ONLY_PART_PATTERNS:
        m = pat.search(lowered)
        if m and m.group(1):
            return m.group(1)
    return None
