"""Filter combination over scored catalog entries.

Two primary branches, chosen by ``query.only``:

* exclusivity: catalog order; a set service/part must be the entry's sole
  value (case-insensitive equality, array length exactly 1);
* default: similarity order; species, service and part are case-insensitive
  substring tests, any unset field always matches.

An ``and`` clause then narrows whichever set the branch produced using the
default branch's substring semantics.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .models import AndClause, Query, ScoredSpeciesRecord


def _contains(haystack: str, needle: Optional[str]) -> bool:
    return not needle or needle.lower() in (haystack or "").lower()


def _any_contains(values: Sequence[str], needle: Optional[str]) -> bool:
    if not needle:
        return True
    n = needle.lower()
    return any(n in (v or "").lower() for v in values)


def _sole_value(values: Sequence[str], wanted: Optional[str]) -> bool:
    if not wanted:
        return True
    return len(values) == 1 and (values[0] or "").lower() == wanted.lower()


def matches_exclusive(item: ScoredSpeciesRecord, query: Query) -> bool:
    return (
        _sole_value(item.ecosystem_services, query.ecosystem_service)
        and _sole_value(item.parts_used, query.part_used)
    )


def matches_default(item: ScoredSpeciesRecord, query: Query) -> bool:
    return (
        _contains(item.species, query.species)
        and _any_contains(item.ecosystem_services, query.ecosystem_service)
        and _any_contains(item.parts_used, query.part_used)
    )


def matches_and(item: ScoredSpeciesRecord, clause: Optional[AndClause]) -> bool:
    if clause is None:
        return True
    return (
        _any_contains(item.ecosystem_services, clause.ecosystem_service)
        and _any_contains(item.parts_used, clause.part_used)
    )


def combine_filters(
    query: Query,
    scored_catalog: Sequence[ScoredSpeciesRecord],
    ranked: Sequence[ScoredSpeciesRecord],
) -> List[ScoredSpeciesRecord]:
    """Apply the query to the catalog.

    ``scored_catalog`` is in catalog order and feeds the exclusivity branch;
    ``ranked`` is similarity-sorted and feeds the default branch.
    """
    if query.only:
        filtered = [item for item in scored_catalog if matches_exclusive(item, query)]
    else:
        filtered = [item for item in ranked if matches_default(item, query)]

    if query.and_ is not None:
        filtered = [item for item in filtered if matches_and(item, query.and_)]
    return filtered
