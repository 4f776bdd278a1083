"""Deterministic keyword parser used when LLM extraction is unavailable."""

from __future__ import annotations

from typing import Optional

from .models import Query
from .rules import find_label, match_only_part, normalize_term
from .vocab import DEFAULT_VOCABULARIES, Vocabularies


def heuristic_parse(question: str, vocab: Optional[Vocabularies] = None) -> Query:
    """Build a Query from substring matches against the vocabularies.

    Services take precedence over parts: a part is only looked up when no
    service synonym occurs. Exclusivity phrasings are checked independently
    and override ``part_used`` with the captured part.
    """
    vocab = vocab or DEFAULT_VOCABULARIES
    lowered = (question or "").lower()
    query = Query()

    query.ecosystem_service = find_label(lowered, vocab.services)
    if not query.ecosystem_service:
        query.part_used = find_label(lowered, vocab.parts)

    # Generic "trees"/"species" wording means no species constraint
    if any(term in lowered for term in vocab.species_terms):
        query.species = None

    part = match_only_part(lowered)
    if part:
        query.only = True
        query.part_used = normalize_term(part, vocab.parts) or part

    return query
