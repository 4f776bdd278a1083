"""Canonical vocabularies for the tree species catalog.

Each table maps a canonical label to the synonyms that should resolve to it.
Table order is significant: the heuristic parser scans labels in order and
stops at the first hit, so earlier labels win on overlapping synonyms
(e.g. "wood" is both a Raw Material synonym and a trunk synonym).

The built-in tables can be extended through ``<assets>/synonyms.json``::

    {
      "ecosystem_services": {"Medicinal": ["tea"]},
      "parts_used": {"stem": ["stem", "stems"]},
      "species_terms": ["palm"]
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Tuple

from .logger import logger

SynonymTable = Mapping[str, Tuple[str, ...]]


SPECIES_TERMS: FrozenSet[str] = frozenset({
    "tree",
    "trees",
    "plant",
    "plants",
    "vegetation",
    "species",
})

ECOSYSTEM_SERVICE_SYNONYMS: SynonymTable = MappingProxyType({
    "Medicinal": (
        "medicine",
        "medicinal",
        "healing",
        "remedy",
        "pharmaceutical",
        "health",
    ),
    "Food": (
        "food",
        "edible",
        "nutrition",
        "eat",
        "eating",
        "consumed",
        "nutritional",
    ),
    "Raw Material": (
        "raw material",
        "material",
        "timber",
        "wood",
        "construction",
        "building",
        "fiber",
        "latex",
        "resource",
    ),
})

PART_USED_SYNONYMS: SynonymTable = MappingProxyType({
    "fruit": ("fruit", "fruits", "edible fruit"),
    "seed": ("seed", "seeds", "edible seed"),
    "bark": ("bark",),
    "trunk": ("trunk", "wood", "timber"),
    "leaves": ("leaf", "leaves", "edible leaves"),
    "root": ("root", "roots"),
    "latex": ("latex",),
    "resin": ("resin",),
    "branch": ("branch", "branches"),
    "flower": ("flower", "flowers"),
    "sap": ("sap",),
})


@dataclass(frozen=True)
class Vocabularies:
    services: SynonymTable
    parts: SynonymTable
    species_terms: FrozenSet[str]

    def as_dict(self) -> Dict[str, object]:
        return {
            "ecosystem_services": {k: list(v) for k, v in self.services.items()},
            "parts_used": {k: list(v) for k, v in self.parts.items()},
            "species_terms": sorted(self.species_terms),
        }


DEFAULT_VOCABULARIES = Vocabularies(
    services=ECOSYSTEM_SERVICE_SYNONYMS,
    parts=PART_USED_SYNONYMS,
    species_terms=SPECIES_TERMS,
)


def _merge_table(base: SynonymTable, extra: object) -> SynonymTable:
    merged: Dict[str, Tuple[str, ...]] = dict(base)
    if not isinstance(extra, dict):
        return base
    for label, synonyms in extra.items():
        if not isinstance(label, str) or not label.strip():
            continue
        if isinstance(synonyms, str):
            synonyms = [synonyms]
        if not isinstance(synonyms, list):
            continue
        cleaned = [s.strip().lower() for s in synonyms if isinstance(s, str) and s.strip()]
        current = list(merged.get(label, ()))
        current.extend(s for s in cleaned if s not in current)
        merged[label] = tuple(current)
    return MappingProxyType(merged)


def _merge_terms(base: FrozenSet[str], extra: object) -> FrozenSet[str]:
    if not isinstance(extra, list):
        return base
    terms: Iterable[str] = (t.strip().lower() for t in extra if isinstance(t, str) and t.strip())
    return base | frozenset(terms)


def load_vocabularies(assets_path: str) -> Vocabularies:
    """Return the built-in vocabularies extended by ``synonyms.json`` if present."""
    path = os.path.join(assets_path, "synonyms.json")
    if not os.path.exists(path):
        logger.debug(f"No synonym overrides at {path}; using built-in vocabularies")
        return DEFAULT_VOCABULARIES
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable synonym file {path}: {e}")
        return DEFAULT_VOCABULARIES
    if not isinstance(data, dict):
        logger.warning(f"Ignoring synonym file {path}: expected a JSON object")
        return DEFAULT_VOCABULARIES

    vocab = Vocabularies(
        services=_merge_table(ECOSYSTEM_SERVICE_SYNONYMS, data.get("ecosystem_services")),
        parts=_merge_table(PART_USED_SYNONYMS, data.get("parts_used")),
        species_terms=_merge_terms(SPECIES_TERMS, data.get("species_terms")),
    )
    logger.info(
        f"Loaded vocabularies: services={len(vocab.services)}, parts={len(vocab.parts)}, "
        f"species_terms={len(vocab.species_terms)}"
    )
    return vocab
