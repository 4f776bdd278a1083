import json
import os
from typing import Any, List

import requests
from pydantic import ValidationError

from .logger import logger
from .models import SpeciesRecord


def _is_url(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def _read_json(path: str, timeout: int = 30) -> Any:
    if _is_url(path):
        resp = requests.get(path, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_catalog(rows: Any) -> List[SpeciesRecord]:
    """Validate raw catalog rows; every entry must carry an embedding of the same size."""
    if not isinstance(rows, list):
        raise ValueError("Catalog must be a JSON array of species records")
    records: List[SpeciesRecord] = []
    for i, row in enumerate(rows):
        try:
            records.append(SpeciesRecord.model_validate(row))
        except ValidationError as e:
            raise ValueError(f"Invalid catalog entry at index {i}: {e}") from e
    if not records:
        raise ValueError("Catalog is empty")

    dims = {len(r.embedding) for r in records}
    if len(dims) != 1 or 0 in dims:
        raise ValueError(
            f"Catalog embeddings must share one non-zero dimension, found {sorted(dims)}. "
            "Rebuild them with scripts/build_catalog_embeddings.py"
        )
    return records


def load_catalog(path: str, timeout: int = 30) -> List[SpeciesRecord]:
    """Load the catalog from a local JSON file or an http(s) URL."""
    logger.info(f"Loading catalog from {path}")
    records = parse_catalog(_read_json(path, timeout=timeout))
    logger.info(f"Catalog loaded: {len(records)} species, dimension={len(records[0].embedding)}")
    return records
