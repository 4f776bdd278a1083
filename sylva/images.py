"""Per-species image lookup against the GBIF occurrence search API."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

import requests

from .logger import logger
from .models import ScoredSpeciesRecord

ImageLookup = Callable[[str], List[str]]


class GbifImageLookup:
    """Collects StillImage identifiers from GBIF occurrences of a species.

    Any failure (network, HTTP status, malformed payload) yields an empty list.
    """

    def __init__(self, api_base: str = "https://api.gbif.org/v1", limit: int = 5, timeout: int = 10):
        self.api_base = api_base.rstrip("/")
        self.limit = limit
        self.timeout = timeout
        self._session = requests.Session()

    def images_for(self, species_name: str) -> List[str]:
        try:
            resp = self._session.get(
                f"{self.api_base}/occurrence/search",
                params={"mediaType": "StillImage", "scientificName": species_name, "limit": 10},
                timeout=self.timeout,
            )
            if not resp.ok:
                return []
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"GBIF lookup failed for '{species_name}': {e}")
            return []

        images: List[str] = []
        for result in data.get("results") or []:
            for media in result.get("media") or []:
                if len(images) >= self.limit:
                    return images
                if isinstance(media, dict) and media.get("type") == "StillImage" and media.get("identifier"):
                    images.append(media["identifier"])
        return images[:self.limit]

    def close(self):
        self._session.close()


def _safe_lookup(lookup: ImageLookup, species_name: str) -> List[str]:
    try:
        return list(lookup(species_name) or [])
    except Exception as e:
        logger.debug(f"Image lookup failed for '{species_name}': {e}")
        return []


def enrich_with_images(
    records: Sequence[ScoredSpeciesRecord],
    lookup: ImageLookup,
    max_workers: int = 8,
) -> List[ScoredSpeciesRecord]:
    """Attach images to each record concurrently; order is preserved."""
    if not records:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(records)))) as pool:
        images = list(pool.map(lambda r: _safe_lookup(lookup, r.species), records))
    return [r.model_copy(update={"images": imgs}) for r, imgs in zip(records, images)]
