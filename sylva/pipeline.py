from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
import time

from .catalog import load_catalog
from .config import SylvaSettings
from .extractor import QueryExtractor
from .filters import combine_filters
from .images import GbifImageLookup, ImageLookup, enrich_with_images
from .logger import logger
from .models import SpeciesRecord
from .providers import ChatLLM, resolve_embeddings
from .ranking import EmbeddingError, catalog_matrix, embed_question, score_catalog, sort_by_similarity
from .rules import is_count_query
from .vocab import Vocabularies, load_vocabularies

EmbedFn = Callable[[List[str]], List[List[float]]]

_UNSET: Any = object()


class InvalidQuestionError(ValueError):
    """The request carried no usable question."""


class SylvaResolver:
    """Resolves free-text questions against the species catalog.

    Collaborators default to the ones described by ``settings`` and can be
    injected for tests or alternative deployments. Passing ``llm=None``
    disables LLM extraction; ``image_lookup=None`` disables enrichment.
    """

    def __init__(
        self,
        settings: Optional[SylvaSettings] = None,
        catalog: Optional[Sequence[SpeciesRecord]] = None,
        embed_fn: Optional[EmbedFn] = None,
        llm: Optional[ChatLLM] = _UNSET,
        image_lookup: Optional[ImageLookup] = _UNSET,
        vocab: Optional[Vocabularies] = None,
    ):
        self.cfg = settings or SylvaSettings()
        logger.info("Initializing Sylva")

        self.catalog: List[SpeciesRecord] = list(catalog) if catalog is not None else load_catalog(self.cfg.catalog_path)
        self._matrix = catalog_matrix(self.catalog)
        self.vocab = vocab or load_vocabularies(self.cfg.assets_path)

        self.embed_fn = embed_fn or resolve_embeddings(
            self.cfg.embed_model,
            timeout=self.cfg.embed_timeout_seconds,
            max_retries=self.cfg.embed_max_retries,
        )

        if llm is _UNSET:
            llm = None
            if self.cfg.enable_extraction and self.cfg.extraction_llm_model:
                llm = ChatLLM(
                    self.cfg.extraction_llm_model,
                    timeout=self.cfg.llm_timeout_seconds,
                    max_retries=self.cfg.llm_max_retries,
                )
                logger.info(f"Extraction LLM: {self.cfg.extraction_llm_model}")
        self.extractor = QueryExtractor(llm, self.vocab)

        self._gbif: Optional[GbifImageLookup] = None
        if image_lookup is _UNSET:
            image_lookup = None
            if self.cfg.enable_images:
                self._gbif = GbifImageLookup(
                    self.cfg.image_api_base,
                    limit=self.cfg.image_limit,
                    timeout=self.cfg.image_timeout_seconds,
                )
                image_lookup = self._gbif.images_for
        self.image_lookup = image_lookup

        # Extraction and question embedding run side by side; the pool is shared
        # across requests, so it is sized for concurrent callers
        self.executor = ThreadPoolExecutor(max_workers=max(2, self.cfg.resolver_workers))

        self._start_time = datetime.now()
        self._request_count = 0
        logger.info(f"Sylva resolver initialized with {len(self.catalog)} species")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures proper cleanup"""
        self.close()

    def close(self):
        """Explicit cleanup method for resources"""
        if hasattr(self, "executor"):
            self.executor.shutdown(wait=True, cancel_futures=True)
        if getattr(self, "_gbif", None) is not None:
            self._gbif.close()

    def stats(self) -> Dict[str, Any]:
        return {
            "uptime_seconds": (datetime.now() - self._start_time).total_seconds(),
            "request_count": self._request_count,
            "start_time": self._start_time.isoformat(),
            "catalog_size": len(self.catalog),
        }

    def resolve(self, question: Optional[str], return_trace: bool = False) -> Dict[str, Any]:
        """Answer ``question`` with ``{"results": [...]}`` or ``{"count": n}``.

        Raises InvalidQuestionError before any external call when the question
        is missing or blank, and EmbeddingError when the question cannot be
        embedded. Extraction failures never propagate.
        """
        if not isinstance(question, str) or not question.strip():
            raise InvalidQuestionError("No question provided")

        self._request_count += 1
        logger.info(f"Processing question: '{question}'")
        t0 = time.monotonic()

        extraction_future = self.executor.submit(self.extractor.extract, question)
        embedding_future = self.executor.submit(embed_question, question, self.embed_fn)
        try:
            vector = embedding_future.result()
        except EmbeddingError:
            extraction_future.cancel()
            logger.error("Error generating question embedding", exc_info=True)
            raise
        extraction = extraction_future.result()
        query = extraction.query

        logger.info(
            f"Final query used for filtering: {query.to_log()} "
            f"(used_llm={extraction.used_primary})"
        )

        scored = score_catalog(vector, self.catalog, self._matrix)
        ranked = sort_by_similarity(scored)
        filtered = combine_filters(query, scored, ranked)
        logger.info(f"Filtered results count: {len(filtered)}")

        if is_count_query(question):
            payload: Dict[str, Any] = {"count": len(filtered)}
        else:
            if self.image_lookup is not None:
                filtered = enrich_with_images(filtered, self.image_lookup, self.cfg.image_max_workers)
            payload = {"results": [r.to_response() for r in filtered]}

        if return_trace:
            payload["trace"] = {
                "query": query.to_log(),
                "used_llm": extraction.used_primary,
                "fallback_reason": getattr(extraction, "reason", None),
                "elapsed_ms": (time.monotonic() - t0) * 1000,
            }
        return payload
