"""Structured query extraction through a chat LLM with heuristic fallback."""

from __future__ import annotations

import json
import re
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

from .heuristics import heuristic_parse
from .logger import logger
from .models import Extracted, ExtractionResponse, ExtractionResult, FellBack, Query
from .prompts import EXTRACTION_SYSTEM_PROMPT, QUERY_EXTRACTION_PROMPT
from .providers import ChatLLM
from .rules import normalize_term
from .vocab import DEFAULT_VOCABULARIES, Vocabularies

_T = TypeVar("_T", bound=BaseModel)


def _extract_json_str(text: str) -> Optional[str]:
    m = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL | re.IGNORECASE)
    if m:
        return m.group(1).strip()
    s = text.find("{")
    e = text.rfind("}")
    if s != -1 and e != -1 and e > s:
        return text[s:e+1]
    return None


def parse_llm_json(text: str, model: Type[_T]) -> Optional[_T]:
    """Parse an LLM reply into ``model``; None when no valid JSON object is found."""
    js = _extract_json_str(text or "")
    if not js:
        return None
    try:
        data = json.loads(js)
        return model.model_validate(data)
    except Exception:
        return None


class QueryExtractor:
    """Turns a question into a Query.

    The LLM path is tried first; any provider, network or parse error falls
    back to ``heuristic_parse``. The returned result says which path ran.
    """

    def __init__(self, llm: Optional[ChatLLM] = None, vocab: Optional[Vocabularies] = None):
        self.llm = llm
        self.vocab = vocab or DEFAULT_VOCABULARIES

    def build_prompt(self, question: str) -> str:
        return QUERY_EXTRACTION_PROMPT.format(
            question=question,
            services=", ".join(self.vocab.services),
            parts=", ".join(self.vocab.parts),
        )

    def _fallback(self, question: str, reason: str) -> FellBack:
        return FellBack(query=heuristic_parse(question, self.vocab), reason=reason)

    def extract(self, question: str) -> ExtractionResult:
        if self.llm is None:
            return self._fallback(question, "extraction disabled")

        try:
            out = self.llm.chat(EXTRACTION_SYSTEM_PROMPT, self.build_prompt(question))
        except Exception as e:
            logger.warning(f"Extraction LLM failed, using heuristic parser: {e}")
            return self._fallback(question, f"llm error: {e}")

        parsed = parse_llm_json(out, ExtractionResponse)
        if parsed is None:
            logger.warning(f"Failed to parse extraction LLM response as JSON: {(out or '')[:500]}")
            return self._fallback(question, "unparseable llm response")

        query = Query(
            species=parsed.species,
            ecosystem_service=normalize_term(parsed.ecosystem_service, self.vocab.services),
            part_used=normalize_term(parsed.part_used, self.vocab.parts),
            only=parsed.only,
            and_=parsed.and_,
        )
        return Extracted(query=query)
