"""
Pydantic models for Sylva catalog records, queries, API payloads and LLM responses.
These models provide automatic validation, strong typing, and self-documenting schemas.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal, Union, Any
from datetime import datetime

# =============================================================================
# CATALOG MODELS
# =============================================================================

class SpeciesRecord(BaseModel):
    """One catalog entry; immutable once loaded.

    Reads either the catalog file keys (``Species``, ``EcosystemService``, ...)
    or their camelCase equivalents, and serializes with the catalog file keys.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    species: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("Species", "species"),
        serialization_alias="Species",
        description="Scientific name",
    )
    family: str = Field(
        default="",
        validation_alias=AliasChoices("Family", "family"),
        serialization_alias="Family",
    )
    ecosystem_services: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("EcosystemService", "ecosystemServices", "ecosystem_services"),
        serialization_alias="EcosystemService",
    )
    parts_used: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("PartsUsed", "partsUsed", "parts_used"),
        serialization_alias="PartsUsed",
    )
    related_traits: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("RelatedFunctionalTraits", "relatedTraits", "related_traits"),
        serialization_alias="RelatedFunctionalTraits",
    )
    notes: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OBS", "notes"),
        serialization_alias="OBS",
    )
    embedding: List[float] = Field(default_factory=list, description="Precomputed embedding vector")


class ScoredSpeciesRecord(SpeciesRecord):
    """Catalog entry annotated with its similarity to the question."""
    similarity: float = Field(..., description="Cosine similarity to the question embedding")
    images: Optional[List[str]] = Field(None, description="Up to five image URLs")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"embedding"}, exclude_none=True)

# =============================================================================
# QUERY MODELS
# =============================================================================

class AndClause(BaseModel):
    """Additional conjunctive constraint; values are raw, not canonicalized."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ecosystem_service: Optional[str] = Field(None, alias="ecosystemService")
    part_used: Optional[str] = Field(None, alias="partUsed")

    @field_validator("ecosystem_service", "part_used", mode="before")
    @classmethod
    def _strings_only(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) and v.strip() else None


class Query(BaseModel):
    """Structured form of a question."""
    model_config = ConfigDict(populate_by_name=True)

    species: Optional[str] = None
    ecosystem_service: Optional[str] = Field(None, alias="ecosystemService")
    part_used: Optional[str] = Field(None, alias="partUsed")
    only: Optional[bool] = None
    and_: Optional[AndClause] = Field(None, alias="and")

    def to_log(self) -> dict:
        return self.model_dump(by_alias=True)

# =============================================================================
# LLM STRUCTURED RESPONSES
# =============================================================================

class ExtractionResponse(BaseModel):
    """Expected structure from the extraction LLM."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    species: Optional[str] = None
    ecosystem_service: Optional[str] = Field(None, alias="ecosystemService")
    part_used: Optional[str] = Field(None, alias="partUsed")
    only: Optional[Any] = None
    and_: Optional[Any] = Field(None, alias="and")

    @field_validator("only", mode="before")
    @classmethod
    def _truthy(cls, v: Any) -> Optional[bool]:
        if v is None:
            return None
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes")
        return bool(v)

    @field_validator("and_", mode="before")
    @classmethod
    def _object_only(cls, v: Any) -> Optional[AndClause]:
        if not isinstance(v, dict):
            return None
        clause = AndClause.model_validate(v)
        if clause.ecosystem_service is None and clause.part_used is None:
            return None
        return clause


class Extracted(BaseModel):
    """The extraction LLM produced the query."""
    kind: Literal["extracted"] = "extracted"
    query: Query
    used_primary: Literal[True] = True


class FellBack(BaseModel):
    """The heuristic parser produced the query."""
    kind: Literal["fallback"] = "fallback"
    query: Query
    reason: str
    used_primary: Literal[False] = False


ExtractionResult = Union[Extracted, FellBack]

# =============================================================================
# API MODELS
# =============================================================================

class AskRequest(BaseModel):
    """Question payload for /ask; missing questions are reported as 400, not 422."""
    question: Optional[str] = Field(None, description="Free-text question about the catalog")


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service health status")
    timestamp: datetime = Field(..., description="Current server timestamp")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
