import os
from pydantic import BaseModel, Field
from typing import Optional, Dict

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(env_var: str, default: int) -> bool:
    return bool(int(os.getenv(env_var, default)))


class SylvaSettings(BaseModel):
    # Core paths
    assets_path: str = Field(default=os.getenv("SYLVA_ASSETS_PATH", "assets"))
    # Local JSON file or http(s) URL; derived from assets_path when unset
    catalog_path: Optional[str] = Field(default=os.getenv("SYLVA_CATALOG_PATH"))

    # Embeddings (must match the model used to embed the catalog offline)
    embed_model: str = Field(default=os.getenv("SYLVA_EMBED_MODEL", "openai/text-embedding-3-small"))

    # Structured query extraction
    extraction_llm_model: str = Field(default=os.getenv("SYLVA_EXTRACTION_LLM", "openai/gpt-4o-mini"))
    enable_extraction: bool = Field(default=_env_flag("SYLVA_EXTRACTION", 1))

    # LLM/Embedding provider resilience knobs; 1 attempt means no retry
    llm_timeout_seconds: int = Field(default=int(os.getenv("SYLVA_LLM_TIMEOUT", 30)))
    llm_max_retries: int = Field(default=int(os.getenv("SYLVA_LLM_RETRIES", 1)))
    embed_timeout_seconds: int = Field(default=int(os.getenv("SYLVA_EMBED_TIMEOUT", 30)))
    embed_max_retries: int = Field(default=int(os.getenv("SYLVA_EMBED_RETRIES", 1)))

    # Per-result image enrichment (GBIF occurrence search)
    enable_images: bool = Field(default=_env_flag("SYLVA_IMAGES", 1))
    image_api_base: str = Field(default=os.getenv("SYLVA_IMAGE_API_BASE", "https://api.gbif.org/v1"))
    image_limit: int = Field(default=int(os.getenv("SYLVA_IMAGE_LIMIT", 5)))
    image_timeout_seconds: int = Field(default=int(os.getenv("SYLVA_IMAGE_TIMEOUT", 10)))
    image_max_workers: int = Field(default=int(os.getenv("SYLVA_IMAGE_WORKERS", 8)))

    # Shared pool for per-request extraction and embedding; each request holds two workers
    resolver_workers: int = Field(default=int(os.getenv("SYLVA_RESOLVER_WORKERS", 32)))

    log_level: str = Field(default=os.getenv("SYLVA_LOG_LEVEL", "WARNING"))

    def model_post_init(self, __context: Dict) -> None:  # type: ignore[override]
        if not self.catalog_path:
            self.catalog_path = os.path.join(self.assets_path, "data_with_embeddings.json")
