from fastapi import FastAPI, HTTPException, Depends, Header
from fastapi.responses import JSONResponse
from typing import Any, Dict
import os
import threading
from datetime import datetime

from dotenv import load_dotenv

from . import __version__
from .config import SylvaSettings
from .pipeline import InvalidQuestionError, SylvaResolver
from .models import AskRequest, ErrorResponse, HealthResponse
from .logger import logger
from .ranking import EmbeddingError
from .vocab import load_vocabularies

# Load environment variables from .env file
load_dotenv()

app = FastAPI(title="Sylva API", version=__version__)
settings = SylvaSettings()
_resolver_lock = threading.Lock()
resolver = None  # Lazy initialization


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def verify_api_key(authorization: str = Header(None)):
    """Basic API key authentication via static token.
    - Set SYLVA_API_KEY to any secret string to require clients to send 'Authorization: Bearer <SYLVA_API_KEY>'.
    - For local/dev without auth, set SYLVA_ALLOW_ANON=1.
    """
    api_key = os.getenv("SYLVA_API_KEY")
    if not api_key:
        if os.getenv("SYLVA_ALLOW_ANON", "0").lower() in ("1", "true", "yes"):
            return True
        raise HTTPException(
            status_code=401,
            detail="SYLVA_API_KEY not set. Set SYLVA_API_KEY or SYLVA_ALLOW_ANON=1 for local development."
        )
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Authorization header. Use 'Authorization: Bearer <SYLVA_API_KEY>'")
    if authorization[len("Bearer "):].strip() != api_key:
        raise HTTPException(status_code=401, detail="Invalid API key. Check your SYLVA_API_KEY env variable")
    return True


def get_resolver() -> SylvaResolver:
    """Lazy initialization of the resolver so a missing catalog does not crash startup"""
    global resolver
    if resolver is None:
        with _resolver_lock:
            if resolver is None:
                resolver = SylvaResolver(settings)
    return resolver


@app.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "Sylva API",
        "version": __version__
    }


@app.post(
    "/ask",
    responses={
        400: {"model": ErrorResponse, "description": "No question provided"},
        500: {"model": ErrorResponse, "description": "Embedding or query processing failure"},
        503: {"model": ErrorResponse, "description": "Catalog unavailable"},
    },
)
def ask(item: AskRequest, auth: bool = Depends(verify_api_key)):
    # Reject empty input before touching the catalog or any provider
    if not item.question or not item.question.strip():
        return _error(400, "No question provided")
    try:
        current = get_resolver()
    except Exception as e:
        logger.error(f"Sylva resolver initialization failed: {e}")
        return _error(503, "Catalog unavailable. Ensure the catalog JSON with embeddings exists.")
    try:
        return current.resolve(item.question)
    except InvalidQuestionError as ve:
        return _error(400, str(ve))
    except EmbeddingError:
        return _error(500, "Failed to generate embedding for question.")
    except Exception:
        logger.exception("Query processing failed")
        return _error(500, "Query processing failed")


@app.get("/config")
def get_config(auth: bool = Depends(verify_api_key)) -> Dict[str, Any]:
    return settings.model_dump()


@app.get("/vocabulary")
def get_vocabulary(auth: bool = Depends(verify_api_key)):
    if resolver is not None:
        return resolver.vocab.as_dict()
    return load_vocabularies(settings.assets_path).as_dict()


@app.get("/metrics")
def get_metrics(auth: bool = Depends(verify_api_key)) -> Dict[str, Any]:
    """Get basic metrics for monitoring"""
    try:
        return get_resolver().stats()
    except Exception as e:
        logger.error(f"Failed to get metrics: {e}")
        return _error(503, "Catalog unavailable. Ensure the catalog JSON with embeddings exists.")


def main():
    import uvicorn
    logger.info("Starting Sylva API server...")
    uvicorn.run(app, host=os.getenv("SYLVA_HOST", "0.0.0.0"), port=int(os.getenv("SYLVA_PORT", 8000)))
