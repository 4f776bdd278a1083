from typing import Callable, List, Optional, Sequence

import numpy as np

from .models import ScoredSpeciesRecord, SpeciesRecord


class EmbeddingError(RuntimeError):
    """The question could not be embedded; the request cannot proceed."""


def catalog_matrix(catalog: Sequence[SpeciesRecord]) -> np.ndarray:
    """Stack catalog embeddings into an (n, d) matrix; build once per catalog."""
    if not catalog:
        return np.zeros((0, 0), dtype=np.float64)
    return np.asarray([r.embedding for r in catalog], dtype=np.float64)


def cosine_similarity(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Cosine of every row of ``matrix`` against ``vector``; zero-norm rows score 0."""
    if matrix.ndim != 2 or matrix.shape[1] != vector.shape[0]:
        raise ValueError(
            f"Embedding dimension mismatch: question has {vector.shape[0]}, catalog has {matrix.shape[-1]}"
        )
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(vector)
    dots = matrix @ vector
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)


def embed_question(question: str, embed_fn: Callable[[List[str]], List[List[float]]]) -> np.ndarray:
    try:
        vectors = embed_fn([question])
        vec = np.asarray(vectors[0], dtype=np.float64)
    except Exception as e:
        raise EmbeddingError(f"Failed to generate embedding for question: {e}") from e
    if vec.ndim != 1 or vec.size == 0:
        raise EmbeddingError(f"Embedding provider returned unexpected shape {vec.shape}")
    return vec


def score_catalog(
    vector: np.ndarray,
    catalog: Sequence[SpeciesRecord],
    matrix: Optional[np.ndarray] = None,
) -> List[ScoredSpeciesRecord]:
    """Attach the cosine similarity to every entry, keeping catalog order.

    Pass the precomputed ``catalog_matrix(catalog)`` to avoid rebuilding it.
    """
    if not catalog:
        return []
    if matrix is None:
        matrix = catalog_matrix(catalog)
    scores = cosine_similarity(matrix, vector)
    # Catalog records are already validated
    return [
        ScoredSpeciesRecord.model_construct(**dict(r), similarity=float(s))
        for r, s in zip(catalog, scores.tolist())
    ]


def sort_by_similarity(scored: Sequence[ScoredSpeciesRecord]) -> List[ScoredSpeciesRecord]:
    # Stable: equal scores keep their catalog order
    return sorted(scored, key=lambda r: r.similarity, reverse=True)
