import os
from typing import Callable, List, Optional
import time
import numpy as np
import requests

import litellm
from litellm import completion, embedding as llm_embedding


def _norm(vectors: List[List[float]]) -> List[List[float]]:
    arr = np.asarray(vectors, dtype=np.float32)
    arr /= (np.linalg.norm(arr, axis=1, keepdims=True) + 1e-9)
    return arr.tolist()


def _backoff(attempt: int, attempts: int) -> None:
    if attempt < attempts - 1:
        time.sleep(0.5 * (2 ** attempt))


def resolve_embeddings(
    spec: str,
    timeout: Optional[int] = None,
    max_retries: Optional[int] = None,
    **keys,
) -> Callable[[List[str]], List[List[float]]]:
    """
    Returns a function: List[str] -> List[List[float]].
    Supported specs:
      - "litellm:<provider/model>" (e.g., litellm:openai/text-embedding-3-small)
      - "ollama:<model>" (direct HTTP call to the Ollama embeddings endpoint)
      - anything else is handed to LiteLLM as a model name
    Notes:
      - Vectors are L2-normalized; cosine similarity is unaffected.
      - Use OLLAMA_API_BASE env var for remote Ollama endpoints (defaults to localhost:11434).
      - max_retries counts attempts; 1 means a single call with no retry.
    """
    embed_timeout = timeout if timeout is not None else int(os.getenv("SYLVA_EMBED_TIMEOUT", "30"))
    attempts = max(1, max_retries if max_retries is not None else int(os.getenv("SYLVA_EMBED_RETRIES", "1")))

    if spec.startswith("litellm:"):
        return resolve_embeddings(spec[len("litellm:"):], timeout=timeout, max_retries=max_retries, **keys)

    if spec.startswith("ollama:") or spec.startswith("ollama/"):
        # Ollama tags like ":latest" are valid model names; strip the prefix only
        ollama_model = spec.split(":", 1)[1] if spec.startswith("ollama:") else spec[len("ollama/"):]
        api_base = os.getenv("OLLAMA_API_BASE", "http://localhost:11434")

        def embed(texts: List[str]) -> List[List[float]]:
            vectors = []
            for text in texts:
                last_err = None
                for attempt in range(attempts):
                    try:
                        response = requests.post(
                            f"{api_base}/api/embeddings",
                            json={"model": ollama_model, "prompt": text},
                            headers={"Content-Type": "application/json"},
                            timeout=embed_timeout,
                        )
                        response.raise_for_status()
                        vectors.append(response.json()["embedding"])
                        last_err = None
                        break
                    except Exception as e:
                        last_err = e
                        _backoff(attempt, attempts)
                if last_err is not None:
                    raise RuntimeError(f"Ollama embedding failed for text '{text[:50]}...': {last_err}")
            return _norm(vectors)
        return embed

    if not spec:
        raise ValueError("Empty embedding spec")

    # Some providers may not support all params; instruct LiteLLM to drop unknowns
    litellm.drop_params = True

    def embed(texts: List[str]) -> List[List[float]]:
        kwargs = {"model": spec, "input": texts, "timeout": embed_timeout}
        kwargs.update(keys)
        last_err = None
        for attempt in range(attempts):
            try:
                resp = llm_embedding(**kwargs)
                vectors = [item["embedding"] for item in resp["data"]]
                return _norm(vectors)
            except Exception as e:
                last_err = e
                _backoff(attempt, attempts)
        raise RuntimeError(f"Embedding provider failed: {last_err}")
    return embed


class ChatLLM:
    """
    LiteLLM chat completions for all providers.
    Accepts model like "openai/gpt-4o-mini", "anthropic/claude-3-5-sonnet",
    "groq/llama-3.1-70b", "ollama/llama3", etc.
    """
    def __init__(self, model: str, timeout: Optional[int] = None, max_retries: Optional[int] = None):
        if not model:
            raise ValueError("No chat model configured")
        self._model = model
        self._completion = completion
        self._wire_model = model.replace(":", "/")
        # Single API base: only honor OLLAMA_API_BASE for ollama/* models
        self._api_base = os.getenv("OLLAMA_API_BASE") if self._wire_model.startswith("ollama/") else None
        self._timeout = timeout if timeout is not None else int(os.getenv("SYLVA_LLM_TIMEOUT", "30"))
        self._attempts = max(1, max_retries if max_retries is not None else int(os.getenv("SYLVA_LLM_RETRIES", "1")))
        # Ensure unknown params are safely dropped
        litellm.drop_params = True

    @property
    def model(self) -> str:
        return self._model

    def chat(self, system: str, user: str, temperature: float = 0.0, max_tokens: int = 512) -> str:
        kwargs = {
            "model": self._wire_model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "api_base": self._api_base,
            "timeout": self._timeout,
        }
        last_err = None
        for attempt in range(self._attempts):
            try:
                resp = self._completion(**kwargs)
                return (resp.choices[0].message.content or "").strip()
            except Exception as e:
                last_err = e
                _backoff(attempt, self._attempts)
        raise RuntimeError(f"LLM completion failed: {last_err}")
