#!/usr/bin/env python3
"""
Attach embeddings to every catalog entry.
- Embedding text per entry: Species, Family, EcosystemService, PartsUsed,
  RelatedFunctionalTraits (see sylva.sheet.embedding_text)
- Must use the same model the API embeds questions with (SYLVA_EMBED_MODEL)
"""
import argparse, json, os, logging

from tqdm import tqdm

from sylva.providers import resolve_embeddings
from sylva.sheet import embedding_text

logging.basicConfig(level=logging.INFO, format="%(message)s", force=True)
logger = logging.getLogger(__name__)


def embed_resilient(batch_texts, batch_names, embed_fn):
    try:
        out = embed_fn(batch_texts)
        if not isinstance(out, list) or len(out) != len(batch_texts):
            raise RuntimeError("Embedding provider returned unexpected shape")
        return out
    except Exception as e:
        if len(batch_texts) == 1:
            raise RuntimeError(f"Embedding failed for species={batch_names[0]}: {e}") from e
        mid = len(batch_texts) // 2
        return embed_resilient(batch_texts[:mid], batch_names[:mid], embed_fn) + \
               embed_resilient(batch_texts[mid:], batch_names[mid:], embed_fn)


def build_embeddings(data_path: str, out_path: str, embed_model: str, batch: int = 16) -> int:
    if not os.path.exists(data_path):
        raise FileNotFoundError(f"Catalog not found: {data_path}")
    with open(data_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    embed_fn = resolve_embeddings(embed_model, max_retries=3)
    texts = [embedding_text(entry) for entry in data]
    names = [entry.get("Species", "") for entry in data]
    for i in tqdm(range(0, len(texts), batch), desc="Embedding"):
        vectors = embed_resilient(texts[i:i + batch], names[i:i + batch], embed_fn)
        for entry, vec in zip(data[i:i + batch], vectors):
            entry["embedding"] = vec

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return len(data)


def main():
    assets = os.getenv("SYLVA_ASSETS_PATH") or "assets"
    ap = argparse.ArgumentParser(description="Add embeddings to each catalog entry.")
    ap.add_argument("--data", default=os.path.join(assets, "data.json"))
    ap.add_argument("--out", default=os.path.join(assets, "data_with_embeddings.json"))
    ap.add_argument("--embed_model", default=os.getenv("SYLVA_EMBED_MODEL") or "openai/text-embedding-3-small")
    ap.add_argument("--batch", type=int, default=int(os.getenv("SYLVA_EMB_BATCH", "16")))
    args = ap.parse_args()

    logger.info(f"Input : {args.data}")
    logger.info(f"Output: {args.out}")
    logger.info(f"Model : {args.embed_model}")
    n = build_embeddings(args.data, args.out, args.embed_model, batch=args.batch)
    logger.info(f"Wrote embeddings for {n} species to {args.out}")


if __name__ == "__main__":
    main()
