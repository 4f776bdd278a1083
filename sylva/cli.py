import argparse
import json
import os
import sys

from .config import SylvaSettings
from .pipeline import InvalidQuestionError, SylvaResolver
from .ranking import EmbeddingError


def main(argv=None):
    # Default to WARNING logs for CLI unless user overrides
    os.environ.setdefault("SYLVA_LOG_LEVEL", "WARNING")
    p = argparse.ArgumentParser(description="Sylva: ask questions about the tree species catalog")
    p.add_argument("--question", required=True, help="Free-text question, e.g. 'Which trees have medicinal bark?'")
    p.add_argument("--catalog", default=None, help="Override catalog JSON path or URL")
    p.add_argument("--embed", default=None, help="Override embedding model (LiteLLM model or ollama:<model>)")
    p.add_argument("--llm", default=None, help="Override extraction LLM model")
    p.add_argument("--heuristic-only", action="store_true", help="Skip the LLM and use the keyword parser")
    p.add_argument("--no-images", action="store_true", help="Skip GBIF image lookup")
    p.add_argument("--verbose", action="store_true", help="Include the resolved query and extraction path in output")
    args = p.parse_args(argv)

    cfg = SylvaSettings()
    if args.catalog:
        cfg.catalog_path = args.catalog
    if args.embed:
        cfg.embed_model = args.embed
    if args.llm:
        cfg.extraction_llm_model = args.llm
    if args.heuristic_only:
        cfg.enable_extraction = False
    if args.no_images:
        cfg.enable_images = False

    if not args.question.strip():
        print("Error: No question provided", file=sys.stderr)
        sys.exit(2)

    try:
        resolver = SylvaResolver(cfg)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: could not load catalog: {e}", file=sys.stderr)
        sys.exit(1)

    with resolver:
        try:
            out = resolver.resolve(args.question, return_trace=args.verbose)
        except InvalidQuestionError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)
        except EmbeddingError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    if args.verbose and "trace" in out:
        trace = out["trace"]
        print(f"\n[verbose] query: {json.dumps(trace['query'])}", file=sys.stderr)
        print(f"[verbose] used_llm: {trace['used_llm']}", file=sys.stderr)
        if trace.get("fallback_reason"):
            print(f"[verbose] fallback: {trace['fallback_reason']}", file=sys.stderr)
    print(json.dumps(out, indent=2))
