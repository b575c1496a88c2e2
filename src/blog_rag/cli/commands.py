"""
CLI commands - entry points for the blog assistant.

Each command follows the same pattern:
1. Parse arguments
2. Load environment
3. Build collaborators from configuration
4. Do the work and print results
5. Return exit code

The commands are thin wrappers: all behaviour lives in the pipeline,
ingestion and eval modules so it can be tested without a shell.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

COMMANDS = ("ask", "serve", "sync", "embed", "eval")


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.getenv("BLOG_RAG_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_ask_cli() -> int:
    """Answer one question from the command line."""
    from blog_rag.observability import init_phoenix, shutdown_phoenix
    from blog_rag.pipeline import create_pipeline

    parser = argparse.ArgumentParser(description="Ask the blog assistant a question")
    parser.add_argument("question", nargs="+", help="Question text")
    parser.add_argument("--conversation-id", default=None, help="Conversation to attach to")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    _configure_logging(args.verbose)
    init_phoenix()

    pipeline = create_pipeline(seed_sample_corpus=True)
    try:
        result = pipeline.answer(" ".join(args.question), args.conversation_id)
    finally:
        pipeline.close()
        shutdown_phoenix()

    print(result.answer)
    if result.sources:
        print("\nSources:")
        for source in result.sources:
            print(f"  - {source['title']} (/{source['slug']}/)")

    return 0 if result.ok else 1


def run_serve_cli() -> int:
    """Serve the chat API with uvicorn."""
    import uvicorn

    from blog_rag.api import create_app
    from blog_rag.observability import init_phoenix, shutdown_phoenix

    parser = argparse.ArgumentParser(description="Run the chat API server")
    parser.add_argument("--host", default=os.getenv("BLOG_RAG_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("BLOG_RAG_PORT", "8000")))
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    _configure_logging(args.verbose)
    init_phoenix()

    try:
        uvicorn.run(create_app(), host=args.host, port=args.port)
    finally:
        shutdown_phoenix()
    return 0


def _open_store():
    from blog_rag.core import get_config
    from blog_rag.retrieval import PgVectorStore, get_document_store

    store = get_document_store(use_postgres=get_config().use_postgres)
    if isinstance(store, PgVectorStore):
        store.create_schema()
    else:
        logger.warning("Using the in-memory store; nothing will persist after exit")
    return store


def _embed_missing(store) -> int:
    from blog_rag.core import get_config
    from blog_rag.embeddings import get_embedding_provider
    from blog_rag.ingestion import generate_missing_embeddings

    config = get_config()
    embeddings = get_embedding_provider(
        use_mock=config.use_mock_embeddings,
        timeout=config.retrieval.embedding_timeout_s,
    )
    report = generate_missing_embeddings(store, embeddings)

    print(f"Embedded: {report.succeeded}/{report.processed}")
    for doc_id in report.failed_ids:
        print(f"  [FAIL] {doc_id}")
    return 0 if report.failed == 0 else 1


def run_sync_cli() -> int:
    """Sync markdown posts from a directory into the document store."""
    from blog_rag.ingestion import sync_posts

    parser = argparse.ArgumentParser(description="Sync markdown posts into the store")
    parser.add_argument("directory", help="Directory of *.md posts")
    parser.add_argument("--embed", action="store_true", help="Embed new posts afterwards")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    _configure_logging(args.verbose)

    store = _open_store()
    try:
        documents = sync_posts(store, args.directory)
        published = sum(1 for d in documents if d.is_published)
        print(f"Synced {len(documents)} posts ({published} published)")
        if args.embed:
            return _embed_missing(store)
        return 0
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


def run_embed_cli() -> int:
    """Generate embeddings for posts that don't have one yet."""
    parser = argparse.ArgumentParser(description="Embed posts missing an embedding")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    _configure_logging(args.verbose)

    store = _open_store()
    try:
        return _embed_missing(store)
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


def run_eval_cli() -> int:
    """Retrieval quality gate over the golden queries."""
    from blog_rag.evals import DEFAULT_F1_THRESHOLD, run_retrieval_eval

    parser = argparse.ArgumentParser(description="Run retrieval quality eval")
    parser.add_argument("--threshold", type=float, default=DEFAULT_F1_THRESHOLD)
    parser.add_argument("--quiet", action="store_true", help="Minimal output")
    args = parser.parse_args()

    _configure_logging()

    print("=" * 60)
    print("RETRIEVAL QUALITY EVAL")
    print("=" * 60)

    report = run_retrieval_eval(threshold=args.threshold)

    if not args.quiet:
        for result in report.results:
            status = "PASS" if result.passed else "FAIL"
            print(f"  [{status}] {result.case_id}: {result.query!r} (F1: {result.metrics.f1_score:.2f})")
            if result.metrics.missing:
                print(f"        Missing: {', '.join(result.metrics.missing)}")
            if result.metrics.extra:
                print(f"        Extra: {', '.join(result.metrics.extra)}")

    print(f"\nAverage F1: {report.avg_f1:.2f}")
    print(f"Threshold: {report.threshold}")
    print(f"Passed: {report.passed_cases}/{report.total_cases}")

    if report.all_passed:
        print("\n>>> RETRIEVAL EVAL GATE: PASSED <<<")
        return 0
    else:
        print("\n>>> RETRIEVAL EVAL GATE: FAILED <<<")
        return 1


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        blog-rag ask "what is a hash table?"
        blog-rag serve --port 8000
        blog-rag sync ./posts --embed
        blog-rag embed
        blog-rag eval
    """
    _load_env()

    parser = argparse.ArgumentParser(
        description="Blog question-answering assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  ask     Answer a question from the published posts
  serve   Run the HTTP chat API
  sync    Load markdown posts into the document store
  embed   Generate embeddings for posts that lack one
  eval    Run the retrieval quality gate
        """,
    )
    parser.add_argument("command", choices=COMMANDS, help="Command to run")

    args, remaining = parser.parse_known_args()

    commands = {
        "ask": run_ask_cli,
        "serve": run_serve_cli,
        "sync": run_sync_cli,
        "embed": run_embed_cli,
        "eval": run_eval_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
