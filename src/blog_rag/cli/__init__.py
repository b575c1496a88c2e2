"""
CLI module - unified command-line interface.

Provides entry points for:
- Asking questions and serving the chat API
- Syncing and embedding blog content
- Running the retrieval quality gate
"""

from blog_rag.cli.commands import (
    main,
    run_ask_cli,
    run_serve_cli,
    run_sync_cli,
    run_embed_cli,
    run_eval_cli,
)

__all__ = [
    "main",
    "run_ask_cli",
    "run_serve_cli",
    "run_sync_cli",
    "run_embed_cli",
    "run_eval_cli",
]
