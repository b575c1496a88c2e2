"""
Evals - quality gates for the retrieval pipeline.

Run from the CLI:
    blog-rag eval
"""

from blog_rag.evals.retrieval_eval import (
    DEFAULT_F1_THRESHOLD,
    RetrievalEvalReport,
    RetrievalEvalResult,
    RetrievalMetrics,
    build_sample_retriever,
    calculate_retrieval_metrics,
    run_retrieval_eval,
)

__all__ = [
    "DEFAULT_F1_THRESHOLD",
    "RetrievalEvalReport",
    "RetrievalEvalResult",
    "RetrievalMetrics",
    "build_sample_retriever",
    "calculate_retrieval_metrics",
    "run_retrieval_eval",
]
