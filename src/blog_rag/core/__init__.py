"""
Core module - shared protocols, value types, errors and configuration.

USAGE:
------
from blog_rag.core import DocumentStore, EmbeddingProvider, RetrievedCandidate

class MyStore:
    '''Implements DocumentStore protocol.'''
    ...
"""

from blog_rag.core.protocols import (
    # Protocols
    EmbeddingProvider,
    CompletionProvider,
    DocumentStore,
    # Data classes
    CandidateSource,
    RetrievedCandidate,
    Citation,
    InteractionRecord,
    KEYWORD_MATCH_SCORE,
)
from blog_rag.core.errors import (
    PipelineError,
    RetrievalUnavailable,
    CompletionFailure,
    EmbeddingDimensionMismatch,
    InvalidQuery,
    LoggingFailure,
)
from blog_rag.core.config import (
    RetrievalConfig,
    PipelineConfig,
    get_config,
    reset_config,
)
from blog_rag.core.executor import (
    call_in_executor,
    make_executor,
    run_blocking,
)

__all__ = [
    # Protocols
    "EmbeddingProvider",
    "CompletionProvider",
    "DocumentStore",
    # Data classes
    "CandidateSource",
    "RetrievedCandidate",
    "Citation",
    "InteractionRecord",
    "KEYWORD_MATCH_SCORE",
    # Errors
    "PipelineError",
    "RetrievalUnavailable",
    "CompletionFailure",
    "EmbeddingDimensionMismatch",
    "InvalidQuery",
    "LoggingFailure",
    # Config
    "RetrievalConfig",
    "PipelineConfig",
    "get_config",
    "reset_config",
    # Worker threads
    "call_in_executor",
    "make_executor",
    "run_blocking",
]
