"""
Pipeline Configuration

Loads retrieval, assembly and timeout settings from environment variables.
Defaults: similarity threshold 0.7,
5 vector hits, 3 keyword hits, top 5 overall, 500-character excerpts.
"""

import os
from dataclasses import dataclass, field

_TRUTHY = ("true", "1", "yes")


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


@dataclass
class RetrievalConfig:
    """Knobs for the hybrid retriever.

    Environment Variables:
        BLOG_RAG_SIMILARITY_THRESHOLD: Minimum cosine similarity (default: 0.7)
        BLOG_RAG_VECTOR_LIMIT: Vector result cap before merge (default: 5)
        BLOG_RAG_KEYWORD_LIMIT: Keyword result cap (default: 3)
        BLOG_RAG_TOP_K: Candidates returned after merge (default: 5)
        BLOG_RAG_EMBEDDING_TIMEOUT: Seconds for the query embedding (default: 5)
        BLOG_RAG_VECTOR_TIMEOUT: Seconds for the vector query (default: 5)
        BLOG_RAG_KEYWORD_TIMEOUT: Seconds for the keyword query (default: 5)
    """

    similarity_threshold: float = 0.7
    vector_limit: int = 5
    keyword_limit: int = 3
    top_k: int = 5
    embedding_timeout_s: float = 5.0
    vector_timeout_s: float = 5.0
    keyword_timeout_s: float = 5.0

    @classmethod
    def from_env(cls) -> "RetrievalConfig":
        return cls(
            similarity_threshold=_env_float("BLOG_RAG_SIMILARITY_THRESHOLD", 0.7),
            vector_limit=_env_int("BLOG_RAG_VECTOR_LIMIT", 5),
            keyword_limit=_env_int("BLOG_RAG_KEYWORD_LIMIT", 3),
            top_k=_env_int("BLOG_RAG_TOP_K", 5),
            embedding_timeout_s=_env_float("BLOG_RAG_EMBEDDING_TIMEOUT", 5.0),
            vector_timeout_s=_env_float("BLOG_RAG_VECTOR_TIMEOUT", 5.0),
            keyword_timeout_s=_env_float("BLOG_RAG_KEYWORD_TIMEOUT", 5.0),
        )


@dataclass
class PipelineConfig:
    """Top-level settings for one deployment.

    Environment Variables:
        BLOG_RAG_EXCERPT_CHARS: Content excerpt cap per context block (default: 500)
        BLOG_RAG_COMPLETION_TIMEOUT: Seconds for the completion call (default: 30)
        BLOG_RAG_LOGGING_TIMEOUT: Seconds for the interaction write (default: 5)
        BLOG_RAG_USE_POSTGRES: Use the pgvector store (default: false)
        USE_MOCK_EMBEDDINGS / USE_MOCK_COMPLETION: Offline test doubles (default: false)
    """

    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    excerpt_chars: int = 500
    completion_timeout_s: float = 30.0
    logging_timeout_s: float = 5.0
    use_postgres: bool = False
    use_mock_embeddings: bool = False
    use_mock_completion: bool = False

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Load config from environment variables."""
        return cls(
            retrieval=RetrievalConfig.from_env(),
            excerpt_chars=_env_int("BLOG_RAG_EXCERPT_CHARS", 500),
            completion_timeout_s=_env_float("BLOG_RAG_COMPLETION_TIMEOUT", 30.0),
            logging_timeout_s=_env_float("BLOG_RAG_LOGGING_TIMEOUT", 5.0),
            use_postgres=_env_bool("BLOG_RAG_USE_POSTGRES", "false"),
            use_mock_embeddings=_env_bool("USE_MOCK_EMBEDDINGS", "false"),
            use_mock_completion=_env_bool("USE_MOCK_COMPLETION", "false"),
        )


# Global config singleton
_config: PipelineConfig | None = None


def get_config() -> PipelineConfig:
    """Get the global pipeline config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = PipelineConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
