"""
Semantic Conventions for Span Attributes

GenAI keys follow the OpenTelemetry GenAI conventions; retrieval and
pipeline keys live in their own namespaces.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from blog_rag.retrieval.hybrid import RetrievalOutcome

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai" or "mock"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"

# Only set when PHOENIX_CAPTURE_LLM_CONTENT is enabled
GEN_AI_PROMPT = "gen_ai.prompt"
GEN_AI_COMPLETION = "gen_ai.completion"


# ---------------------------------------------------------------------------
# RETRIEVAL NAMESPACE
# ---------------------------------------------------------------------------

RETRIEVAL_TOP_K = "retrieval.top_k"
RETRIEVAL_THRESHOLD = "retrieval.similarity_threshold"
RETRIEVAL_VECTOR_STATUS = "retrieval.vector.status"  # ok / empty / failed / timeout
RETRIEVAL_VECTOR_COUNT = "retrieval.vector.count"
RETRIEVAL_KEYWORD_STATUS = "retrieval.keyword.status"
RETRIEVAL_KEYWORD_COUNT = "retrieval.keyword.count"
RETRIEVAL_DEGRADED = "retrieval.degraded"
RETRIEVAL_RESULT_COUNT = "retrieval.result.count"
RETRIEVAL_DOC_IDS = "retrieval.result.doc_ids"


# ---------------------------------------------------------------------------
# PIPELINE NAMESPACE
# ---------------------------------------------------------------------------

PIPELINE_CONVERSATION_ID = "pipeline.conversation_id"
PIPELINE_PROMPT_VERSION = "pipeline.prompt.version"
PIPELINE_PROMPT_CHARS = "pipeline.prompt.chars"
PIPELINE_SOURCE_COUNT = "pipeline.source_count"
PIPELINE_ERROR_TYPE = "pipeline.error.type"


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def completion_attributes(provider: Any) -> dict:
    """Which model system answered; providers without the attributes report "unknown"."""
    return {
        GEN_AI_SYSTEM: getattr(provider, "system", "unknown"),
        GEN_AI_REQUEST_MODEL: getattr(provider, "model", "unknown"),
    }


def retrieval_attributes(outcome: RetrievalOutcome) -> dict:
    """Attributes describing how both search paths fared for one query."""
    return {
        RETRIEVAL_VECTOR_STATUS: outcome.vector_status.value,
        RETRIEVAL_VECTOR_COUNT: outcome.vector_count,
        RETRIEVAL_KEYWORD_STATUS: outcome.keyword_status.value,
        RETRIEVAL_KEYWORD_COUNT: outcome.keyword_count,
        RETRIEVAL_DEGRADED: outcome.degraded,
        RETRIEVAL_RESULT_COUNT: len(outcome.candidates),
        RETRIEVAL_DOC_IDS: [c.id for c in outcome.candidates],
    }


def prompt_attributes(
    version: str,
    prompt: str,
    source_count: int,
    capture_content: bool = False,
) -> dict:
    attrs = {
        PIPELINE_PROMPT_VERSION: version,
        PIPELINE_PROMPT_CHARS: len(prompt),
        PIPELINE_SOURCE_COUNT: source_count,
    }
    if capture_content:
        attrs[GEN_AI_PROMPT] = prompt
    return attrs
