"""
Observability Module - Phoenix + OpenTelemetry Integration

USAGE:
------
# At application startup:
from blog_rag.observability import init_phoenix

init_phoenix()  # No-op unless PHOENIX_ENABLED=true

# In pipeline code:
from blog_rag.observability import traced

with traced("retrieval.hybrid", attributes={"retrieval.top_k": 5}) as span:
    ...
    span.set_attribute("retrieval.result.count", 3)
"""

from __future__ import annotations

import logging

from blog_rag.observability.config import (
    PhoenixConfig,
    get_config,
    reset_config,
)
from blog_rag.observability.tracer import (
    TracerProtocol,
    SpanProtocol,
    NoOpTracer,
    NoOpSpan,
    get_tracer,
    reset_tracer,
    traced,
)
from blog_rag.observability.attributes import (
    GEN_AI_SYSTEM,
    GEN_AI_REQUEST_MODEL,
    GEN_AI_COMPLETION,
    RETRIEVAL_TOP_K,
    RETRIEVAL_THRESHOLD,
    RETRIEVAL_DEGRADED,
    RETRIEVAL_RESULT_COUNT,
    PIPELINE_CONVERSATION_ID,
    PIPELINE_ERROR_TYPE,
    retrieval_attributes,
    prompt_attributes,
    completion_attributes,
)

logger = logging.getLogger(__name__)

_phoenix_initialized = False


def init_phoenix(config: PhoenixConfig | None = None) -> bool:
    """
    Initialize Phoenix observability.

    Installs an OpenTelemetry TracerProvider exporting to Phoenix and
    instruments the OpenAI SDK. Call once at startup.

    Returns:
        True if Phoenix was initialized, False if disabled or failed
    """
    global _phoenix_initialized
    if _phoenix_initialized:
        return True

    config = config or get_config()

    if not config.enabled:
        logger.debug("Phoenix observability disabled")
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        if config.collector_endpoint:
            exporter = OTLPSpanExporter(endpoint=config.collector_endpoint)
            logger.info(f"Phoenix connecting to remote: {config.collector_endpoint}")
        else:
            import phoenix as px

            session = px.launch_app()
            exporter = OTLPSpanExporter(endpoint=f"{session.url.rstrip('/')}/v1/traces")
            logger.info(f"Phoenix UI available at: {session.url}")

        provider = TracerProvider(
            resource=Resource.create({"openinference.project.name": config.project_name})
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        from blog_rag.observability.instrumentation import register_instrumentors

        register_instrumentors()
        reset_tracer()

        _phoenix_initialized = True
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Phoenix: {e}")
        return False


def shutdown_phoenix() -> None:
    """Flush pending spans and reset tracing state."""
    global _phoenix_initialized

    if not _phoenix_initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    try:
        if hasattr(provider, "shutdown"):
            provider.shutdown()
    except Exception as e:
        logger.warning(f"Error shutting down Phoenix: {e}")

    from blog_rag.observability.instrumentation import uninstrument

    uninstrument()
    reset_tracer()
    reset_config()
    _phoenix_initialized = False


__all__ = [
    "init_phoenix",
    "shutdown_phoenix",
    "PhoenixConfig",
    "get_config",
    "reset_config",
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
    "traced",
    "GEN_AI_SYSTEM",
    "GEN_AI_REQUEST_MODEL",
    "GEN_AI_COMPLETION",
    "RETRIEVAL_TOP_K",
    "RETRIEVAL_THRESHOLD",
    "RETRIEVAL_DEGRADED",
    "RETRIEVAL_RESULT_COUNT",
    "PIPELINE_CONVERSATION_ID",
    "PIPELINE_ERROR_TYPE",
    "retrieval_attributes",
    "prompt_attributes",
    "completion_attributes",
]
