"""
OpenInference auto-instrumentation for the OpenAI client.

Embedding and completion calls made through the openai SDK are traced
without touching provider code.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_instrumented = False


def register_instrumentors() -> bool:
    """Instrument the OpenAI SDK once. Returns True if instrumentation is active."""
    global _instrumented
    if _instrumented:
        return True

    from openinference.instrumentation.openai import OpenAIInstrumentor

    try:
        OpenAIInstrumentor().instrument()
    except Exception as e:
        logger.warning(f"Failed to instrument OpenAI: {e}")
        return False

    logger.info("Registered instrumentors: openai")
    _instrumented = True
    return True


def uninstrument() -> None:
    """Remove OpenAI instrumentation (useful for testing)."""
    global _instrumented
    if not _instrumented:
        return

    from openinference.instrumentation.openai import OpenAIInstrumentor

    OpenAIInstrumentor().uninstrument()
    _instrumented = False
