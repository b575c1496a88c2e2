"""Pipeline module - sequences retrieval, assembly, completion and recording."""

from blog_rag.pipeline.orchestrator import (
    GENERIC_ERROR_MESSAGE,
    AskPipeline,
    PipelineResponse,
)
from blog_rag.pipeline.factory import create_pipeline

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "AskPipeline",
    "PipelineResponse",
    "create_pipeline",
]
