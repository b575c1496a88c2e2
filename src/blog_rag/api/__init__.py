"""API module - HTTP surface for the pipeline."""

from blog_rag.api.app import create_app, get_pipeline, router

__all__ = ["create_app", "get_pipeline", "router"]
