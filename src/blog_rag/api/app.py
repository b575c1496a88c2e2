"""
FastAPI endpoints for the blog assistant.

POST /api/chat - answer a question from the blog corpus
GET  /health   - liveness check

Only POST is routed for /api/chat; FastAPI answers other methods with 405.
Failures are reported with a generic message and HTTP 500; details stay
in the server logs.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from blog_rag.core import InvalidQuery
from blog_rag.pipeline import GENERIC_ERROR_MESSAGE, AskPipeline, create_pipeline
from blog_rag.schemas import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_pipeline(request: Request) -> AskPipeline:
    """Pipeline stored on the app; built from configuration on first use."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = create_pipeline(seed_sample_corpus=True)
        request.app.state.pipeline = pipeline
    return pipeline


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    body: ChatRequest,
    pipeline: AskPipeline = Depends(get_pipeline),
):
    """Answer a visitor's question with citations to the posts used."""
    try:
        result = await pipeline.aanswer(body.message, body.conversation_id)
    except InvalidQuery:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Message must not be empty.").model_dump(),
        )

    if not result.ok:
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=GENERIC_ERROR_MESSAGE).model_dump(),
        )

    return ChatResponse(response=result.answer, sources=result.sources)


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


def create_app(pipeline: AskPipeline | None = None) -> FastAPI:
    """Application factory. Pass a pipeline to bypass configuration-driven wiring."""
    app = FastAPI(title="Blog RAG Assistant")
    app.state.pipeline = pipeline
    app.include_router(router)
    return app
