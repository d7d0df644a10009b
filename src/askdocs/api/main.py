"""
FastAPI application for askdocs.

Run with:
    uvicorn askdocs.api.main:app

Or use the CLI:
    askdocs serve
"""

import html
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from askdocs import __version__
from askdocs.api.models import (
    ChunkSchema,
    ErrorResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
)
from askdocs.errors import (
    AskDocsError,
    DimensionMismatchError,
    DocumentUnreadableError,
    ProviderError,
)
from askdocs.qa import answer_query

if TYPE_CHECKING:
    from askdocs.config import Settings
    from askdocs.retrieval.resources import Resources

logger = logging.getLogger(__name__)


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>askdocs</title></head>
<body>
<form method="get" action="/">
<input type="text" name="q" value="{question}" size="80" autofocus>
<button type="submit">Ask</button>
</form>
{body}
</body>
</html>
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Load the index into memory unless resources were injected
        - Build the embedding and completion clients

    Shutdown:
        - Resources are dropped with the process
    """
    if app.state.resources is None:
        from askdocs.config import get_settings
        from askdocs.retrieval.resources import initialize_resources

        settings = app.state.settings or get_settings()
        app.state.settings = settings
        logger.info("Initializing askdocs resources...")
        try:
            app.state.resources = initialize_resources(settings)
        except AskDocsError as e:
            logger.error(f"Failed to initialize resources: {e}")
            raise RuntimeError(f"Startup failed: {e}") from e
        logger.info(f"Index loaded ({app.state.resources.index.size} embeddings)")

    yield

    logger.info("Shutting down askdocs...")


def create_app(
    resources: Optional["Resources"] = None,
    settings: Optional["Settings"] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        resources: Preloaded resources (skips loading at startup)
        settings: Settings to load resources from (default: get_settings())

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="askdocs",
        description="Question answering over indexed HTML documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.resources = resources
    app.state.settings = settings
    app.include_router(router)
    return app


router = APIRouter()


def _max_context_bytes(request: Request) -> int:
    settings = request.app.state.settings
    if settings is None:
        from askdocs.config import get_settings

        settings = get_settings()
    return settings.max_context_bytes


def _error_status(exc: AskDocsError) -> tuple[int, str]:
    """Map a query failure to an HTTP status and error code."""
    if isinstance(exc, ProviderError):
        return status.HTTP_502_BAD_GATEWAY, "provider_error"
    if isinstance(exc, (DocumentUnreadableError, DimensionMismatchError)):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "retrieval_error"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"


@router.get("/", response_class=HTMLResponse, tags=["Page"])
def query_page(request: Request, q: Optional[str] = None) -> HTMLResponse:
    """Render the query form, and the answer when a question is given."""
    question = (q or "").strip()
    if not question:
        return HTMLResponse(PAGE_TEMPLATE.format(question="", body=""))

    try:
        answer = answer_query(
            question, request.app.state.resources, _max_context_bytes(request)
        )
    except AskDocsError as e:
        code, _ = _error_status(e)
        logger.error(f"Query failed: {e}")
        body = f"<p><strong>Error:</strong> {html.escape(str(e))}</p>"
        return HTMLResponse(
            PAGE_TEMPLATE.format(question=html.escape(question, quote=True), body=body),
            status_code=code,
        )

    body = (
        f"<h2>{html.escape(question)}</h2>\n"
        f"<p>{html.escape(answer.text)}</p>"
    )
    return HTMLResponse(
        PAGE_TEMPLATE.format(question=html.escape(question, quote=True), body=body)
    )


@router.get("/health", response_model=HealthResponse, tags=["System"])
def health_check(request: Request) -> HealthResponse:
    """Health check with basic index statistics."""
    resources = request.app.state.resources
    if resources is None:
        return HealthResponse(status="degraded", version=__version__, index_loaded=False)

    return HealthResponse(
        status="healthy",
        version=__version__,
        index_loaded=True,
        documents=len(resources.index.documents),
        embeddings=resources.index.size,
    )


@router.post(
    "/query",
    response_model=QueryResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Retrieval failed"},
        502: {"model": ErrorResponse, "description": "Provider failed"},
    },
    tags=["Query"],
)
def query_endpoint(body: QueryRequest, request: Request) -> QueryResponse:
    """
    Answer a question from the indexed documents.

    Raises:
        HTTPException: 502 if the embedding or completion provider fails
        HTTPException: 500 if retrieval fails
    """
    budget = body.max_context_bytes
    if budget is None:
        budget = _max_context_bytes(request)

    try:
        answer = answer_query(body.question, request.app.state.resources, budget)
    except AskDocsError as e:
        code, error = _error_status(e)
        logger.error(f"Query failed: {e}")
        raise HTTPException(status_code=code, detail={"error": error, "message": str(e)})

    return QueryResponse(
        answer=answer.text,
        chunks=[
            ChunkSchema(
                document=c.document_path,
                chunk_number=c.chunk_number,
                distance=c.distance,
                text=c.text,
            )
            for c in answer.chunks
        ],
    )


app = create_app()
