"""
Pydantic models for API request and response schemas.

These models provide automatic validation and OpenAPI documentation.
"""

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request schema for the /query endpoint."""

    question: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Natural language question about the indexed documents",
        examples=["How do I reset my password?"],
    )
    max_context_bytes: int | None = Field(
        default=None,
        ge=0,
        description="Override the configured context byte budget",
    )


class ChunkSchema(BaseModel):
    """A context chunk used to answer the question."""

    document: str = Field(description="Source document path")
    chunk_number: int = Field(description="Ordinal of the chunk within the document")
    distance: float = Field(description="Squared Euclidean distance to the question")
    text: str = Field(description="Chunk text")


class QueryResponse(BaseModel):
    """Response schema for the /query endpoint."""

    answer: str = Field(description="Generated answer text, verbatim")
    chunks: list[ChunkSchema] = Field(
        default_factory=list,
        description="Context chunks in ranked order",
    )


class HealthResponse(BaseModel):
    """Response schema for the /health endpoint."""

    status: str = Field(
        description="Health status",
        examples=["healthy", "degraded"],
    )
    version: str = Field(description="API version")
    index_loaded: bool = Field(description="Whether the index is loaded")
    documents: int = Field(default=0, description="Indexed documents")
    embeddings: int = Field(default=0, description="Indexed embeddings")


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: str = Field(
        description="Error code",
        examples=["provider_error", "retrieval_error", "internal_error"],
    )
    message: str = Field(description="Human-readable error message")
