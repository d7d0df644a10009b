"""
askdocs: retrieval-augmented question answering over HTML documents

This package indexes a corpus of HTML-bearing JSON documents into vector
embeddings, persists the index, and answers natural-language questions by
retrieving the closest document chunks and passing them, with the question,
to a text-generation model.

Key Components:
    - retrieval: Chunking, vector distance, index storage, indexing and ranking
    - llm: Completion endpoint client
    - qa: Prompt assembly and answer orchestration
    - api: FastAPI query page and JSON endpoints
    - cli: Typer command-line interface

Example:
    >>> from askdocs.config import get_settings
    >>> from askdocs.retrieval.resources import initialize_resources
    >>> from askdocs.qa import answer_query
    >>> settings = get_settings()
    >>> resources = initialize_resources(settings)
    >>> answer = answer_query("How do I reset my password?", resources, settings.max_context_bytes)
    >>> print(answer.text)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
