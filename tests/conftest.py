"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - Sample document files on disk
    - Stub embedding and completion providers
    - A built index over the sample documents
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings(tmp_path: Path):
    """Provide test settings without requiring .env file."""
    with patch.dict(
        "os.environ",
        {
            "OPENAI_API_KEY": "test-api-key",
            "INDEX_PATH": str(tmp_path / "index.json.gz"),
            "MAX_CONTEXT_BYTES": "1000",
            "LOG_LEVEL": "DEBUG",
        },
    ):
        from askdocs.config import Settings
        yield Settings(_env_file=None)


# =============================================================================
# Sample Data Fixtures
# =============================================================================

def write_document(path: Path, html: str, title: str = "", link: str = "") -> str:
    """Write a JSON document record and return its path as a string."""
    path.write_text(json.dumps({"title": title, "link": link, "html": html}), encoding="utf-8")
    return str(path)


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for document files."""
    directory = tmp_path / "docs"
    directory.mkdir()
    return directory


@pytest.fixture
def make_document(docs_dir: Path):
    """Factory writing a document named ``name`` into docs_dir."""
    def _make(name: str, html: str) -> str:
        return write_document(docs_dir / name, html, title=name)
    return _make


@pytest.fixture
def sample_documents(docs_dir: Path) -> list[str]:
    """Two documents: A with one heading, B with none."""
    return [
        write_document(docs_dir / "A.json", "<h1>Intro</h1>hello world", "A", "https://example.com/a"),
        write_document(docs_dir / "B.json", "no headings here", "B", "https://example.com/b"),
    ]


# =============================================================================
# Stub Provider Fixtures
# =============================================================================

@pytest.fixture
def stub_embed_fn():
    """Embed chunks of document B as [0, 1] and everything else as [1, 0]."""
    def _embed(texts: list[str]) -> list[list[float]]:
        return [[0.0, 1.0] if "no headings" in text else [1.0, 0.0] for text in texts]
    return _embed


class StubLLM:
    """Completion client that records prompts and returns a fixed answer."""

    def __init__(self, answer: str = "The answer is 42.") -> None:
        self.answer = answer
        self.prompts: list[str] = []

    def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def stub_llm() -> StubLLM:
    return StubLLM()


# =============================================================================
# Index Fixtures
# =============================================================================

@pytest.fixture
def sample_index(sample_documents, stub_embed_fn):
    """Index built over the sample documents with the stub embedder."""
    from askdocs.retrieval.indexer import build_index

    return build_index(sample_documents, stub_embed_fn)


@pytest.fixture
def sample_resources(sample_index, stub_llm):
    """Resources wired to the sample index and stub providers."""
    from askdocs.retrieval.resources import Resources
    from askdocs.retrieval.retriever import Retriever

    def embed_query(question: str) -> list[float]:
        return [0.0, 1.0]

    return Resources(retriever=Retriever(sample_index), embed_query=embed_query, llm=stub_llm)
