"""
Resources shared by query handlers: the loaded index, its retriever, the
embedder and the LLM client.

They are loaded once per process (at API startup, or per CLI invocation)
and then only read. Handlers must not mutate the index.

Usage:
    # In API startup
    resources = initialize_resources(settings)

    # In tests
    resources = Resources(retriever=Retriever(index), embedder=stub, llm=stub)
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from askdocs.retrieval.retriever import Retriever
from askdocs.retrieval.store import VectorIndex

if TYPE_CHECKING:
    from askdocs.config import Settings
    from askdocs.llm.factory import LLMProtocol

logger = logging.getLogger(__name__)


@dataclass
class Resources:
    """Everything needed to answer a query."""

    retriever: Retriever
    embed_query: Callable[[str], object]
    llm: "LLMProtocol"

    @property
    def index(self) -> VectorIndex:
        return self.retriever.index


def initialize_resources(settings: "Settings") -> Resources:
    """
    Load the index and build provider clients.

    Raises:
        ConfigMissingError: If the provider API key is not configured
        IndexNotFoundError: If no index exists at settings.index_path
        IndexCorruptError: If the index file is unreadable
    """
    from askdocs.llm.factory import create_llm
    from askdocs.retrieval.embeddings import OpenAIEmbedder

    embedder = OpenAIEmbedder.from_settings(settings)
    llm = create_llm(settings)

    logger.info(f"Loading index from {settings.index_path}...")
    index = VectorIndex.from_disk(settings.index_path)

    retriever = Retriever(
        index,
        skip_unreadable=settings.skip_unreadable_chunks,
        verify_fingerprints=settings.verify_fingerprints,
    )

    return Resources(retriever=retriever, embed_query=embedder.embed_query, llm=llm)
