"""
Indexing and retrieval components.

Components:
    - chunker: Load HTML documents and split them on heading boundaries
    - vectors: Squared Euclidean distance over embedding vectors
    - store: Gzip-compressed index persistence
    - embeddings: Embedding provider client
    - indexer: Build an index from document paths
    - retriever: Rank chunks and pack them into a byte budget
"""

from askdocs.retrieval.chunker import Document, chunk_html, load_document
from askdocs.retrieval.embeddings import OpenAIEmbedder
from askdocs.retrieval.indexer import build_index, read_paths, run_indexing
from askdocs.retrieval.retriever import RetrievedChunk, Retriever, retrieve
from askdocs.retrieval.store import ChunkRef, Embedding, VectorIndex, load_index, save_index
from askdocs.retrieval.vectors import distance

__all__ = [
    "ChunkRef",
    "Document",
    "Embedding",
    "OpenAIEmbedder",
    "RetrievedChunk",
    "Retriever",
    "VectorIndex",
    "build_index",
    "chunk_html",
    "distance",
    "load_document",
    "load_index",
    "read_paths",
    "retrieve",
    "run_indexing",
    "save_index",
]
