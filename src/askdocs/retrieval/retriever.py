"""
Nearest-neighbour ranking and context packing.

Every embedding is ranked by squared distance to the query, then chunk
texts are recovered from their source documents and packed greedily, in
rank order, until the next chunk would exceed the byte budget.

The index is shared read-only between concurrent requests: ranking sorts a
private array of positions and never reorders the index itself.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from askdocs.errors import DimensionMismatchError, DocumentUnreadableError, StaleDocumentError
from askdocs.retrieval.chunker import Document, load_document
from askdocs.retrieval.store import VectorIndex
from askdocs.retrieval.vectors import as_vector, distances

logger = logging.getLogger(__name__)


@dataclass
class RetrievedChunk:
    """A chunk selected for the context."""

    text: str
    """Plain text of the chunk, recomputed from the source document."""

    distance: float
    """Squared Euclidean distance to the query."""

    document_path: str
    """Source document path."""

    chunk_number: int
    """Ordinal of the chunk within the document."""


class Retriever:
    """
    Rank indexed chunks against a query vector.

    Example:
        >>> retriever = Retriever(VectorIndex.from_disk("index.json.gz"))
        >>> texts = retriever.retrieve(query_vector, max_context_bytes=4000)
    """

    def __init__(
        self,
        index: VectorIndex,
        document_loader: Callable[[str], Document] = load_document,
        skip_unreadable: bool = False,
        verify_fingerprints: bool = True,
    ) -> None:
        """
        Args:
            index: Loaded index; treated as immutable
            document_loader: Reads a source document by path
            skip_unreadable: Skip chunks whose source cannot be read instead
                of failing the whole query
            verify_fingerprints: Reject documents whose content changed
                since indexing (when the index carries fingerprints)
        """
        self.index = index
        self.document_loader = document_loader
        self.skip_unreadable = skip_unreadable
        self.verify_fingerprints = verify_fingerprints
        self._matrix = index.vector_matrix()
        self._matrix.setflags(write=False)

    def rank(self, query_vector: Sequence[float] | NDArray) -> list[tuple[float, int]]:
        """
        Rank all embeddings by ascending distance to the query.

        Returns:
            (distance, embedding position) pairs, closest first; equal
            distances keep index order

        Raises:
            DimensionMismatchError: If the query length differs from the index
        """
        query = as_vector(query_vector)
        if self.index.size == 0:
            return []
        if query.shape[0] != self._matrix.shape[1]:
            raise DimensionMismatchError(self._matrix.shape[1], query.shape[0])

        scores = distances(self._matrix, query)
        order = np.argsort(scores, kind="stable")
        return [(float(scores[i]), int(i)) for i in order]

    def search(
        self,
        query_vector: Sequence[float] | NDArray,
        max_context_bytes: int,
    ) -> list[RetrievedChunk]:
        """
        Select the closest chunks whose combined size fits the byte budget.

        Packing stops at the first chunk that would push the running UTF-8
        byte total over ``max_context_bytes``; it is not included, and no
        later chunk is tried.

        Raises:
            DimensionMismatchError: If the query length differs from the index
            DocumentUnreadableError: If a source document cannot be re-read
                (unless skip_unreadable is set)
        """
        if max_context_bytes <= 0:
            return []

        selected: list[RetrievedChunk] = []
        total = 0
        chunk_cache: dict[int, list[str]] = {}

        for score, position in self.rank(query_vector):
            ref = self.index.chunk_refs[self.index.embeddings[position].chunk_id]
            try:
                chunks = self._document_chunks(ref.document_id, chunk_cache)
            except DocumentUnreadableError as e:
                if not self.skip_unreadable:
                    raise
                logger.warning(f"Skipping chunk from unreadable document: {e}")
                continue

            path = self.index.documents[ref.document_id]
            if ref.chunk_number >= len(chunks):
                error = StaleDocumentError(path)
                if not self.skip_unreadable:
                    raise error
                logger.warning(f"Skipping chunk from unreadable document: {error}")
                continue

            text = chunks[ref.chunk_number]
            size = len(text.encode("utf-8"))
            if total + size > max_context_bytes:
                break

            total += size
            selected.append(
                RetrievedChunk(
                    text=text,
                    distance=score,
                    document_path=path,
                    chunk_number=ref.chunk_number,
                )
            )

        return selected

    def retrieve(
        self,
        query_vector: Sequence[float] | NDArray,
        max_context_bytes: int,
    ) -> list[str]:
        """Return the texts of ``search`` in rank order."""
        return [chunk.text for chunk in self.search(query_vector, max_context_bytes)]

    def _document_chunks(self, document_id: int, cache: dict[int, list[str]]) -> list[str]:
        """Re-read and re-chunk a document, once per query."""
        if document_id in cache:
            return cache[document_id]

        path = self.index.documents[document_id]
        document = self.document_loader(path)

        if self.verify_fingerprints and self.index.fingerprints:
            if document.fingerprint() != self.index.fingerprints[document_id]:
                logger.warning(f"Document changed since indexing: {path}")
                raise StaleDocumentError(path)

        cache[document_id] = document.chunks()
        return cache[document_id]


def retrieve(
    index: VectorIndex,
    query_vector: Sequence[float] | NDArray,
    max_context_bytes: int,
) -> list[str]:
    """Rank ``index`` against ``query_vector`` and pack chunk texts into the budget."""
    return Retriever(index).retrieve(query_vector, max_context_bytes)
