"""
Index construction from a stream of document paths.

Documents are processed one at a time, in input order: read, chunk, embed
(one batched provider call per document), then append embeddings and chunk
refs. A full run rebuilds the index from scratch.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from pathlib import Path
from typing import IO, Literal

import numpy as np

from askdocs.errors import DimensionMismatchError, DocumentUnreadableError, ProviderError
from askdocs.retrieval.chunker import load_document
from askdocs.retrieval.store import ChunkRef, Embedding, VectorIndex

logger = logging.getLogger(__name__)

EmbedFn = Callable[[list[str]], Sequence[Sequence[float]]]
ErrorPolicy = Literal["fail", "skip"]


def read_paths(stream: IO[str]) -> Iterator[str]:
    """Yield paths from a listing, one per line, dropping only line terminators.

    Blank and whitespace-only lines are skipped.
    """
    for line in stream:
        path = line.rstrip("\r\n")
        if path.strip():
            yield path


def build_index(
    document_paths: Iterable[str],
    embed_fn: EmbedFn,
    on_error: ErrorPolicy = "fail",
) -> VectorIndex:
    """
    Build an index over the given documents.

    Args:
        document_paths: Paths of JSON document files, in index order
        embed_fn: Maps a list of chunk texts to one vector per text
        on_error: "fail" aborts the run on the first unreadable document or
            provider failure; "skip" logs a warning and moves on

    Returns:
        The assembled VectorIndex. If reading ``document_paths`` itself fails
        part way, the index covers the documents processed so far.

    Raises:
        DocumentUnreadableError: Under the "fail" policy
        ProviderError: Under the "fail" policy
        DimensionMismatchError: Under the "fail" policy, when a document's
            vectors differ in length from earlier documents
    """
    documents: list[str] = []
    fingerprints: list[str] = []
    embeddings: list[Embedding] = []
    chunk_refs: list[ChunkRef] = []
    dimension: int | None = None

    paths = iter(document_paths)
    while True:
        try:
            path = next(paths)
        except StopIteration:
            break
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"warning: failed to index all documents: {e}")
            break

        try:
            document = load_document(path)
            chunks = document.chunks()
            vectors = _embed_document(embed_fn, chunks, dimension)
        except (DocumentUnreadableError, ProviderError, DimensionMismatchError) as e:
            if on_error == "fail":
                raise
            logger.warning(f"- skipped {path}: {e}")
            continue

        dimension = len(vectors[0])
        document_id = len(documents)
        for chunk_number, vector in enumerate(vectors):
            embeddings.append(
                Embedding(vector=vector, chunk_id=len(chunk_refs))
            )
            chunk_refs.append(
                ChunkRef(document_id=document_id, chunk_number=chunk_number)
            )
        documents.append(str(path))
        fingerprints.append(document.fingerprint())

        logger.info(f"- indexed {path} ({len(chunks)} chunks)")

    return VectorIndex(
        documents=documents,
        embeddings=embeddings,
        chunk_refs=chunk_refs,
        fingerprints=fingerprints,
    )


def run_indexing(
    document_paths: Iterable[str],
    embed_fn: EmbedFn,
    index_path: str | Path,
    on_error: ErrorPolicy = "fail",
) -> VectorIndex:
    """
    Build an index and persist it at ``index_path``.

    The previous file at ``index_path`` is left untouched if the build fails.
    """
    index = build_index(document_paths, embed_fn, on_error=on_error)
    index.save(index_path)
    return index


def _embed_document(
    embed_fn: EmbedFn,
    chunks: list[str],
    dimension: int | None,
) -> list[list[float]]:
    """
    Embed all chunks of one document; the call succeeds or fails as a whole.

    Args:
        embed_fn: Embedding provider
        chunks: Chunk texts of one document
        dimension: Vector length of documents already indexed, if any

    Raises:
        ProviderError: If the batch is ragged, has the wrong row count, or
            contains non-finite values
        DimensionMismatchError: If the vector length differs from ``dimension``
    """
    raw = embed_fn(chunks)
    try:
        matrix = np.asarray(raw, dtype=np.float64)
    except (ValueError, TypeError) as e:
        raise ProviderError(f"Embedding provider returned a malformed batch: {e}") from e

    if matrix.ndim != 2 or matrix.shape[0] != len(chunks):
        rows = matrix.shape[0] if matrix.ndim else 0
        raise ProviderError(
            f"Embedding provider returned {rows} vectors for {len(chunks)} chunks"
        )
    if matrix.shape[1] == 0:
        raise ProviderError("Embedding provider returned empty vectors")
    if not np.all(np.isfinite(matrix)):
        raise ProviderError("Embedding provider returned non-finite values")
    if dimension is not None and matrix.shape[1] != dimension:
        raise DimensionMismatchError(dimension, matrix.shape[1])

    return matrix.tolist()
