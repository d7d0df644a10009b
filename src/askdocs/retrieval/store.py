"""
Persisted vector index: documents -> chunks -> embedding vectors.

The index stores document paths, one embedding per chunk, and positional
back-references from each embedding to its (document, chunk ordinal). Chunk
text is not stored. The file is gzip-compressed JSON; writes go to a
temporary file that is renamed over the target, so a failed rebuild never
clobbers a previously valid index.
"""

import gzip
import logging
import os
import tempfile
import zlib
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from askdocs.errors import IndexCorruptError, IndexNotFoundError, IndexWriteError

logger = logging.getLogger(__name__)


class ChunkRef(BaseModel):
    """Back-reference from an embedding to its source chunk."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: int = Field(alias="doc", ge=0)
    """Position of the source document in ``VectorIndex.documents``."""

    chunk_number: int = Field(alias="chunk", ge=0)
    """Ordinal of the chunk within the re-chunked document."""


class Embedding(BaseModel):
    """An embedding vector and the position of its ChunkRef."""

    model_config = ConfigDict(populate_by_name=True)

    vector: list[float] = Field(alias="vec")

    chunk_id: int = Field(alias="chunk", ge=0)
    """Index into ``VectorIndex.chunk_refs`` (positional, not a content hash)."""


class VectorIndex(BaseModel):
    """
    In-memory form of the persisted index.

    Sequence order is significant: ``chunk_id`` and ``document_id`` are
    positions, so documents, embeddings and chunk refs must round-trip in
    the order they were written.

    Example:
        >>> index = VectorIndex(documents=["a.json"], embeddings=[...], chunk_refs=[...])
        >>> index.save("index.json.gz")
        >>> VectorIndex.from_disk("index.json.gz") == index
        True
    """

    model_config = ConfigDict(populate_by_name=True)

    documents: list[str] = Field(alias="docs")
    embeddings: list[Embedding] = Field(alias="embeddings")
    chunk_refs: list[ChunkRef] = Field(alias="chunks")
    fingerprints: list[str] = Field(default_factory=list, alias="fingerprints")
    """SHA-256 of each document's HTML at index time, parallel to ``documents``."""

    @property
    def size(self) -> int:
        """Number of embeddings in the index."""
        return len(self.embeddings)

    @property
    def dimension(self) -> int | None:
        """Vector length shared by all embeddings, or None for an empty index."""
        if not self.embeddings:
            return None
        return len(self.embeddings[0].vector)

    def vector_matrix(self) -> NDArray[np.float64]:
        """Stack all embedding vectors into an array of shape (size, dimension)."""
        if not self.embeddings:
            return np.empty((0, 0), dtype=np.float64)
        return np.array([e.vector for e in self.embeddings], dtype=np.float64)

    def check_consistency(self) -> None:
        """
        Verify the positional references between sequences.

        Raises:
            ValueError: If any reference is out of range, dimensions differ,
                or fingerprints do not line up with documents
        """
        dimension = self.dimension
        for i, embedding in enumerate(self.embeddings):
            if embedding.chunk_id >= len(self.chunk_refs):
                raise ValueError(
                    f"embedding {i} references chunk {embedding.chunk_id}, "
                    f"but only {len(self.chunk_refs)} chunk refs exist"
                )
            if len(embedding.vector) != dimension:
                raise ValueError(
                    f"embedding {i} has dimension {len(embedding.vector)}, expected {dimension}"
                )
            if not np.all(np.isfinite(embedding.vector)):
                raise ValueError(f"embedding {i} has non-finite components")

        for j, ref in enumerate(self.chunk_refs):
            if ref.document_id >= len(self.documents):
                raise ValueError(
                    f"chunk ref {j} references document {ref.document_id}, "
                    f"but only {len(self.documents)} documents exist"
                )

        if self.fingerprints and len(self.fingerprints) != len(self.documents):
            raise ValueError(
                f"{len(self.fingerprints)} fingerprints for {len(self.documents)} documents"
            )

    def save(self, path: str | Path) -> None:
        """
        Write the index gzip-compressed to ``path``, replacing any existing file.

        Args:
            path: Destination file

        Raises:
            IndexCorruptError: If the index fails consistency checks; nothing
                is written, so an existing file stays loadable
            IndexWriteError: If the file cannot be written
        """
        try:
            self.check_consistency()
        except ValueError as e:
            raise IndexCorruptError(f"Refusing to save inconsistent index: {e}") from e

        path = Path(path)
        payload = self.model_dump_json(by_alias=True).encode("utf-8")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise IndexWriteError(f"Cannot write index {path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as raw:
                with gzip.GzipFile(fileobj=raw, mode="wb") as gz:
                    gz.write(payload)
                raw.flush()
                os.fsync(raw.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise IndexWriteError(f"Cannot write index {path}: {e}") from e
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            f"Saved index to {path} ({len(self.documents)} documents, {self.size} embeddings)"
        )

    @classmethod
    def from_disk(cls, path: str | Path) -> "VectorIndex":
        """
        Load an index written by ``save``.

        Args:
            path: Index file

        Returns:
            VectorIndex with documents, embeddings and chunk refs in file order

        Raises:
            IndexNotFoundError: If no file exists at ``path``
            IndexCorruptError: If the file cannot be decompressed, parsed or
                fails consistency checks
        """
        path = Path(path)
        if not path.is_file():
            raise IndexNotFoundError(f"Index file not found: {path}")

        try:
            with gzip.open(path, "rb") as gz:
                payload = gz.read()
        except (OSError, EOFError, zlib.error) as e:
            raise IndexCorruptError(f"Cannot decompress index {path}: {e}") from e

        try:
            index = cls.model_validate_json(payload)
        except ValidationError as e:
            raise IndexCorruptError(
                f"Cannot parse index {path} ({e.error_count()} errors)"
            ) from e

        try:
            index.check_consistency()
        except ValueError as e:
            raise IndexCorruptError(f"Inconsistent index {path}: {e}") from e

        logger.info(
            f"Loaded index from {path} ({len(index.documents)} documents, {index.size} embeddings)"
        )
        return index


def save_index(index: VectorIndex, path: str | Path) -> None:
    """Persist ``index`` at ``path``."""
    index.save(path)


def load_index(path: str | Path) -> VectorIndex:
    """Load the index persisted at ``path``."""
    return VectorIndex.from_disk(path)
