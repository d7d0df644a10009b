"""
Document loading and heading-based chunking.

A document is a JSON record with a title, a link and a block of HTML. Its
chunks are the plain-text segments between heading tags. Chunks are never
stored: the index keeps only (document, ordinal) pairs and recomputes the
text by re-reading the source file, so chunking must be deterministic.
"""

import hashlib
import re
from pathlib import Path

from pydantic import BaseModel, ValidationError

from askdocs.errors import DocumentUnreadableError

SCRIPT_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE)

# A heading opening tag together with the inline title text that follows it.
HEADING_PATTERN = re.compile(r"<[hH][1-9][^>]*>[^<]*")

TAG_PATTERN = re.compile(r"<[^>]*>")


class Document(BaseModel):
    """A source document as stored on disk."""

    title: str
    link: str
    html: str

    def chunks(self) -> list[str]:
        """Split the document HTML into plain-text chunks."""
        return chunk_html(self.html)

    def fingerprint(self) -> str:
        """SHA-256 of the HTML, used to detect edits after indexing."""
        return hashlib.sha256(self.html.encode("utf-8")).hexdigest()


def chunk_html(html: str) -> list[str]:
    """
    Split raw HTML into ordered plain-text chunks on heading boundaries.

    Newlines become spaces, script blocks are dropped, the markup is split
    at every heading tag (content before the first heading is its own
    chunk), and remaining tags are replaced by a single space. Whitespace
    is not trimmed.

    Args:
        html: Raw document markup

    Returns:
        N+1 chunks for N heading tags; at least one (possibly empty) chunk
    """
    text = html.replace("\n", " ")
    text = SCRIPT_PATTERN.sub(" ", text)
    segments = HEADING_PATTERN.split(text)
    return [TAG_PATTERN.sub(" ", segment) for segment in segments]


def load_document(path: str | Path) -> Document:
    """
    Read and parse a document file.

    Args:
        path: Path to a JSON file with title, link and html fields

    Returns:
        Parsed Document

    Raises:
        DocumentUnreadableError: If the file cannot be opened or parsed
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise DocumentUnreadableError(str(path), e.strerror or str(e)) from e

    try:
        return Document.model_validate_json(raw)
    except ValidationError as e:
        raise DocumentUnreadableError(
            str(path), f"invalid document record ({e.error_count()} errors)"
        ) from e
