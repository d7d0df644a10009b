"""Exception hierarchy shared by the indexing and query paths."""


class AskDocsError(Exception):
    """Base application exception."""

    pass


class ConfigMissingError(AskDocsError):
    """A required setting (such as the provider credential) is absent."""

    pass


class DocumentUnreadableError(AskDocsError):
    """A source document could not be opened or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read document {path}: {reason}")
        self.path = path
        self.reason = reason


class StaleDocumentError(DocumentUnreadableError):
    """A source document changed after it was indexed."""

    def __init__(self, path: str) -> None:
        super().__init__(path, "content changed since indexing")


class ProviderError(AskDocsError):
    """An embedding or generation call failed."""

    pass


class IndexNotFoundError(AskDocsError):
    """No persisted index exists at the configured path."""

    pass


class IndexCorruptError(AskDocsError):
    """The persisted index could not be decompressed, parsed or validated."""

    pass


class IndexWriteError(AskDocsError):
    """The index could not be written to disk."""

    pass


class DimensionMismatchError(AskDocsError):
    """Two vectors that must share a dimensionality do not."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual
