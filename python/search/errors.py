class SearchIndexError(Exception):
    """Base class for search index failures."""

    pass


class IndexUnavailableError(SearchIndexError):
    """Raised when the index is missing, unreadable or malformed."""

    pass


class UnknownDocumentError(SearchIndexError):
    """Raised when a document id is not present in the index."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Unknown document: {document_id}")


class DuplicateDocumentError(SearchIndexError):
    """Raised when two documents in one build share an id."""

    def __init__(self, document_id: str, first_source: str = "", second_source: str = ""):
        self.document_id = document_id
        super().__init__(
            f"Duplicate document id '{document_id}' ({second_source} conflicts with {first_source})"
        )
