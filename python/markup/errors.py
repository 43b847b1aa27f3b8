from typing import Optional


class AnnotationError(Exception):
    """Base class for annotation extraction and splicing failures."""

    pass


class MetaParseError(AnnotationError):
    """Raised when a document's @meta block cannot be parsed.

    Fatal for the document: without meta there is no id or title.
    """

    def __init__(self, document: str, reason: str):
        self.document = document
        self.reason = reason
        super().__init__(f"Invalid @meta block in {document}: {reason}")


class BlockParseError(AnnotationError):
    """A single annotation block whose payload could not be parsed.

    Recoverable: the block's source text stays in the body.
    """

    def __init__(self, kind: str, line: int, reason: str, raw_text: str = ""):
        self.kind = kind
        self.line = line
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(f"@{kind} block at line {line}: {reason}")


class SpliceError(AnnotationError):
    """Base class for extraction/splicing desyncs. Fatal for the document."""

    def __init__(self, message: str, token: Optional[str] = None):
        self.token = token
        super().__init__(message)


class DanglingPlaceholderError(SpliceError):
    """Raised when a placeholder survives after every block has been spliced."""

    pass


class MissingPlaceholderError(SpliceError):
    """Raised when a block's placeholder is not present in the transformed markup."""

    pass
