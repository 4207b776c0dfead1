class ExtractionError(RuntimeError):
    """Raised when text cannot be extracted from an uploaded document"""


class UnsupportedFormatError(ExtractionError):
    """Raised when the document format is not one of PDF, DOCX or plain text"""


class CorruptDocumentError(ExtractionError):
    """Raised when the document is malformed and the parsing library rejects it.

    The original library exception is chained as __cause__.
    """


class SizeLimitExceededError(ExtractionError):
    """Raised when the document is larger than the configured upload limit"""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Document is {size} bytes; the limit is {limit} bytes")


__all__ = [
    "ExtractionError",
    "UnsupportedFormatError",
    "CorruptDocumentError",
    "SizeLimitExceededError",
]
