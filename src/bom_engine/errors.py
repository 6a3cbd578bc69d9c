"""
Document-level failures raised by the extraction and import pipeline.

Each exception carries the message shown to the user. Row-level problems
(empty codes, malformed quantities) are never raised; they are recorded as
residuals and the row is dropped.
"""


class ExtractionError(Exception):
    """Base class: the document could not be turned into a BOM."""

    default_message = "Could not extract a BOM from the document."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class NoHeaderFound(ExtractionError):
    default_message = "Could not detect the code and quantity columns."


class NoDataExtracted(ExtractionError):
    default_message = "No valid components found."


class UnsupportedFormat(ExtractionError):
    default_message = "Unsupported file format."


class CatalogImportError(Exception):
    """The component import file is empty or misses required headers."""
