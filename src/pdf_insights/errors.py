from __future__ import annotations


class PdfInsightsError(Exception):
    """Base class for errors surfaced to the user as a notification."""


class ValidationError(PdfInsightsError):
    """Input rejected before any I/O (no files selected, blank question)."""


class ExtractionError(PdfInsightsError):
    """One file could not be read as a PDF."""

    def __init__(self, source_name: str, message: str) -> None:
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name


class IngestionError(PdfInsightsError):
    """A document-set ingestion aborted; wraps the first extraction failure."""

    def __init__(self, cause: ExtractionError) -> None:
        super().__init__(f"Ingestion failed: {cause}")
        self.cause = cause


class AnswerError(PdfInsightsError):
    """The answer service failed or returned output that violates its schema."""
