from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from pdf_insights.errors import ExtractionError, IngestionError, ValidationError
from pdf_insights.extract import aextract_document
from pdf_insights.models import (
    ChatTurn,
    ExtractedDocument,
    IngestionState,
    IngestStats,
    Notification,
    Speaker,
    UploadedFile,
)
from pdf_insights.session import ChatSession

logger = logging.getLogger(__name__)

Extractor = Callable[[UploadedFile], Awaitable[ExtractedDocument]]


def acknowledgement(file_count: int) -> str:
    noun = "documents" if file_count > 1 else "document"
    return f"I've processed your {noun}. What would you like to know?"


async def extract_all(files: list[UploadedFile], extractor: Extractor = aextract_document) -> list[ExtractedDocument]:
    """Extract every file concurrently; results keep the order of ``files``."""
    return list(await asyncio.gather(*(extractor(f) for f in files)))


async def run_ingestion(session: ChatSession, extractor: Extractor = aextract_document) -> list[str]:
    files = list(session.files)
    if not files:
        session.notify(
            Notification(
                title="No files selected",
                description="Please upload at least one PDF file to process.",
                variant="destructive",
            )
        )
        raise ValidationError("No files selected.")

    started = time.perf_counter()
    session.state = IngestionState.PROCESSING
    session.history = []
    session.corpus = None
    session.last_ingest_stats = None
    logger.info("Ingesting %d file(s): %s", len(files), ", ".join(f.name for f in files))

    try:
        documents = await extract_all(files, extractor)
    except Exception as exc:  # noqa: BLE001
        cause = exc if isinstance(exc, ExtractionError) else ExtractionError("<unknown>", str(exc))
        session.state = IngestionState.FAILED
        logger.error("Error processing PDFs: %s", cause)
        session.notify(
            Notification(
                title="Error processing PDFs",
                description=(
                    "There was an issue reading the PDF files. "
                    "Please ensure they are valid PDFs and try again."
                ),
                variant="destructive",
            )
        )
        raise IngestionError(cause) from exc

    corpus = [doc.text for doc in documents]
    session.corpus = corpus
    session.state = IngestionState.READY
    session.history = [ChatTurn(speaker=Speaker.ASSISTANT, body=acknowledgement(len(files)))]
    session.last_ingest_stats = IngestStats(
        files_processed=len(documents),
        pages_read=sum(doc.page_count for doc in documents),
        chars_extracted=sum(len(text) for text in corpus),
        duration_s=round(time.perf_counter() - started, 3),
    )
    plural = "s" if len(files) > 1 else ""
    session.notify(
        Notification(
            title="Processing Complete",
            description=f"Your document{plural} are ready. You can now ask questions.",
        )
    )
    logger.info(
        "Ingestion complete: files=%d pages=%d chars=%d duration_s=%s",
        session.last_ingest_stats.files_processed,
        session.last_ingest_stats.pages_read,
        session.last_ingest_stats.chars_extracted,
        session.last_ingest_stats.duration_s,
    )
    return corpus
