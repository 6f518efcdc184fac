from __future__ import annotations

import asyncio
import io
import logging
from typing import Any

from pypdf import PdfReader

from pdf_insights.errors import ExtractionError
from pdf_insights.models import ExtractedDocument, UploadedFile

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = "[Content of file: {name}]\n"
PAGE_SEPARATOR = "\n\n"


def _page_text_runs(page: Any) -> list[str]:
    runs: list[str] = []

    def _collect(text: Any, *_: Any) -> None:
        # pypdf flushes buffered text with its own line breaks and empty chunks
        if not isinstance(text, str):
            return
        run = " ".join(text.split("\n")).strip()
        if run:
            runs.append(run)

    page.extract_text(visitor_text=_collect)
    return runs


def _read_pdf_pages(data: bytes) -> list[list[str]]:
    reader = PdfReader(io.BytesIO(data))
    return [_page_text_runs(page) for page in reader.pages]


def format_document(name: str, pages: list[list[str]]) -> str:
    parts = [HEADER_TEMPLATE.format(name=name)]
    for runs in pages:
        parts.append(" ".join(runs))
        parts.append(PAGE_SEPARATOR)
    return "".join(parts)


def extract_document(file: UploadedFile) -> ExtractedDocument:
    """Extract the text of every page of ``file`` in ascending page order.

    Raises:
        ExtractionError: the bytes are not a readable PDF or a page could not be parsed.
    """
    try:
        pages = _read_pdf_pages(file.data)
    except Exception as exc:  # noqa: BLE001
        raise ExtractionError(file.name, f"could not read PDF ({exc})") from exc

    logger.debug("Extracted %d page(s) from %s", len(pages), file.name)
    return ExtractedDocument(
        source_name=file.name,
        text=format_document(file.name, pages),
        page_count=len(pages),
    )


async def aextract_document(file: UploadedFile) -> ExtractedDocument:
    return await asyncio.to_thread(extract_document, file)
