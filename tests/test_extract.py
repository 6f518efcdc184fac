from __future__ import annotations

import asyncio
import io

import pytest
from pypdf import PdfWriter

from pdf_insights.errors import ExtractionError
from pdf_insights.extract import aextract_document, extract_document, format_document
from pdf_insights.models import UploadedFile


def _blank_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _text_pdf(content: bytes) -> bytes:
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 200] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length " + str(len(content)).encode() + b" >>\nstream\n" + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += str(number).encode() + b" 0 obj\n" + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 " + str(len(objects) + 1).encode() + b"\n0000000000 65535 f \n"
    for offset in offsets:
        out += str(offset).zfill(10).encode() + b" 00000 n \n"
    out += b"trailer\n<< /Size " + str(len(objects) + 1).encode() + b" /Root 1 0 R >>\n"
    out += b"startxref\n" + str(xref_at).encode() + b"\n%%EOF\n"
    return out


def test_format_document_joins_runs_and_separates_pages() -> None:
    text = format_document("a.pdf", [["Hello", "world"], ["Total:", "$42"]])
    assert text == "[Content of file: a.pdf]\nHello world\n\nTotal: $42\n\n"


def test_format_document_keeps_repeated_text_and_empty_runs() -> None:
    text = format_document("r.pdf", [["same", "", "same"]])
    assert text == "[Content of file: r.pdf]\nsame  same\n\n"


def test_extract_document_uses_page_runs_in_order(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "pdf_insights.extract._read_pdf_pages",
        lambda data: [["page", "one"], ["page", "two"], ["page", "three"]],
    )
    doc = extract_document(UploadedFile(name="notes.pdf", data=b"%PDF"))

    assert doc.source_name == "notes.pdf"
    assert doc.page_count == 3
    assert doc.text.startswith("[Content of file: notes.pdf]\n")
    assert doc.text.index("page one") < doc.text.index("page two") < doc.text.index("page three")


def test_extract_real_blank_pdf() -> None:
    doc = extract_document(UploadedFile(name="blank.pdf", data=_blank_pdf(2)))
    assert doc.page_count == 2
    assert doc.text == "[Content of file: blank.pdf]\n\n\n\n\n"


def test_extract_corrupt_bytes_raises() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        extract_document(UploadedFile(name="broken.pdf", data=b"this is not a pdf"))
    assert excinfo.value.source_name == "broken.pdf"


def test_aextract_document_runs_off_loop() -> None:
    doc = asyncio.run(aextract_document(UploadedFile(name="one.pdf", data=_blank_pdf(1))))
    assert doc.text == "[Content of file: one.pdf]\n\n\n"


def test_extract_real_text_pdf_joins_runs_with_single_spaces() -> None:
    pdf = _text_pdf(b"BT /F1 12 Tf 20 150 Td (Hello) Tj ( world) Tj 0 -20 Td (Total: $42) Tj ET")
    doc = extract_document(UploadedFile(name="t.pdf", data=pdf))

    assert doc.page_count == 1
    assert doc.text == "[Content of file: t.pdf]\nHello world Total: $42\n\n"
