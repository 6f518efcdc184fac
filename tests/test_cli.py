from __future__ import annotations

import asyncio
import io
from pathlib import Path

from pypdf import PdfWriter
from typer.testing import CliRunner

from pdf_insights.cli import app, load_uploaded_file
from pdf_insights.schemas import AnswerRequest, AnswerResponse

runner = CliRunner()


def _write_pdf(path: Path, pages: int = 1) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    path.write_bytes(buffer.getvalue())
    return path


def test_doctor_smoke(monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "dummy-key")
    result = runner.invoke(app, ["doctor"])

    assert result.exit_code == 0
    assert "Doctor checks passed" in result.stdout


def test_doctor_without_key(monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 1
    assert "GOOGLE_API_KEY" in result.stdout


def test_load_uploaded_file_guesses_mime(tmp_path: Path) -> None:
    pdf = load_uploaded_file(_write_pdf(tmp_path / "a.pdf"))
    txt_path = tmp_path / "notes.txt"
    txt_path.write_text("hi", encoding="utf-8")

    assert pdf.is_pdf
    assert not load_uploaded_file(txt_path).is_pdf


def test_extract_smoke(tmp_path: Path) -> None:
    a = _write_pdf(tmp_path / "a.pdf", pages=2)
    b = _write_pdf(tmp_path / "b.pdf")

    result = runner.invoke(app, ["extract", str(a), str(b), "--show-text"])

    assert result.exit_code == 0
    assert "files_processed=2" in result.stdout
    assert "pages_read=3" in result.stdout
    assert "[Content of file: a.pdf]" in result.stdout


def test_extract_corrupt_file_fails(tmp_path: Path) -> None:
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"garbage")

    result = runner.invoke(app, ["extract", str(bad)])
    assert result.exit_code == 1
    assert "Extract failed" in result.stdout


def test_extract_only_non_pdf_fails(tmp_path: Path) -> None:
    txt = tmp_path / "notes.txt"
    txt.write_text("hi", encoding="utf-8")

    result = runner.invoke(app, ["extract", str(txt)])
    assert result.exit_code == 1
    assert "No files selected" in result.stdout


def test_chat_smoke(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "dummy-key")
    a = _write_pdf(tmp_path / "a.pdf")
    seen: list[AnswerRequest] = []

    class FakeService:
        def __init__(self, settings) -> None:
            pass

        async def __call__(self, request: AnswerRequest) -> AnswerResponse:
            seen.append(request)
            return AnswerResponse(answer="test answer")

    monkeypatch.setattr("pdf_insights.cli.AnswerService", FakeService)
    result = runner.invoke(app, ["chat", str(a)], input="What is this?\nexit\n")

    assert result.exit_code == 0
    assert "I've processed your document. What would you like to know?" in result.stdout
    assert "test answer" in result.stdout
    assert seen[0].question == "What is this?"


def test_chat_answers_every_question_on_one_event_loop(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "dummy-key")
    a = _write_pdf(tmp_path / "a.pdf")
    loops: list = []

    class LoopRecordingService:
        def __init__(self, settings) -> None:
            pass

        async def __call__(self, request: AnswerRequest) -> AnswerResponse:
            loops.append(asyncio.get_running_loop())
            return AnswerResponse(answer=f"answer {len(loops)}")

    monkeypatch.setattr("pdf_insights.cli.AnswerService", LoopRecordingService)
    result = runner.invoke(app, ["chat", str(a)], input="First?\nSecond?\nquit\n")

    assert result.exit_code == 0
    assert "answer 1" in result.stdout
    assert "answer 2" in result.stdout
    assert len(loops) == 2
    assert loops[0] is loops[1]
