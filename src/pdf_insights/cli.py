from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path

import typer

from pdf_insights.config import ConfigError, Settings, configure_logging, load_settings, require_api_key
from pdf_insights.conversation import ConversationController
from pdf_insights.errors import PdfInsightsError
from pdf_insights.files import FileSetManager
from pdf_insights.ingest import run_ingestion
from pdf_insights.models import Speaker, UploadedFile
from pdf_insights.qa import AnswerService
from pdf_insights.session import ChatSession

app = typer.Typer(add_completion=False, help="PDF Insights CLI")


def load_uploaded_file(path: Path) -> UploadedFile:
    mime_type, _ = mimetypes.guess_type(path.name)
    return UploadedFile(name=path.name, data=path.read_bytes(), mime_type=mime_type or "application/octet-stream")


def _echo_notifications(session: ChatSession) -> None:
    for note in session.drain_notifications():
        typer.echo(f"{note.title}: {note.description}")


async def _prepare_session(paths: list[Path]) -> ChatSession:
    session = ChatSession()
    manager = FileSetManager(session)
    manager.add(load_uploaded_file(p) for p in paths)
    skipped = len(paths) - len(session.files)
    if skipped:
        typer.echo(f"Skipped {skipped} non-PDF or duplicate file(s).")
    await run_ingestion(session)
    return session


@app.command()
def extract(
    pdfs: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="PDF files to extract."),
    show_text: bool = typer.Option(False, "--show-text", help="Print the extracted text of every file."),
) -> None:
    """Extract text from PDFs and report what would be sent to the model."""
    try:
        configure_logging(load_settings())
        session = asyncio.run(_prepare_session(pdfs))
    except PdfInsightsError as exc:
        typer.echo(f"Extract failed: {exc}")
        raise typer.Exit(code=1)

    stats = session.last_ingest_stats
    typer.echo("Extraction complete")
    typer.echo(f"files_processed={stats.files_processed}")
    typer.echo(f"pages_read={stats.pages_read}")
    typer.echo(f"chars_extracted={stats.chars_extracted}")
    typer.echo(f"duration_s={stats.duration_s}")
    if show_text:
        for text in session.corpus or []:
            typer.echo(text)


async def _chat_loop(paths: list[Path], settings: Settings) -> None:
    session = await _prepare_session(paths)
    controller = ConversationController(session, AnswerService(settings))
    typer.echo(session.history[0].body)
    typer.echo("Type 'exit' or 'quit' to stop.")
    while True:
        question = typer.prompt("Question", default=session.input_buffer, show_default=False)
        if question.strip().lower() in {"exit", "quit"}:
            break
        if await controller.ask(question):
            last = session.history[-1]
            if last.speaker is Speaker.ASSISTANT:
                typer.echo(last.body)
        _echo_notifications(session)
        typer.echo("")


@app.command()
def chat(
    pdfs: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="PDF files to chat with."),
) -> None:
    """Process PDFs, then answer questions about them interactively."""
    try:
        settings = load_settings()
        configure_logging(settings)
        require_api_key(settings)
        asyncio.run(_chat_loop(pdfs, settings))
    except PdfInsightsError as exc:
        typer.echo(f"Chat failed: {exc}")
        raise typer.Exit(code=1)


@app.command()
def doctor() -> None:
    """Run environment checks for configuration and API key."""
    try:
        settings = load_settings()
        require_api_key(settings)
    except ConfigError as exc:
        typer.echo(f"Doctor failed: {exc}")
        raise typer.Exit(code=1)

    typer.echo("Doctor checks passed")
    typer.echo("GOOGLE_API_KEY=set")
    typer.echo(f"gemini_chat_model={settings.gemini_chat_model}")
    typer.echo(f"answer_timeout_s={settings.answer_timeout_s}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
