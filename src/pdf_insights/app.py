from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import streamlit as st

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pdf_insights.config import ConfigError, Settings, configure_logging, load_settings
from pdf_insights.conversation import ConversationController
from pdf_insights.errors import PdfInsightsError
from pdf_insights.files import FileSetManager
from pdf_insights.ingest import run_ingestion
from pdf_insights.models import ChatTurn, Speaker, UploadedFile
from pdf_insights.qa import AnswerService
from pdf_insights.session import THINKING_PLACEHOLDER, ChatSession


def _ensure_session_defaults(settings: Settings) -> None:
    if "chat_session" not in st.session_state:
        st.session_state.chat_session = ChatSession()
    if "controller" not in st.session_state:
        st.session_state.controller = ConversationController(
            st.session_state.chat_session, AnswerService(settings)
        )


def _sync_uploads(session: ChatSession, uploaded_files: list[Any]) -> None:
    FileSetManager(session).sync_selection(
        UploadedFile(name=uploaded.name, data=uploaded.getvalue(), mime_type=uploaded.type)
        for uploaded in uploaded_files
    )


def _render_notifications(session: ChatSession, container: Any = st) -> None:
    for note in session.drain_notifications():
        if note.is_error:
            container.error(f"**{note.title}**: {note.description}")
        else:
            st.toast(f"{note.title}: {note.description}")


def _render_sidebar(session: ChatSession) -> None:
    st.sidebar.header("Your documents")
    st.sidebar.caption("Upload your PDFs here and click on 'Process'")
    uploaded_files = st.sidebar.file_uploader(
        "Upload PDFs",
        type=["pdf"],
        accept_multiple_files=True,
        disabled=session.is_processing,
    )
    _sync_uploads(session, uploaded_files or [])

    process_clicked = st.sidebar.button(
        "Process",
        type="primary",
        use_container_width=True,
        disabled=session.is_processing or not session.files,
    )
    if not process_clicked:
        return
    with st.sidebar.status("Processing...", expanded=False) as status:
        try:
            asyncio.run(run_ingestion(session))
        except PdfInsightsError as exc:
            status.update(label=f"Processing failed: {exc}", state="error")
            _render_notifications(session, container=st.sidebar)
            return
        status.update(label="Processing complete", state="complete")

    stats = session.last_ingest_stats
    if stats:
        st.sidebar.caption(
            f"files={stats.files_processed} pages={stats.pages_read} "
            f"chars={stats.chars_extracted} duration_s={stats.duration_s}"
        )


def _render_turn(turn: ChatTurn) -> None:
    with st.chat_message(turn.speaker.value):
        st.markdown(turn.body)


def _render_chat_history(session: ChatSession) -> None:
    turns = session.visible_history()
    if not turns:
        st.subheader("Ready for your documents")
        st.write('Upload your PDF documents in the sidebar, click "Process," and then ask me anything about their content.')
        return
    for turn in turns:
        _render_turn(turn)


def _answer_user_question(controller: ConversationController, question: str) -> None:
    _render_turn(ChatTurn(speaker=Speaker.USER, body=question))
    with st.chat_message(THINKING_PLACEHOLDER.speaker.value):
        with st.spinner(THINKING_PLACEHOLDER.body):
            asyncio.run(controller.ask(question))
    st.rerun()


def main() -> None:
    st.set_page_config(page_title="PDF Insights", layout="wide")
    st.title("Chat with multiple PDFs")

    try:
        settings = load_settings()
    except ConfigError as exc:
        st.error(f"Configuration error: {exc}")
        st.stop()

    configure_logging(settings)
    _ensure_session_defaults(settings)
    session: ChatSession = st.session_state.chat_session
    controller: ConversationController = st.session_state.controller

    _render_sidebar(session)
    _render_notifications(session)
    _render_chat_history(session)

    placeholder = "Ask a question about your documents..." if controller.can_ask else "Please process your documents first"
    prompt = st.chat_input(placeholder, disabled=not controller.can_ask)
    if prompt:
        _answer_user_question(controller, prompt)


if __name__ == "__main__":
    main()
