from __future__ import annotations

from dataclasses import dataclass, field

from pdf_insights.models import (
    ChatTurn,
    ConversationPhase,
    IngestionState,
    IngestStats,
    Notification,
    Speaker,
    UploadedFile,
)

THINKING_PLACEHOLDER = ChatTurn(speaker=Speaker.ASSISTANT, body="…")


@dataclass
class ChatSession:
    """Everything one user works with: selected files, corpus, conversation.

    Owned by whoever drives the UI and handed to the file manager, the ingestor
    and the conversation controller. Nothing here outlives the process.
    """

    files: list[UploadedFile] = field(default_factory=list)
    corpus: list[str] | None = None
    state: IngestionState = IngestionState.EMPTY
    history: list[ChatTurn] = field(default_factory=list)
    phase: ConversationPhase = ConversationPhase.AWAITING_INPUT
    input_buffer: str = ""
    last_ingest_stats: IngestStats | None = None
    selection_signature: tuple[tuple[str, str, int], ...] = ()
    notifications: list[Notification] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.state is IngestionState.READY and self.corpus is not None

    @property
    def is_processing(self) -> bool:
        return self.state is IngestionState.PROCESSING

    @property
    def file_names(self) -> list[str]:
        return [f.name for f in self.files]

    def reset(self) -> None:
        self.state = IngestionState.EMPTY
        self.corpus = None
        self.history = []
        self.last_ingest_stats = None

    def visible_history(self) -> list[ChatTurn]:
        """History as rendered, including the transient placeholder while an answer is pending."""
        if self.phase is ConversationPhase.SUBMITTING:
            return [*self.history, THINKING_PLACEHOLDER]
        return list(self.history)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain_notifications(self) -> list[Notification]:
        pending, self.notifications = self.notifications, []
        return pending
