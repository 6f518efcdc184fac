from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PDF_MIME_TYPE = "application/pdf"


class IngestionState(str, Enum):
    EMPTY = "empty"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class ConversationPhase(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    SUBMITTING = "submitting"


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class UploadedFile:
    name: str
    data: bytes
    mime_type: str = PDF_MIME_TYPE

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE


@dataclass(frozen=True)
class ExtractedDocument:
    source_name: str
    text: str
    page_count: int = 0


@dataclass(frozen=True)
class ChatTurn:
    speaker: Speaker
    body: str


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


@dataclass
class IngestStats:
    files_processed: int = 0
    pages_read: int = 0
    chars_extracted: int = 0
    duration_s: float = 0.0
