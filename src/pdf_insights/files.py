from __future__ import annotations

import logging
from collections.abc import Iterable

from pdf_insights.models import UploadedFile
from pdf_insights.session import ChatSession

logger = logging.getLogger(__name__)


def filter_candidates(existing: Iterable[UploadedFile], candidates: Iterable[UploadedFile]) -> list[UploadedFile]:
    seen = {f.name for f in existing}
    accepted: list[UploadedFile] = []
    for candidate in candidates:
        if not candidate.is_pdf:
            logger.info("Skipping %s: unsupported type %s", candidate.name, candidate.mime_type)
            continue
        if candidate.name in seen:
            continue
        seen.add(candidate.name)
        accepted.append(candidate)
    return accepted


class FileSetManager:
    """Keeps the session's file selection unique by name and PDF-only.

    Callers must not mutate the set while an ingestion is in flight; the upload
    affordance is expected to be disabled during processing.
    """

    def __init__(self, session: ChatSession) -> None:
        self.session = session

    def add(self, candidates: Iterable[UploadedFile]) -> list[UploadedFile]:
        accepted = filter_candidates(self.session.files, candidates)
        if accepted:
            self.session.files = [*self.session.files, *accepted]
            self.session.reset()
        return list(self.session.files)

    def remove(self, name: str) -> list[UploadedFile]:
        self.session.files = [f for f in self.session.files if f.name != name]
        self.session.reset()
        return list(self.session.files)

    def replace(self, candidates: Iterable[UploadedFile]) -> list[UploadedFile]:
        self.session.files = filter_candidates([], candidates)
        self.session.reset()
        return list(self.session.files)

    def sync_selection(self, candidates: Iterable[UploadedFile]) -> list[UploadedFile]:
        """Mirror an uploader widget that reports its whole selection on every rerun.

        The set is replaced only when the raw selection differs from the one last
        synced, so an unchanged selection never resets a processed session.
        """
        candidates = list(candidates)
        signature = tuple((c.name, c.mime_type, len(c.data)) for c in candidates)
        if signature != self.session.selection_signature:
            self.replace(candidates)
            self.session.selection_signature = signature
        return list(self.session.files)
