"""Question/answer turn handling over an ingested corpus.

A turn moves AwaitingInput -> Submitting -> AwaitingInput. The transition
helpers below are pure: they take the current history and return the next
phase, the next history and any notification to show, so the controller only
applies them to the session.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pdf_insights.models import ChatTurn, ConversationPhase, Notification, Speaker
from pdf_insights.schemas import AnswerRequest, AnswerResponse
from pdf_insights.session import ChatSession

logger = logging.getLogger(__name__)

AnswerFn = Callable[[AnswerRequest], Awaitable[AnswerResponse]]

ANSWER_FAILED = Notification(
    title="Error",
    description="Failed to get an answer. Please try again.",
    variant="destructive",
)


@dataclass(frozen=True)
class Transition:
    phase: ConversationPhase
    history: list[ChatTurn]
    input_buffer: str
    notification: Notification | None = None


def begin_submit(history: list[ChatTurn], question: str) -> Transition:
    return Transition(
        phase=ConversationPhase.SUBMITTING,
        history=[*history, ChatTurn(speaker=Speaker.USER, body=question)],
        input_buffer="",
    )


def complete_submit(history: list[ChatTurn], response: AnswerResponse) -> Transition:
    return Transition(
        phase=ConversationPhase.AWAITING_INPUT,
        history=[*history, ChatTurn(speaker=Speaker.ASSISTANT, body=response.answer)],
        input_buffer="",
    )


def fail_submit(snapshot: list[ChatTurn], question: str) -> Transition:
    return Transition(
        phase=ConversationPhase.AWAITING_INPUT,
        history=list(snapshot),
        input_buffer=question,
        notification=ANSWER_FAILED,
    )


class ConversationController:
    def __init__(self, session: ChatSession, answer_fn: AnswerFn) -> None:
        self.session = session
        self.answer_fn = answer_fn

    @property
    def can_ask(self) -> bool:
        return self.session.is_ready and self.session.phase is ConversationPhase.AWAITING_INPUT

    def _apply(self, transition: Transition) -> None:
        self.session.phase = transition.phase
        self.session.history = transition.history
        self.session.input_buffer = transition.input_buffer
        if transition.notification is not None:
            self.session.notify(transition.notification)

    async def ask(self, question: str) -> bool:
        """Submit one question; returns True when an answer was appended.

        Blank questions, questions before ingestion is ready and questions
        while another answer is pending are ignored without touching history.
        """
        if not question.strip() or not self.can_ask:
            return False

        snapshot = list(self.session.history)
        corpus = list(self.session.corpus or [])
        self._apply(begin_submit(snapshot, question))

        try:
            request = AnswerRequest(question=question, pdf_texts=corpus)
            response = await self.answer_fn(request)
            if not isinstance(response, AnswerResponse):
                response = AnswerResponse.model_validate(response)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to get an answer: %s", exc)
            self._apply(fail_submit(snapshot, question))
            return False

        self._apply(complete_submit(self.session.history, response))
        return True
