from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError as SchemaError

from pdf_insights.config import Settings, require_api_key
from pdf_insights.errors import AnswerError
from pdf_insights.schemas import AnswerRequest, AnswerResponse

logger = logging.getLogger(__name__)

PROMPT_PATH = Path(__file__).parent / "prompts" / "answer_prompt.txt"


def _load_prompt_template() -> str:
    return PROMPT_PATH.read_text(encoding="utf-8")


def _join_documents(pdf_texts: list[str]) -> str:
    joined = ""
    for text in pdf_texts:
        joined += text + "\n"
    return joined


def build_prompt(request: AnswerRequest) -> str:
    template = _load_prompt_template()
    return template.format(question=request.question, documents=_join_documents(request.pdf_texts))


def build_chat_model(settings: Settings) -> ChatGoogleGenerativeAI:
    require_api_key(settings)
    return ChatGoogleGenerativeAI(
        model=settings.gemini_chat_model,
        google_api_key=settings.google_api_key,
        temperature=settings.answer_temperature,
    )


def build_llm(chat_model: ChatGoogleGenerativeAI) -> Any:
    return chat_model.with_structured_output(AnswerResponse)


async def _close_chat_model(chat_model: Any) -> None:
    try:
        await chat_model.aclose()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not close chat model client: %s", exc)


def _validate_request(payload: AnswerRequest | dict[str, Any]) -> AnswerRequest:
    try:
        if isinstance(payload, AnswerRequest):
            return AnswerRequest.model_validate(payload.model_dump(by_alias=True))
        return AnswerRequest.model_validate(payload)
    except SchemaError as exc:
        raise AnswerError(f"Invalid answer request: {exc}") from exc


async def _invoke(llm: Any, prompt: str, settings: Settings) -> Any:
    try:
        call = llm.ainvoke(prompt)
        if settings.answer_timeout_s > 0:
            return await asyncio.wait_for(call, timeout=settings.answer_timeout_s)
        return await call
    except asyncio.TimeoutError as exc:
        raise AnswerError(f"Answer service timed out after {settings.answer_timeout_s}s") from exc
    except Exception as exc:  # noqa: BLE001
        raise AnswerError(f"Answer service failed: {exc}") from exc


async def generate_answer(
    request: AnswerRequest | dict[str, Any],
    settings: Settings,
    llm: Any | None = None,
) -> AnswerResponse:
    """Ask the model one question over the full corpus and return its structured answer.

    ``llm`` is anything with an async ``ainvoke(prompt)`` returning an
    ``AnswerResponse`` or a mapping with the same fields. Without one, a Gemini
    client is built for this call and closed before returning, since its async
    transport is bound to the running event loop. Transport failures, timeouts
    and output that fails the response schema all raise ``AnswerError``.
    """
    validated = _validate_request(request)
    prompt = build_prompt(validated)

    if llm is not None:
        raw = await _invoke(llm, prompt, settings)
    else:
        try:
            chat_model = build_chat_model(settings)
        except Exception as exc:  # noqa: BLE001
            raise AnswerError(f"Answer service unavailable: {exc}") from exc
        try:
            raw = await _invoke(build_llm(chat_model), prompt, settings)
        finally:
            await _close_chat_model(chat_model)

    try:
        if isinstance(raw, AnswerResponse):
            return raw
        return AnswerResponse.model_validate(raw)
    except SchemaError as exc:
        raise AnswerError(f"Answer service returned an invalid response: {exc}") from exc


class AnswerService:
    """Default answer service handed to the conversation controller.

    Holds settings only; each call gets its own client so the service can be
    kept across ``asyncio.run`` invocations (Streamlit reruns, REPL turns).
    """

    def __init__(self, settings: Settings, llm: Any | None = None) -> None:
        self.settings = settings
        self._llm = llm

    async def __call__(self, request: AnswerRequest) -> AnswerResponse:
        return await generate_answer(request, self.settings, llm=self._llm)
