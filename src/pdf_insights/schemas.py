"""Structural contracts for the answer-service boundary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AnswerRequest(BaseModel):
    """Question plus every extracted document text, in corpus order."""

    model_config = ConfigDict(strict=True, extra="forbid", populate_by_name=True, frozen=True)

    question: str = Field(..., description="The question to answer based on the PDF documents.")
    pdf_texts: list[str] = Field(
        ...,
        alias="pdfTexts",
        description="The extracted text content from the uploaded PDF documents.",
    )


class AnswerResponse(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    answer: str = Field(..., description="The answer to the question based on the PDF documents.")
