"""Pydantic models for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GeminiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Part(GeminiBaseModel):
    text: str | None = None


class Content(GeminiBaseModel):
    role: str | None = None
    parts: list[Part] = Field(default_factory=list["Part"])


class Candidate(GeminiBaseModel):
    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class UsageMetadata(GeminiBaseModel):
    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    total_token_count: int = Field(default=0, alias="totalTokenCount")


class GenerateContentResponse(GeminiBaseModel):
    candidates: list[Candidate] = Field(default_factory=list["Candidate"])
    usage_metadata: UsageMetadata | None = Field(default=None, alias="usageMetadata")

    def first_text(self) -> str | None:
        for candidate in self.candidates:
            if candidate.content is None:
                continue
            texts = [part.text for part in candidate.content.parts if part.text]
            if texts:
                return "".join(texts)
        return None


class ErrorDetail(GeminiBaseModel):
    code: int | None = None
    message: str = ""
    status: str | None = None


class ErrorResponse(GeminiBaseModel):
    error: ErrorDetail
