"""Structured-output calls against the Gemini API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from swatchbook.domain.errors import MalformedModelResponse, ModelUnavailable
from swatchbook.domain.model import TokenUsage
from swatchbook.domain.ports.model import StructuredResponse

from .schema import ErrorResponse, GenerateContentResponse, UsageMetadata

if TYPE_CHECKING:
    from swatchbook.adapters.http_resilience import ResilientClient
    from swatchbook.config.gemini import GeminiConfig
    from swatchbook.domain.ports.model import StructuredModel

log = getLogger(__name__)


def _token_usage(metadata: UsageMetadata | None) -> TokenUsage | None:
    if metadata is None:
        return None
    return TokenUsage(
        prompt_tokens=metadata.prompt_token_count,
        output_tokens=metadata.candidates_token_count,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).error.message
    except (ValidationError, ValueError):
        return response.reason_phrase


@dataclass(slots=True)
class GeminiStructuredModel:
    """``StructuredModel`` backed by Gemini's JSON response mode.

    Transport failures and error statuses raise ``ModelUnavailable``; answers
    that are not valid JSON for the requested schema raise
    ``MalformedModelResponse``. Retries are left to the caller.
    """

    config: GeminiConfig
    client: ResilientClient

    async def generate_structured[TSchema: BaseModel](
        self,
        prompt: str,
        schema: type[TSchema],
    ) -> StructuredResponse[TSchema]:
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "responseMimeType": "application/json",
                "responseJsonSchema": schema.model_json_schema(),
            },
        }
        try:
            response = await self.client.post(
                f"models/{self.config.model}:generateContent",
                json=body,
                headers={"x-goog-api-key": self.config.api_key},
            )
        except httpx.HTTPError as exc:
            raise ModelUnavailable(f"Gemini request failed: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            log.error("Gemini API error %s: %s", response.status_code, message)
            raise ModelUnavailable(f"Gemini returned {response.status_code}: {message}")

        try:
            payload = GenerateContentResponse.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            raise MalformedModelResponse("Unexpected Gemini response payload") from exc

        text = payload.first_text()
        if text is None:
            raise MalformedModelResponse("Gemini response contained no text candidate")
        try:
            value = schema.model_validate_json(text)
        except ValidationError as exc:
            log.debug("Rejected Gemini answer for %s: %s", schema.__name__, text)
            raise MalformedModelResponse(
                f"Gemini answer does not match {schema.__name__}"
            ) from exc

        return StructuredResponse(value=value, usage=_token_usage(payload.usage_metadata))


if TYPE_CHECKING:
    _model_check: type[StructuredModel] = GeminiStructuredModel
