"""Adapter for the hosted generative model (OpenAI-compatible SDK).

Responsibility:
- Turn a `ComposedPrompt` into chat-completion messages (text, image and
  audio parts) plus a JSON-schema instruction for structured steps.
- Make exactly one call per `generate` (the SDK's own retries are disabled).
- Map provider failures to `ModelUnavailableError` and non-JSON answers to
  `MalformedOutputError`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI
from pydantic import BaseModel

from core.config import AppSettings
from core.domain.errors import MalformedOutputError, ModelUnavailableError, PromptCompositionError
from core.domain.models import MediaReference
from core.domain.prompts import ComposedPrompt

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)

_AUDIO_FORMATS = {
    "wav": "wav",
    "x-wav": "wav",
    "wave": "wav",
    "vnd.wave": "wav",
    "mpeg": "mp3",
    "mp3": "mp3",
}


def build_ai_client(*, api_key: str, base_url: str, timeout: float) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)


def _is_local_base_url(url: str) -> bool:
    url_l = (url or "").strip().lower()
    return url_l.startswith("http://localhost") or url_l.startswith("http://127.0.0.1") or url_l.startswith(
        "http://0.0.0.0"
    )


def _extract_json_object(text: str) -> str:
    """Return the first JSON object present in the provider response."""

    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped

    start = stripped.find("{")
    end = stripped.rfind("}")
    if 0 <= start < end:
        candidate = stripped[start : end + 1]
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass

    raise ValueError("Could not locate a valid JSON object in the AI provider response.")


def _media_part(ref: MediaReference, *, step: str) -> dict[str, Any]:
    if ref.kind == "image":
        return {"type": "image_url", "image_url": {"url": ref.uri}}
    if ref.kind == "audio":
        fmt = _AUDIO_FORMATS.get(ref.subtype)
        if fmt is None:
            raise PromptCompositionError(f"unsupported audio format {ref.content_type} (wav or mp3 only)", step=step)
        return {"type": "input_audio", "input_audio": {"data": ref.payload, "format": fmt}}
    raise PromptCompositionError(f"unsupported media type {ref.content_type}", step=step)


def _schema_instruction(output_schema: type[BaseModel]) -> str:
    schema = output_schema.model_json_schema(by_alias=True)
    return (
        "Respond ONLY with a single JSON object (no extra text, no code fences) "
        "that conforms to this JSON Schema:\n"
        + json.dumps(schema, ensure_ascii=False, sort_keys=True)
    )


def build_messages(prompt: ComposedPrompt, output_schema: type[BaseModel] | None) -> list[dict[str, Any]]:
    content: list[dict[str, Any]] = []
    for part in prompt.parts:
        if isinstance(part, MediaReference):
            content.append(_media_part(part, step=prompt.name))
        elif part.strip():
            content.append({"type": "text", "text": part})

    if output_schema is not None:
        system = _schema_instruction(output_schema)
    else:
        system = "Respond with plain text only."
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": content},
    ]


class OpenAICompatibleModel:
    """`core.interfaces.GenerativeModel` over any OpenAI-compatible endpoint."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str,
        temperature: float = 0.4,
        max_tokens: int = 2048,
    ) -> None:
        self._client = client
        self.model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "OpenAICompatibleModel":
        settings = settings or AppSettings()
        api_key = (settings.ai_api_key or "").strip()
        if not api_key:
            # Local OpenAI-compatible servers (Ollama, LM Studio) accept any key.
            if not _is_local_base_url(settings.ai_base_url):
                raise ModelUnavailableError(
                    "No AI API key configured (set ARTVAANI_AI_API_KEY or run `artvaani doctor setup-ai`)."
                )
            api_key = "local"
        client = build_ai_client(
            api_key=api_key,
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout_seconds,
        )
        return cls(
            client,
            model=settings.ai_model,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
        )

    async def generate(
        self,
        prompt: ComposedPrompt,
        *,
        output_schema: type[BaseModel] | None = None,
    ) -> dict[str, Any] | str:
        messages = build_messages(prompt, output_schema)
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except APITimeoutError as exc:
            logger.error("%s: model call timed out", prompt.name)
            raise ModelUnavailableError("model unavailable: request timed out", step=prompt.name) from exc
        except APIConnectionError as exc:
            logger.error("%s: cannot reach model endpoint: %s", prompt.name, exc)
            raise ModelUnavailableError("model unavailable: connection failed", step=prompt.name) from exc
        except APIStatusError as exc:
            logger.error("%s: provider returned HTTP %s", prompt.name, exc.status_code)
            raise ModelUnavailableError(
                f"model unavailable: provider returned HTTP {exc.status_code}",
                step=prompt.name,
            ) from exc

        if not response.choices:
            raise MalformedOutputError("malformed model output: no choices returned", step=prompt.name)
        content = (response.choices[0].message.content or "").strip()

        if output_schema is None:
            return content

        try:
            data: Any = json.loads(_extract_json_object(content))
        except ValueError as exc:
            logger.error("%s: response is not JSON (%d chars)", prompt.name, len(content))
            raise MalformedOutputError("malformed model output: not a JSON object", step=prompt.name) from exc
        if not isinstance(data, dict):
            raise MalformedOutputError("malformed model output: not a JSON object", step=prompt.name)
        return data
