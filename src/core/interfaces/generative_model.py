"""Contract for the hosted generative model.

Why a Protocol:
- Flows receive the model as an explicit argument, so tests can pass a
  scripted fake and production code passes the OpenAI-compatible adapter.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from core.domain.prompts import ComposedPrompt


@runtime_checkable
class GenerativeModel(Protocol):
    """Minimal contract of a hosted model endpoint.

    Rules:
    - One call to `generate` is one request to the provider: no retries,
      no streaming, no caching.
    - With `output_schema`, the result is the decoded JSON object (still
      unvalidated); without it, the plain response text.
    - Transport failures raise `ModelUnavailableError`; an answer that is
      not a JSON object raises `MalformedOutputError`.
    """

    async def generate(
        self,
        prompt: ComposedPrompt,
        *,
        output_schema: type[BaseModel] | None = None,
    ) -> dict[str, Any] | str:
        ...
