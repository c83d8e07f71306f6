"""Single-step execution: compose prompt -> invoke model -> unwrap response.

Every flow (and every sub-step of a multi-step flow) goes through one of the
two helpers below, so the at-most-one-call guarantee and the output gate live
in one place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from core.domain.errors import MalformedOutputError
from core.domain.prompts import PromptTemplate
from core.domain.validation import unwrap_response
from core.interfaces.generative_model import GenerativeModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def present(**fields: Any) -> dict[str, Any]:
    """Drop arguments the caller did not supply so validation reports them as missing."""

    return {name: value for name, value in fields.items() if value is not None}


async def run_structured_step(
    model: GenerativeModel,
    template: PromptTemplate,
    request: BaseModel | Mapping[str, Any],
    output_model: type[T],
) -> T:
    prompt = template.render(request)
    logger.debug("%s: invoking model (%d media part(s))", template.name, len(prompt.media))
    raw = await model.generate(prompt, output_schema=output_model)
    result = unwrap_response(output_model, raw, step=template.name)
    logger.debug("%s: response accepted", template.name)
    return result


async def run_text_step(
    model: GenerativeModel,
    template: PromptTemplate,
    request: BaseModel | Mapping[str, Any],
) -> str:
    prompt = template.render(request)
    logger.debug("%s: invoking model for plain text (%d media part(s))", template.name, len(prompt.media))
    raw = await model.generate(prompt, output_schema=None)
    if not isinstance(raw, str):
        raise MalformedOutputError(f"expected plain text, got {type(raw).__name__}", step=template.name)
    return raw.strip()
