"""Validation gates at both ends of a flow.

- `validate_request`: caller input -> typed request, or `FlowValidationError`
  naming every offending field (pydantic collects all of them in one pass).
- `unwrap_response`: raw model output -> typed response, or
  `MalformedOutputError` ("missing required field <name>").
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from core.domain.errors import FlowValidationError, MalformedOutputError

T = TypeVar("T", bound=BaseModel)


def _loc_name(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def _problems(exc: ValidationError) -> dict[str, str]:
    problems: dict[str, str] = {}
    for err in exc.errors(include_url=False):
        name = _loc_name(err.get("loc", ()))
        ctx = err.get("ctx") or {}
        if err.get("type") == "missing_field" and ctx.get("field"):
            name = str(ctx["field"])
        reason = "field required" if err.get("type") == "missing" else str(err.get("msg", "invalid"))
        if name in problems:
            problems[name] = f"{problems[name]}, {reason}"
        else:
            problems[name] = reason
    return problems


def validate_request(model: type[T], raw: Mapping[str, Any] | BaseModel, *, step: str | None = None) -> T:
    """Normalize caller-supplied fields into `model`."""

    if isinstance(raw, model):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        raise FlowValidationError({"__root__": f"expected a mapping, got {type(raw).__name__}"}, step=step)
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        raise FlowValidationError(_problems(exc), step=step) from exc


def missing_fields(exc: ValidationError) -> list[str]:
    names: list[str] = []
    for err in exc.errors(include_url=False):
        ctx = err.get("ctx") or {}
        if err.get("type") == "missing":
            names.append(_loc_name(err.get("loc", ())))
        elif err.get("type") == "missing_field" and ctx.get("field"):
            names.append(str(ctx["field"]))
    return names


def unwrap_response(model: type[T], raw: Any, *, step: str | None = None) -> T:
    """Accept `raw` only if every required output field is present with the right kind."""

    if not isinstance(raw, Mapping):
        raise MalformedOutputError(
            f"expected a JSON object, got {type(raw).__name__}",
            step=step,
        )
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        missing = missing_fields(exc)
        if len(missing) == 1:
            message = f"missing required field {missing[0]}"
        elif missing:
            message = "missing required fields " + ", ".join(missing)
        else:
            message = "; ".join(f"{name}: {reason}" for name, reason in _problems(exc).items())
        raise MalformedOutputError(message, step=step, missing=missing) from exc
