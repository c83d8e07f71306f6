"""Errors of the AI flow domain.

Every failure of a flow invocation surfaces as a `FlowError` subclass with a
human-readable message. None of them is retried anywhere in the core: the
caller decides whether to start the whole flow again.
"""

from __future__ import annotations


class FlowError(Exception):
    """Base class for terminal failures of a flow invocation."""

    kind = "flow"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class FlowValidationError(FlowError):
    """Caller input is malformed or incomplete; raised before any network call."""

    kind = "validation"

    def __init__(self, problems: dict[str, str], *, step: str | None = None) -> None:
        self.problems = dict(problems)
        details = "; ".join(f"{name}: {reason}" for name, reason in self.problems.items())
        super().__init__(f"invalid input ({details})", step=step)

    @property
    def fields(self) -> list[str]:
        return list(self.problems)


class PromptCompositionError(FlowError):
    """A template placeholder has no matching request field."""

    kind = "composition"


class ModelUnavailableError(FlowError):
    """The hosted model could not be reached, timed out or refused the call."""

    kind = "transport"


class GeocodingError(FlowError):
    """Reverse geocoding failed (transport error or unusable payload)."""

    kind = "transport"


class MalformedOutputError(FlowError):
    """The model answered, but not in the declared output shape."""

    kind = "schema"

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        missing: list[str] | None = None,
    ) -> None:
        super().__init__(message, step=step)
        self.missing = list(missing or [])


class EmptyResultError(FlowError):
    """A well-formed response was semantically empty (e.g. no transcription)."""

    kind = "business-empty"
