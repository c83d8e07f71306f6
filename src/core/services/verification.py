"""Artisan identity/location verification.

Pipeline:

    idle -> resolving-location -> analyzing-photo -> comparing
         -> verified | flagged | mismatch

`error` is reachable from any non-terminal stage. The city comparison itself
is a single classification delegated to the hosted model; this module only
assembles its three inputs (declared city, geocoded city, photo context) and
returns the decision unmodified.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from core.domain.errors import FlowError
from core.domain.models import (
    ComparisonRequest,
    PhotoAnalysis,
    PhotoAnalysisRequest,
    VerificationRequest,
    VerificationResult,
    VerificationStage,
)
from core.domain.prompts import PHOTO_ANALYSIS_PROMPT, VERIFICATION_PROMPT
from core.domain.validation import validate_request
from core.interfaces.generative_model import GenerativeModel
from core.interfaces.geocoder import Geocoder
from core.services.flow_runner import present, run_structured_step

logger = logging.getLogger(__name__)

PHOTO_ANALYSIS_FALLBACK = "Could not analyze photo."

_TRANSITIONS: dict[VerificationStage, frozenset[VerificationStage]] = {
    VerificationStage.IDLE: frozenset({VerificationStage.RESOLVING_LOCATION}),
    VerificationStage.RESOLVING_LOCATION: frozenset({VerificationStage.ANALYZING_PHOTO}),
    VerificationStage.ANALYZING_PHOTO: frozenset({VerificationStage.COMPARING}),
    VerificationStage.COMPARING: frozenset(
        {VerificationStage.VERIFIED, VerificationStage.FLAGGED, VerificationStage.MISMATCH}
    ),
}


@dataclass
class VerificationTrace:
    """What happened during one verification run (for auditing/UI)."""

    stages: list[VerificationStage] = field(default_factory=lambda: [VerificationStage.IDLE])
    geocoded_city: str | None = None
    photo_analysis: str | None = None
    result: VerificationResult | None = None
    error: Exception | None = None

    @property
    def stage(self) -> VerificationStage:
        return self.stages[-1]


@dataclass
class VerificationHooks:
    """Optional callbacks for UI layers (progress, final trace)."""

    stage: Callable[[VerificationStage], None] | None = None
    finished: Callable[[VerificationTrace], None] | None = None


class _StageTracker:
    def __init__(self, trace: VerificationTrace, hooks: VerificationHooks) -> None:
        self._trace = trace
        self._hooks = hooks

    def advance(self, stage: VerificationStage) -> None:
        current = self._trace.stage
        if stage is VerificationStage.ERROR:
            allowed = not current.terminal
        else:
            allowed = stage in _TRANSITIONS.get(current, frozenset())
        if not allowed:
            raise RuntimeError(f"illegal verification transition {current.value} -> {stage.value}")
        self._trace.stages.append(stage)
        logger.debug("verification stage: %s", stage.value)
        if self._hooks.stage:
            self._hooks.stage(stage)


async def _analyze_photo(model: GenerativeModel, request: VerificationRequest) -> str:
    analysis = await run_structured_step(
        model,
        PHOTO_ANALYSIS_PROMPT,
        PhotoAnalysisRequest(photo=request.photo),
        PhotoAnalysis,
    )
    return analysis.analysis.strip() or PHOTO_ANALYSIS_FALLBACK


async def verify_artisan_identity(
    model: GenerativeModel,
    geocoder: Geocoder,
    *,
    photo: Any = None,
    latitude: float | None = None,
    longitude: float | None = None,
    declared_city: str | None = None,
    hooks: VerificationHooks | None = None,
    concurrent: bool = False,
) -> VerificationResult:
    """Compare the declared city with the GPS city, using the live photo as context.

    With `concurrent=True` geocoding and photo analysis run side by side;
    stages are still reported in pipeline order.
    """

    hooks = hooks or VerificationHooks()
    trace = VerificationTrace()
    tracker = _StageTracker(trace, hooks)

    try:
        request = validate_request(
            VerificationRequest,
            present(photo=photo, latitude=latitude, longitude=longitude, declared_city=declared_city),
            step=VERIFICATION_PROMPT.name,
        )

        if concurrent:
            tracker.advance(VerificationStage.RESOLVING_LOCATION)
            tracker.advance(VerificationStage.ANALYZING_PHOTO)
            outcomes = await asyncio.gather(
                geocoder.reverse(request.latitude, request.longitude),
                _analyze_photo(model, request),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            trace.geocoded_city, trace.photo_analysis = outcomes  # type: ignore[assignment]
        else:
            tracker.advance(VerificationStage.RESOLVING_LOCATION)
            trace.geocoded_city = await geocoder.reverse(request.latitude, request.longitude)
            logger.info("Resolved GPS city: %s", trace.geocoded_city)

            tracker.advance(VerificationStage.ANALYZING_PHOTO)
            trace.photo_analysis = await _analyze_photo(model, request)

        tracker.advance(VerificationStage.COMPARING)
        result = await run_structured_step(
            model,
            VERIFICATION_PROMPT,
            ComparisonRequest(
                declared_city=request.declared_city,
                resolved_city=trace.geocoded_city,
                photo_analysis=trace.photo_analysis,
            ),
            VerificationResult,
        )
        trace.result = result
        tracker.advance(VerificationStage.from_status(result.status))
        logger.info(
            "Verification %s (declared=%r, resolved=%r)",
            result.status.value,
            request.declared_city,
            result.resolved_city,
        )
        return result
    except Exception as exc:
        trace.error = exc
        if not trace.stage.terminal:
            tracker.advance(VerificationStage.ERROR)
        if isinstance(exc, FlowError):
            logger.error("Verification failed: %s", exc)
        else:
            logger.exception("Verification failed unexpectedly")
        raise
    finally:
        if hooks.finished:
            hooks.finished(trace)
