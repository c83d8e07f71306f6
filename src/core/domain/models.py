"""Domain models (Pydantic v2).

Requests and responses of every AI flow, plus the opaque `MediaReference`
that carries photos and voice recordings through the pipeline.

Notes:
- Request models describe what the caller must supply; a failing
  `model_validate` is the input validation step of each flow.
- Response models describe what the hosted model is asked to emit. Wire
  names keep the camelCase shape (`suggestedPrice`, `resolvedCity`...),
  Python attributes are snake_case.
"""

from __future__ import annotations

import base64
import mimetypes
import re
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from pydantic import AfterValidator, AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict
from pydantic_core import PydanticCustomError


_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[\w.+-]+=[^;,]*)*);base64,(?P<payload>.+)$",
    re.DOTALL,
)


class MediaReference(BaseModel):
    """Binary content (image/audio) encoded as a base64 data URI.

    The core never decodes the payload: it is handed to the hosted model
    exactly as received.
    """

    model_config = ConfigDict(frozen=True)

    uri: str = Field(
        ...,
        min_length=1,
        description="Data URI: 'data:<mimetype>;base64,<encoded_data>'.",
    )
    content_type: str = Field(
        ...,
        min_length=3,
        description="MIME type extracted from the data URI (e.g. 'image/jpeg').",
    )

    @model_validator(mode="before")
    @classmethod
    def _parse_data_uri(cls, value: Any) -> Any:
        if isinstance(value, MediaReference):
            return value
        if isinstance(value, str):
            match = _DATA_URI_RE.match(value.strip())
            if not match:
                raise ValueError("expected a base64 data URI 'data:<mimetype>;base64,<data>'")
            return {"uri": value.strip(), "content_type": match.group("mime").lower()}
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "MediaReference":
        match = _DATA_URI_RE.match(self.uri)
        if not match:
            raise ValueError("expected a base64 data URI 'data:<mimetype>;base64,<data>'")
        if match.group("mime").lower() != self.content_type.lower():
            raise ValueError("content_type does not match the data URI")
        return self

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str) -> "MediaReference":
        encoded = base64.b64encode(data).decode("ascii")
        return cls.model_validate(f"data:{content_type};base64,{encoded}")

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> "MediaReference":
        """Read a local file into a data URI, guessing the MIME type from its name."""

        mime = content_type or mimetypes.guess_type(path.name)[0]
        if not mime:
            raise ValueError(f"cannot guess the content type of {path.name}")
        return cls.from_bytes(path.read_bytes(), mime)

    @property
    def kind(self) -> str:
        """Top-level media type: 'image', 'audio', 'video'..."""

        return self.content_type.split("/", 1)[0]

    @property
    def subtype(self) -> str:
        return self.content_type.split("/", 1)[1]

    @property
    def payload(self) -> str:
        """The base64 text after the comma (still encoded)."""

        return self.uri.split(",", 1)[1]

    def __repr__(self) -> str:
        return f"MediaReference(content_type={self.content_type!r}, size={len(self.payload)})"


def _require_kind(kind: str):
    def check(ref: MediaReference) -> MediaReference:
        if ref.kind != kind:
            raise ValueError(f"expected {kind}/* media, got {ref.content_type}")
        return ref

    return check


ImageReference = Annotated[MediaReference, AfterValidator(_require_kind("image"))]
AudioReference = Annotated[MediaReference, AfterValidator(_require_kind("audio"))]

LanguageTag = Annotated[str, Field(min_length=2, max_length=35)]

# Tags arrive comma-separated or as space-separated `#tag` runs.
_TAG_SPLIT_RE = re.compile(r",|\s+(?=#)")


class FlowModel(BaseModel):
    """Base for every request/response record of a flow."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# --- Requests ---------------------------------------------------------------


class ProductListingRequest(FlowModel):
    photo: ImageReference = Field(..., description="Product photo.")
    description: str = Field(
        ...,
        min_length=3,
        max_length=5_000,
        description="Brief text or transcribed voice description of the product.",
    )
    language: LanguageTag = Field(default="en", description="Output language tag.")
    target_audience: str = Field(
        ...,
        min_length=3,
        max_length=500,
        validation_alias=AliasChoices("target_audience", "targetAudience"),
        description="Description of the target audience.",
    )


class CulturalInsightsRequest(FlowModel):
    craft_name: str = Field(..., min_length=2, max_length=200)
    language: LanguageTag = "en"


class TranscriptionRequest(FlowModel):
    audio: AudioReference
    language: LanguageTag = "en"


class CulturalNarrativeRequest(FlowModel):
    audio: AudioReference
    language: LanguageTag


class NarrativeStepRequest(FlowModel):
    transcription: str = Field(..., min_length=1)
    language: LanguageTag


class StoryCreationRequest(FlowModel):
    audio: AudioReference
    language: LanguageTag


class VerificationRequest(FlowModel):
    photo: ImageReference = Field(..., description="Live photo of the artisan.")
    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    declared_city: str = Field(..., min_length=2, max_length=200)


class PhotoAnalysisRequest(FlowModel):
    photo: ImageReference


class ComparisonRequest(FlowModel):
    declared_city: str = Field(..., min_length=1)
    resolved_city: str = Field(..., min_length=1)
    photo_analysis: str = Field(..., min_length=1)


# --- Responses --------------------------------------------------------------


class ProductListing(FlowModel):
    title: str = Field(..., description="A compelling title for the product listing.")
    description: str = Field(..., description="A detailed and engaging description of the product.")
    story: str = Field(
        ...,
        description="A cultural story about the product, its origins, or the artisan.",
    )
    hashtags: str = Field(
        ...,
        description=(
            "A comma-separated list of relevant tags or keywords, without the '#' symbol "
            "(e.g. 'handmade, terracotta, decorative')."
        ),
    )
    suggested_price: str = Field(
        ...,
        alias="suggestedPrice",
        description=(
            "A suggested selling price in Indian Rupees (e.g. '₹1,499'), prefaced by a short "
            "note that it is only a suggestion."
        ),
    )

    @field_validator("hashtags")
    @classmethod
    def _normalize_hashtags(cls, value: str) -> str:
        tags = [part.replace("#", "").strip() for part in _TAG_SPLIT_RE.split(value)]
        return ", ".join(tag for tag in tags if tag)

    @property
    def tags(self) -> list[str]:
        return [tag for tag in (t.strip() for t in self.hashtags.split(",")) if tag]


class CulturalInsights(FlowModel):
    cultural_insights: str = Field(
        ...,
        alias="culturalInsights",
        description="Cultural insights about the craft, including its origins and history.",
    )


class Transcription(FlowModel):
    text: str = Field(..., description="Verbatim transcription of the recording.")


class CulturalNarrative(FlowModel):
    narrative: str = Field(..., description="The cultural narrative in the requested language.")


class StoryText(FlowModel):
    story: str = Field(..., description="The cultural story written from the transcription.")


class StoryCreation(FlowModel):
    transcription: str = Field(..., description="The transcribed text from the audio.")
    story: str = Field(..., description="The generated cultural narrative based on the transcription.")


class PhotoAnalysis(FlowModel):
    analysis: str = Field(
        ...,
        description="A brief, one-sentence description of the surroundings seen in the photo.",
    )


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    FLAGGED = "flagged"
    MISMATCH = "mismatch"


class VerificationResult(FlowModel):
    status: VerificationStatus = Field(
        ...,
        description=(
            "'verified' if locations match, 'flagged' for slight mismatches needing review, "
            "'mismatch' for significant differences."
        ),
    )
    resolved_city: str = Field(
        ...,
        alias="resolvedCity",
        description="The city name resolved from the GPS coordinates.",
    )
    mismatch_reason: str | None = Field(
        default=None,
        alias="mismatchReason",
        description="Brief explanation; required when status is 'flagged' or 'mismatch'.",
    )

    @model_validator(mode="after")
    def _reason_required_unless_verified(self) -> "VerificationResult":
        if self.status is not VerificationStatus.VERIFIED and not (self.mismatch_reason or "").strip():
            raise PydanticCustomError(
                "missing_field",
                "{field} is required when status is '{status}'",
                {"field": "mismatchReason", "status": self.status.value},
            )
        return self


class VerificationStage(str, Enum):
    """Stages reported by the verification flow, in order."""

    IDLE = "idle"
    RESOLVING_LOCATION = "resolving-location"
    ANALYZING_PHOTO = "analyzing-photo"
    COMPARING = "comparing"
    VERIFIED = "verified"
    FLAGGED = "flagged"
    MISMATCH = "mismatch"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL_STAGES

    @classmethod
    def from_status(cls, status: VerificationStatus) -> "VerificationStage":
        return cls(status.value)


_TERMINAL_STAGES = frozenset(
    {
        VerificationStage.VERIFIED,
        VerificationStage.FLAGGED,
        VerificationStage.MISMATCH,
        VerificationStage.ERROR,
    }
)
