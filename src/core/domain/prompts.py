"""Prompt templates for every AI flow.

A `PromptTemplate` is compiled once at import time (Jinja2, StrictUndefined)
and rendered against a validated request into a `ComposedPrompt`: an ordered
sequence of text chunks and media references. Media fields never end up in
the text; they become separate parts the model adapter embeds natively.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from jinja2 import Environment, StrictUndefined, Template, TemplateError, meta
from pydantic import BaseModel

from core.domain.errors import PromptCompositionError
from core.domain.models import MediaReference

PromptPart = Union[str, MediaReference]

_ENV = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)

_MEDIA_MARK_RE = re.compile(r"\x00media:(?P<name>[A-Za-z_][A-Za-z0-9_]*)\x00")


class _MediaSlot:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"\x00media:{self.name}\x00"


@dataclass(frozen=True)
class ComposedPrompt:
    """Rendered prompt ready for the model invoker."""

    name: str
    parts: tuple[PromptPart, ...]

    @property
    def media(self) -> tuple[MediaReference, ...]:
        return tuple(p for p in self.parts if isinstance(p, MediaReference))

    @property
    def text(self) -> str:
        """Text view of the prompt; media parts show up as `[media:<type>]`."""

        return "".join(p if isinstance(p, str) else f"[media:{p.content_type}]" for p in self.parts)


@dataclass(frozen=True)
class PromptTemplate:
    """Immutable named template.

    Placeholders use Jinja2 syntax (`{{ field }}`); any field holding a
    `MediaReference` is rendered as an embedded-media part.
    """

    name: str
    source: str
    _compiled: Template = field(init=False, repr=False, compare=False)
    _placeholders: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", _ENV.from_string(self.source))
        object.__setattr__(self, "_placeholders", frozenset(meta.find_undeclared_variables(_ENV.parse(self.source))))

    @property
    def placeholders(self) -> frozenset[str]:
        return self._placeholders

    def render(self, request: BaseModel | Mapping[str, Any]) -> ComposedPrompt:
        if isinstance(request, BaseModel):
            values = {name: getattr(request, name) for name in type(request).model_fields}
        else:
            values = dict(request)

        missing = sorted(self._placeholders - values.keys())
        if missing:
            raise PromptCompositionError(
                f"placeholder(s) without a field: {', '.join(missing)}",
                step=self.name,
            )

        media: dict[str, MediaReference] = {}
        context: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, MediaReference):
                media[key] = value
                context[key] = _MediaSlot(key)
            elif isinstance(value, str):
                # NUL is reserved for media markers
                context[key] = value.replace("\x00", "")
            else:
                context[key] = value

        try:
            rendered = self._compiled.render(**context)
        except TemplateError as exc:
            raise PromptCompositionError(str(exc), step=self.name) from exc

        parts: list[PromptPart] = []
        cursor = 0
        for match in _MEDIA_MARK_RE.finditer(rendered):
            ref = media.get(match.group("name"))
            if ref is None:
                continue
            if match.start() > cursor:
                parts.append(rendered[cursor : match.start()])
            parts.append(ref)
            cursor = match.end()
        if cursor < len(rendered):
            parts.append(rendered[cursor:])
        return ComposedPrompt(name=self.name, parts=tuple(parts))


PRODUCT_LISTING_PROMPT = PromptTemplate(
    name="generateProductListing",
    source="""\
You are an AI assistant specializing in creating product listings for artisans selling on an e-commerce platform called ArtVaani.

Your task is to generate a complete, compelling product listing based on the provided image and description. The listing should be optimized for online marketplaces and social media.

Instructions:
1. Analyze the image and description: carefully examine the product photo and the artisan's description.
2. Generate a title: short, catchy and descriptive.
3. Write a detailed description: expand on the artisan's input into an engaging marketing description. Highlight the craftsmanship, materials and potential uses.
4. Craft a cultural story: a short, engaging story about the product's cultural significance, the artisan's journey or the craft's history.
5. Suggest tags: a comma-separated list of popular and trending tags or keywords that would increase visibility. Do not include the '#' symbol.
6. Suggest a price: based on the product's materials, complexity and type, a reasonable selling price in Indian Rupees (e.g. ₹1,499), prefaced with a short disclaimer that it is only a suggestion.
7. Language: generate all content in the specified language: {{ language }}.
8. Target audience: keep the tone and style appropriate for: {{ target_audience }}.

Inputs:
- Product photo: {{ photo }}
- Artisan's description: {{ description }}
- Language: {{ language }}
- Target audience: {{ target_audience }}
""",
)

CULTURAL_INSIGHTS_PROMPT = PromptTemplate(
    name="getCulturalInsights",
    source="""\
You are an expert in cultural heritage and history. Provide detailed and engaging cultural insights about the following craft, including its origins and history. Answer in {{ language }}.

Craft: {{ craft_name }}
""",
)

TRANSCRIPTION_PROMPT = PromptTemplate(
    name="transcribeAudio",
    source="Transcribe the following audio recording to text: {{ audio }}",
)

CULTURAL_NARRATIVE_PROMPT = PromptTemplate(
    name="createCulturalNarrative",
    source="""\
You are a storytelling assistant helping artisans create engaging cultural narratives.
Convert the artisan's voice recording transcription into a cultural narrative in the specified language.
Transcription: {{ transcription }}
Language: {{ language }}
Narrative:""",
)

STORY_TRANSCRIPTION_PROMPT = PromptTemplate(
    name="transcribeStoryAudio",
    source="{{ audio }}Transcribe the following audio recording. The language is {{ language }}.",
)

STORY_PROMPT = PromptTemplate(
    name="createStoryFromAudio",
    source="""\
You are a masterful storyteller who specializes in cultural narratives.
An artisan has provided the following text, which was transcribed from their voice.
Your task is to transform this raw transcription into a beautiful, engaging, and culturally rich story.
The story should capture the essence of the artisan's message, their craft, and their heritage.
Write the story in the following language: {{ language }}.

Transcription:
{{ transcription }}
""",
)

PHOTO_ANALYSIS_PROMPT = PromptTemplate(
    name="analyzeVerificationPhoto",
    source="""\
Analyze the background of this user photo to identify clues about their location (e.g. landmarks, architecture, environment type). Provide a brief, one-sentence summary.

Photo: {{ photo }}""",
)

VERIFICATION_PROMPT = PromptTemplate(
    name="verifyArtisanIdentity",
    source="""\
You are a verification agent for an artisan marketplace called ArtVaani. Your job is to assess if an artisan's location is genuine based on three pieces of information: their declared city, their location from their device's GPS, and an AI analysis of a live photo they just took.

Inputs:
1. Declared city (entered in the artisan's profile): `{{ declared_city }}`
2. Resolved GPS city (from the device's GPS coordinates): `{{ resolved_city }}`
3. Live photo analysis (description of the photo's surroundings): `{{ photo_analysis }}`

Your task:
Compare the declared city and the resolved GPS city.
- If they are the same or obviously refer to the same major metropolitan area (e.g. "Gurgaon" and "New Delhi"), the status is "verified".
- If the cities are different but in the same state or are well-known neighboring cities (e.g. "Pune" and "Mumbai"), the status is "flagged". This requires manual review. Provide a brief reason.
- If the cities are in different states or very far apart (e.g. "Kolkata" and "Bengaluru"), the status is "mismatch". Provide a brief reason.

Use the live photo analysis to add context, but base your primary decision on the city comparison.
Report 'status', 'resolvedCity' and 'mismatchReason' (when the status is not "verified").
""",
)
