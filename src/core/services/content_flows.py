"""Content-generation flows for artisans.

- `generate_product_listing`: photo + description -> complete listing.
- `get_cultural_insights`: craft name -> origins and history.
- `create_cultural_narrative`: voice recording -> transcription -> narrative.
- `create_story_from_audio`: voice recording -> transcription + story.

Each function validates its input before touching the network and receives
the hosted model explicitly (no module-level client).
"""

from __future__ import annotations

import logging
from typing import Any

from core.domain.errors import EmptyResultError
from core.domain.models import (
    CulturalInsights,
    CulturalInsightsRequest,
    CulturalNarrative,
    CulturalNarrativeRequest,
    NarrativeStepRequest,
    ProductListing,
    ProductListingRequest,
    StoryCreation,
    StoryCreationRequest,
    StoryText,
    Transcription,
    TranscriptionRequest,
)
from core.domain.prompts import (
    CULTURAL_INSIGHTS_PROMPT,
    CULTURAL_NARRATIVE_PROMPT,
    PRODUCT_LISTING_PROMPT,
    STORY_PROMPT,
    STORY_TRANSCRIPTION_PROMPT,
    TRANSCRIPTION_PROMPT,
)
from core.domain.validation import validate_request
from core.interfaces.generative_model import GenerativeModel
from core.services.flow_runner import present, run_structured_step, run_text_step

logger = logging.getLogger(__name__)


async def generate_product_listing(
    model: GenerativeModel,
    *,
    photo: Any = None,
    description: str | None = None,
    language: str | None = "en",
    target_audience: str | None = None,
) -> ProductListing:
    """Generate title, description, story, hashtags and a suggested price."""

    request = validate_request(
        ProductListingRequest,
        present(photo=photo, description=description, language=language, target_audience=target_audience),
        step=PRODUCT_LISTING_PROMPT.name,
    )
    logger.info("Generating product listing (language=%s)", request.language)
    return await run_structured_step(model, PRODUCT_LISTING_PROMPT, request, ProductListing)


async def get_cultural_insights(
    model: GenerativeModel,
    *,
    craft_name: str | None = None,
    language: str | None = "en",
) -> CulturalInsights:
    request = validate_request(
        CulturalInsightsRequest,
        present(craft_name=craft_name, language=language),
        step=CULTURAL_INSIGHTS_PROMPT.name,
    )
    logger.info("Fetching cultural insights for %r (language=%s)", request.craft_name, request.language)
    return await run_structured_step(model, CULTURAL_INSIGHTS_PROMPT, request, CulturalInsights)


async def create_cultural_narrative(
    model: GenerativeModel,
    *,
    audio: Any = None,
    language: str | None = None,
) -> CulturalNarrative:
    """Transcribe a voice recording, then turn the text into a cultural narrative.

    An empty transcription ends the flow before the narrative call is made.
    """

    request = validate_request(
        CulturalNarrativeRequest,
        present(audio=audio, language=language),
        step=CULTURAL_NARRATIVE_PROMPT.name,
    )

    logger.info("Converting audio to text")
    transcription = await run_structured_step(
        model,
        TRANSCRIPTION_PROMPT,
        TranscriptionRequest(audio=request.audio, language=request.language),
        Transcription,
    )
    text = transcription.text.strip()
    if not text:
        logger.error("%s: model returned an empty transcription", TRANSCRIPTION_PROMPT.name)
        raise EmptyResultError(
            "transcription failed: could not convert audio to text",
            step=TRANSCRIPTION_PROMPT.name,
        )
    logger.debug("Transcription: %d characters", len(text))

    logger.info("Generating cultural narrative (language=%s)", request.language)
    narrative = await run_structured_step(
        model,
        CULTURAL_NARRATIVE_PROMPT,
        NarrativeStepRequest(transcription=text, language=request.language),
        CulturalNarrative,
    )
    if not narrative.narrative.strip():
        raise EmptyResultError("Could not generate cultural narrative.", step=CULTURAL_NARRATIVE_PROMPT.name)
    return narrative


async def create_story_from_audio(
    model: GenerativeModel,
    *,
    audio: Any = None,
    language: str | None = None,
) -> StoryCreation:
    """Transcribe a voice recording (plain text) and write a story from it.

    Returns both the transcription and the story.
    """

    request = validate_request(
        StoryCreationRequest,
        present(audio=audio, language=language),
        step=STORY_PROMPT.name,
    )

    transcription = await run_text_step(
        model,
        STORY_TRANSCRIPTION_PROMPT,
        TranscriptionRequest(audio=request.audio, language=request.language),
    )
    if not transcription:
        logger.error("%s: model returned an empty transcription", STORY_TRANSCRIPTION_PROMPT.name)
        raise EmptyResultError("Audio transcription failed.", step=STORY_TRANSCRIPTION_PROMPT.name)

    story = await run_structured_step(
        model,
        STORY_PROMPT,
        NarrativeStepRequest(transcription=transcription, language=request.language),
        StoryText,
    )
    if not story.story.strip():
        raise EmptyResultError("Story generation failed.", step=STORY_PROMPT.name)

    return StoryCreation(transcription=transcription, story=story.story)
