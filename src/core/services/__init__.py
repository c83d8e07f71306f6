"""AI flow orchestration (validate -> compose -> invoke -> unwrap)."""

from core.services.content_flows import (
    create_cultural_narrative,
    create_story_from_audio,
    generate_product_listing,
    get_cultural_insights,
)
from core.services.verification import VerificationHooks, VerificationTrace, verify_artisan_identity

__all__ = [
    "VerificationHooks",
    "VerificationTrace",
    "create_cultural_narrative",
    "create_story_from_audio",
    "generate_product_listing",
    "get_cultural_insights",
    "verify_artisan_identity",
]
