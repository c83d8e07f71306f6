"""Language utilities for ArtVaani.

This module centralizes the output languages offered by the marketplace.
Flow requests accept any non-empty language tag (the hosted model is the
judge of what it can write), but CLI choices, defaults and labels are driven
from here so there is a single source of truth.
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Supported natural-language choices for generated content."""

    ENGLISH = "en"
    HINDI = "hi-IN"
    BENGALI = "bn-IN"
    TELUGU = "te-IN"
    MARATHI = "mr-IN"
    TAMIL = "ta-IN"
    KANNADA = "ka-IN"

    @classmethod
    def from_tag(cls, tag: str) -> "Language | None":
        """Resolve a tag like `hi-IN`, `hi` or `HI-in` to a known language."""

        value = (tag or "").strip().lower()
        if not value:
            return None
        for lang in cls:
            if lang.value.lower() == value:
                return lang
        primary = value.split("-", 1)[0]
        for lang in cls:
            if lang.value.lower().split("-", 1)[0] == primary:
                return lang
        return None

    def label(self) -> str:
        """Human readable label for prompts and logging."""

        return _LABELS[self]


_LABELS: dict[Language, str] = {
    Language.ENGLISH: "English",
    Language.HINDI: "Hindi",
    Language.BENGALI: "Bengali",
    Language.TELUGU: "Telugu",
    Language.MARATHI: "Marathi",
    Language.TAMIL: "Tamil",
    Language.KANNADA: "Kannada",
}
