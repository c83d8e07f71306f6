from __future__ import annotations

import base64
from typing import Any

import pytest

from core.domain.models import MediaReference

PHOTO_URI = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff\xe0 fake jpeg").decode("ascii")
AUDIO_URI = "data:audio/wav;base64," + base64.b64encode(b"RIFF fake wav").decode("ascii")


class ScriptedModel:
    """Stand-in for the hosted model: replays responses in order, records calls."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[Any, Any]] = []

    async def generate(self, prompt, *, output_schema=None):
        self.calls.append((prompt, output_schema))
        if not self.responses:
            raise AssertionError(f"unexpected model call for {prompt.name}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def step_names(self) -> list[str]:
        return [prompt.name for prompt, _ in self.calls]


class StaticGeocoder:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: list[tuple[float, float]] = []

    async def reverse(self, latitude: float, longitude: float) -> str:
        self.calls.append((latitude, longitude))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture
def photo_uri() -> str:
    return PHOTO_URI


@pytest.fixture
def audio_uri() -> str:
    return AUDIO_URI


@pytest.fixture
def photo(photo_uri: str) -> MediaReference:
    return MediaReference.model_validate(photo_uri)


@pytest.fixture
def scripted_model():
    return ScriptedModel


@pytest.fixture
def static_geocoder():
    return StaticGeocoder
