"""ArtVaani command line.

One command per AI flow plus `languages` and the `doctor` sub-app. The CLI
only parses options, reads media files and renders results; every flow lives
in `core.services`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Coroutine

import typer
from pydantic import BaseModel
from rich.console import Console

from adapters.ai_model import OpenAICompatibleModel
from adapters.geocoding import NominatimGeocoder
from adapters.json_exporter import export_result_json
from cli import doctor
from cli.ui_components import (
    build_error_panel,
    build_insights_panel,
    build_languages_table,
    build_listing_panel,
    build_narrative_panel,
    build_story_panel,
    build_verification_panel,
    format_stage,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import FlowError
from core.domain.language import Language
from core.domain.models import MediaReference, VerificationStage
from core.interfaces.generative_model import GenerativeModel
from core.interfaces.geocoder import Geocoder
from core.logging_setup import configure_logging
from core.services import (
    VerificationHooks,
    create_cultural_narrative,
    create_story_from_audio,
    generate_product_listing,
    get_cultural_insights,
    verify_artisan_identity,
)


app = typer.Typer(no_args_is_help=True, help="ArtVaani AI flows for artisans.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def build_model(settings: AppSettings) -> GenerativeModel:
    return OpenAICompatibleModel.from_settings(settings)


def build_geocoder(settings: AppSettings) -> Geocoder:
    return NominatimGeocoder(settings)


def _read_media(path: Path) -> MediaReference:
    try:
        return MediaReference.from_path(path)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"{path}: {exc}") from exc


def _language(value: Language | None, settings: AppSettings) -> str:
    return (value or settings.default_language).value


def _run(coro_factory: Any) -> Any:
    """Run one flow; FlowError -> red panel and exit code 1."""

    try:
        return asyncio.run(coro_factory())
    except FlowError as exc:
        _console.print(build_error_panel(exc))
        raise typer.Exit(code=1) from exc


def _emit(result: BaseModel, *, as_json: bool, output: Path | None, panel: Any) -> None:
    if output is not None:
        path = export_result_json(result=result, output_path=output)
        _console.print(f"[green]Saved:[/green] {path}")
    if as_json:
        _console.print_json(result.model_dump_json(by_alias=True))
    else:
        _console.print(panel)


_JSON_OPTION = typer.Option(False, "--json", help="Print the raw result as JSON.")
_OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Also write the result to a JSON file.")
_LANGUAGE_OPTION = typer.Option(None, "--language", "-l", help="Output language (default from settings).")


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (DEBUG, INFO, WARNING...)."),
    log_file: Path = typer.Option(None, "--log-file", help="Also write logs to this file."),
    banner: bool = typer.Option(False, "--banner", help="Show the welcome banner."),
) -> None:
    settings = AppSettings()
    configure_logging(log_level or settings.log_level, log_file=log_file)
    if banner:
        print_banner(_console)


@app.command()
def listing(
    photo: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Product photo."),
    description: str = typer.Option(..., "--description", "-d", help="What the artisan says about the product."),
    audience: str = typer.Option(..., "--audience", "-a", help="Target audience."),
    language: Language = _LANGUAGE_OPTION,
    as_json: bool = _JSON_OPTION,
    output: Path = _OUTPUT_OPTION,
) -> None:
    """Generate a complete product listing from a photo and a description."""

    settings = AppSettings()
    media = _read_media(photo)

    def flow() -> Coroutine[Any, Any, Any]:
        return generate_product_listing(
            build_model(settings),
            photo=media,
            description=description,
            language=_language(language, settings),
            target_audience=audience,
        )

    result = _run(flow)
    _emit(result, as_json=as_json, output=output, panel=build_listing_panel(result))


@app.command()
def insights(
    craft: str = typer.Argument(..., help="Craft name (e.g. 'Madhubani painting')."),
    language: Language = _LANGUAGE_OPTION,
    as_json: bool = _JSON_OPTION,
    output: Path = _OUTPUT_OPTION,
) -> None:
    """Origins and history of a craft."""

    settings = AppSettings()

    def flow() -> Coroutine[Any, Any, Any]:
        return get_cultural_insights(build_model(settings), craft_name=craft, language=_language(language, settings))

    result = _run(flow)
    _emit(result, as_json=as_json, output=output, panel=build_insights_panel(craft, result))


@app.command()
def narrative(
    audio: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Voice recording."),
    language: Language = _LANGUAGE_OPTION,
    as_json: bool = _JSON_OPTION,
    output: Path = _OUTPUT_OPTION,
) -> None:
    """Turn a voice recording into a cultural narrative."""

    settings = AppSettings()
    media = _read_media(audio)

    def flow() -> Coroutine[Any, Any, Any]:
        return create_cultural_narrative(build_model(settings), audio=media, language=_language(language, settings))

    result = _run(flow)
    _emit(result, as_json=as_json, output=output, panel=build_narrative_panel(result))


@app.command()
def story(
    audio: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Voice recording."),
    language: Language = _LANGUAGE_OPTION,
    as_json: bool = _JSON_OPTION,
    output: Path = _OUTPUT_OPTION,
) -> None:
    """Transcribe a voice recording and write a story from it."""

    settings = AppSettings()
    media = _read_media(audio)

    def flow() -> Coroutine[Any, Any, Any]:
        return create_story_from_audio(build_model(settings), audio=media, language=_language(language, settings))

    result = _run(flow)
    _emit(result, as_json=as_json, output=output, panel=build_story_panel(result))


@app.command()
def verify(
    photo: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Live photo."),
    lat: float = typer.Option(..., "--lat", help="Current latitude."),
    lon: float = typer.Option(..., "--lon", help="Current longitude."),
    city: str = typer.Option(..., "--city", help="City declared in the artisan profile."),
    concurrent: bool = typer.Option(False, "--concurrent", help="Geocode and analyze the photo in parallel."),
    as_json: bool = _JSON_OPTION,
    output: Path = _OUTPUT_OPTION,
) -> None:
    """Verify an artisan's location against their declared city."""

    settings = AppSettings()
    media = _read_media(photo)

    def on_stage(stage: VerificationStage) -> None:
        if not as_json:
            _console.print(format_stage(stage))

    def flow() -> Coroutine[Any, Any, Any]:
        return verify_artisan_identity(
            build_model(settings),
            build_geocoder(settings),
            photo=media,
            latitude=lat,
            longitude=lon,
            declared_city=city,
            hooks=VerificationHooks(stage=on_stage),
            concurrent=concurrent,
        )

    result = _run(flow)
    _emit(result, as_json=as_json, output=output, panel=build_verification_panel(city, result))


@app.command()
def languages() -> None:
    """List the supported output languages."""

    _console.print(build_languages_table())


def run() -> None:
    app()
