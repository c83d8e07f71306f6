import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cli import main as cli_main
from core.domain.errors import ModelUnavailableError

runner = CliRunner()


@pytest.fixture
def use_model(monkeypatch, scripted_model):
    def install(*responses):
        model = scripted_model(*responses)
        monkeypatch.setattr(cli_main, "build_model", lambda settings: model)
        return model

    return install


@pytest.fixture
def photo_file(tmp_path: Path) -> Path:
    path = tmp_path / "elephant.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 fake jpeg")
    return path


def test_languages_lists_supported_tags() -> None:
    result = runner.invoke(cli_main.app, ["languages"])
    assert result.exit_code == 0
    assert "hi-IN" in result.output
    assert "Tamil" in result.output


def test_insights_json_output(use_model) -> None:
    model = use_model({"culturalInsights": "Warli art comes from Maharashtra."})

    result = runner.invoke(cli_main.app, ["--log-level", "WARNING", "insights", "Warli", "--language", "mr-IN", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"culturalInsights": "Warli art comes from Maharashtra."}
    assert "Answer in mr-IN." in model.calls[0][0].text


def test_listing_writes_output_file(use_model, photo_file: Path, tmp_path: Path) -> None:
    use_model(
        {
            "title": "Rosewood Elephant",
            "description": "Carved by hand.",
            "story": "From Mysore.",
            "hashtags": "#handmade, #wood",
            "suggestedPrice": "₹2,499",
        }
    )
    out = tmp_path / "out" / "listing.json"

    result = runner.invoke(
        cli_main.app,
        ["listing", str(photo_file), "-d", "wooden elephant", "-a", "collectors", "-o", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert "Rosewood Elephant" in result.output
    saved = json.loads(out.read_text(encoding="utf-8"))
    assert saved["suggestedPrice"] == "₹2,499"
    assert saved["hashtags"] == "handmade, wood"


def test_flow_error_exits_with_code_one(use_model) -> None:
    use_model(ModelUnavailableError("model unavailable: connection failed", step="getCulturalInsights"))

    result = runner.invoke(cli_main.app, ["insights", "Bidriware"])

    assert result.exit_code == 1
    assert "Flow failed" in result.output
    assert "model unavailable" in result.output


def test_verify_reports_stages(use_model, monkeypatch, static_geocoder, photo_file: Path) -> None:
    use_model(
        {"analysis": "Sea-facing promenade."},
        {"status": "flagged", "resolvedCity": "Pune", "mismatchReason": "Neighbouring city."},
    )
    geocoder = static_geocoder("Pune")
    monkeypatch.setattr(cli_main, "build_geocoder", lambda settings: geocoder)

    result = runner.invoke(
        cli_main.app,
        ["verify", str(photo_file), "--lat", "18.52", "--lon", "73.85", "--city", "Mumbai"],
    )

    assert result.exit_code == 0, result.output
    assert "resolving-location" in result.output
    assert "FLAGGED" in result.output
    assert geocoder.calls == [(18.52, 73.85)]


def test_unreadable_media_type_is_rejected(use_model, tmp_path: Path) -> None:
    model = use_model()
    path = tmp_path / "blob.unknownext"
    path.write_bytes(b"data")

    result = runner.invoke(cli_main.app, ["story", str(path)])

    assert result.exit_code != 0
    assert model.calls == []
