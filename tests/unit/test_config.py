from pathlib import Path

from core.config import AppSettings, write_user_env_vars
from core.domain.language import Language


def test_write_user_env_vars_merges_and_skips_none(tmp_path: Path) -> None:
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text("ARTVAANI_AI_MODEL='old-model'\n# comment\n", encoding="utf-8")

    write_user_env_vars(
        {"ARTVAANI_AI_API_KEY": "secret", "ARTVAANI_AI_MODEL": "gemini-2.0-flash", "ARTVAANI_LOG_LEVEL": None},
        env_path=env_path,
    )

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert lines[1:] == ["ARTVAANI_AI_API_KEY=secret", "ARTVAANI_AI_MODEL=gemini-2.0-flash"]


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("ARTVAANI_AI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("ARTVAANI_DEFAULT_LANGUAGE", "ta-IN")

    settings = AppSettings(_env_file=None)

    assert settings.ai_model == "gpt-4o-mini"
    assert settings.default_language is Language.TAMIL


def test_settings_defaults(monkeypatch) -> None:
    for name in ("ARTVAANI_AI_MODEL", "ARTVAANI_USER_AGENT", "ARTVAANI_AI_TEMPERATURE"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.user_agent == "ArtVaani-Verification/1.0"
    assert settings.ai_temperature == 0.4
    assert "nominatim" in settings.geocoding_url


def test_default_language_accepts_loose_tags(monkeypatch) -> None:
    monkeypatch.setenv("ARTVAANI_DEFAULT_LANGUAGE", "HI")

    settings = AppSettings(_env_file=None)

    assert settings.default_language is Language.HINDI
