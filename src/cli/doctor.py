"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

PRESETS: dict[str, dict[str, str]] = {
    "gemini": {
        "ARTVAANI_AI_BASE_URL": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "ARTVAANI_AI_MODEL": "gemini-2.0-flash",
    },
    "openai": {"ARTVAANI_AI_BASE_URL": "https://api.openai.com/v1", "ARTVAANI_AI_MODEL": "gpt-4o-mini"},
    "openrouter": {"ARTVAANI_AI_BASE_URL": "https://openrouter.ai/api/v1", "ARTVAANI_AI_MODEL": "google/gemini-2.0-flash-001"},
    "ollama": {"ARTVAANI_AI_BASE_URL": "http://localhost:11434/v1", "ARTVAANI_AI_MODEL": "llava"},
}


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="ArtVaani Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.ai_api_key:
        table.add_row("AI key", "OK", "Remote AI enabled")
    else:
        table.add_row("AI key", "MISSING", "Run `artvaani doctor setup-ai` or set ARTVAANI_AI_API_KEY")
    table.add_row("AI base_url", "OK", settings.ai_base_url)
    table.add_row("AI model", "OK", settings.ai_model)
    table.add_row("Default language", "OK", settings.default_language.label())

    ok_ai, detail_ai = asyncio.run(_check_http(settings.ai_base_url, settings))
    table.add_row("AI endpoint", "OK" if ok_ai else "FAIL", detail_ai)

    ok_geo, detail_geo = asyncio.run(_check_http(settings.geocoding_url, settings))
    table.add_row("Geocoding endpoint", "OK" if ok_geo else "FAIL", detail_geo)

    _console.print(table)

    if not settings.ai_api_key:
        _console.print("\n[yellow]Note:[/yellow] every AI flow fails with 'model unavailable' until a key is set.")


@app.command(name="setup-ai")
def setup_ai() -> None:
    """Interactive AI setup (stores config in the user config .env)."""

    provider = typer.prompt(
        "AI provider",
        default="gemini",
        show_default=True,
    ).strip().lower()

    values = PRESETS.get(provider, {}).copy()
    if not values:
        _console.print("[yellow]Unknown provider preset. You can still enter custom values.[/yellow]")

    base_url = typer.prompt("AI base URL", default=values.get("ARTVAANI_AI_BASE_URL", ""), show_default=True).strip()
    model = typer.prompt("AI model", default=values.get("ARTVAANI_AI_MODEL", ""), show_default=True).strip()
    api_key = typer.prompt("AI API key", hide_input=True, confirmation_prompt=False).strip()

    if not base_url or not model:
        raise typer.BadParameter("base_url and model are required")

    env_path = write_user_env_vars(
        {
            "ARTVAANI_AI_BASE_URL": base_url,
            "ARTVAANI_AI_MODEL": model,
            "ARTVAANI_AI_API_KEY": api_key,
        }
    )

    _console.print(f"[green]Saved AI config to:[/green] {env_path}")
