"""Rich UI components for the CLI.

Keeps command logic apart from presentation: each flow result has its own
panel builder.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import FlowError, FlowValidationError
from core.domain.language import Language
from core.domain.models import (
    CulturalInsights,
    CulturalNarrative,
    ProductListing,
    StoryCreation,
    VerificationResult,
    VerificationStage,
    VerificationStatus,
)

_STATUS_STYLES = {
    VerificationStatus.VERIFIED: "green",
    VerificationStatus.FLAGGED: "yellow",
    VerificationStatus.MISMATCH: "red",
}


def print_banner(console: Console) -> None:
    title = Text("ArtVaani", style="bold magenta")
    subtitle = Text("Listings • Cultural stories • Artisan verification", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="magenta", padding=(1, 4)))


def build_listing_panel(listing: ProductListing) -> Panel:
    body = Text()
    body.append(listing.title.strip() + "\n\n", style="bold")
    body.append(listing.description.strip() + "\n\n")
    body.append("Story\n", style="bold")
    body.append(listing.story.strip() + "\n\n")
    body.append("Tags: ", style="bold")
    body.append(", ".join(listing.tags) + "\n")
    body.append("Suggested price: ", style="bold")
    body.append(listing.suggested_price.strip(), style="green")
    return Panel(body, title=Text("Product listing", style="bold cyan"), border_style="cyan")


def build_insights_panel(craft_name: str, insights: CulturalInsights) -> Panel:
    return Panel(
        Text(insights.cultural_insights.strip()),
        title=Text(f"Cultural insights: {craft_name}", style="bold yellow"),
        border_style="yellow",
    )


def build_narrative_panel(narrative: CulturalNarrative) -> Panel:
    return Panel(
        Text(narrative.narrative.strip()),
        title=Text("Cultural narrative", style="bold yellow"),
        border_style="yellow",
    )


def build_story_panel(story: StoryCreation) -> Panel:
    body = Text()
    body.append("Transcription\n", style="bold")
    body.append(story.transcription.strip() + "\n\n", style="dim")
    body.append("Story\n", style="bold")
    body.append(story.story.strip())
    return Panel(body, title=Text("Story from audio", style="bold yellow"), border_style="yellow")


def build_verification_panel(declared_city: str, result: VerificationResult) -> Panel:
    style = _STATUS_STYLES[result.status]
    body = Text()
    body.append("Status: ", style="bold")
    body.append(result.status.value.upper() + "\n", style=f"bold {style}")
    body.append(f"Declared city: {declared_city}\n")
    body.append(f"Resolved city: {result.resolved_city}\n")
    if result.mismatch_reason:
        body.append(f"\nReason: {result.mismatch_reason}", style=style)
    return Panel(body, title=Text("Artisan verification", style=f"bold {style}"), border_style=style)


def format_stage(stage: VerificationStage) -> str:
    return f"[dim]→ {stage.value}[/dim]"


def build_error_panel(exc: FlowError) -> Panel:
    body = Text()
    body.append(f"{exc.message}\n", style="bold")
    if isinstance(exc, FlowValidationError):
        for name, reason in exc.problems.items():
            body.append(f"- {name}: {reason}\n")
    if exc.step:
        body.append(f"\nStep: {exc.step}", style="dim")
    body.append(f"\nKind: {exc.kind}", style="dim")
    return Panel(body, title=Text("Flow failed", style="bold red"), border_style="red")


def build_languages_table() -> Table:
    table = Table(title="Supported languages")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Language", style="white")
    for lang in Language:
        table.add_row(lang.value, lang.label())
    return table
