"""CLI entry point for Conflux.

Provides commands:
  - workspace: Create and list workspaces
  - people: Add and list people in a workspace
  - orgs: Add and list organizations in a workspace
  - capture: Extract entities from notes, review matches, and commit
  - config: Manage the Mistral API key

Defaults for the database path, model, temperature, workspace and
author come from config/capture_config.json (see --config).
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import keyring
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from conflux.config import KEY_NAME, SERVICE_NAME, load_capture_config
from conflux.database import Database
from conflux.models import AppState

if TYPE_CHECKING:
    from conflux.services.capture import CaptureSession

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Conflux - Capture interactions and keep your relationship graph tidy",
    rich_markup_mode="rich",
)
console = Console()

workspace_app = typer.Typer(help="Create and list workspaces")
app.add_typer(workspace_app, name="workspace")

people_app = typer.Typer(help="Manage people in a workspace")
app.add_typer(people_app, name="people")

orgs_app = typer.Typer(help="Manage organizations in a workspace")
app.add_typer(orgs_app, name="orgs")

config_app = typer.Typer(help="Manage configuration (API keys)")
app.add_typer(config_app, name="config")

WorkspaceOption = Annotated[
    str | None,
    typer.Option("--workspace", "-w", help="Workspace id (defaults to workspace_id in config)"),
]


@app.callback()
def app_callback(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Capture config JSON (default: config/capture_config.json)"),
    ] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database (overrides config)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Initialize shared state for all commands."""
    if verbose:
        handler = RichHandler(console=console, show_path=False)
        root = logging.getLogger("conflux")
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)

    config = load_capture_config(config_path)
    if db_path is not None:
        config.db_path = db_path
    ctx.obj = AppState(db_path=str(config.db_path), verbose=verbose, config=config)


def get_state(ctx: typer.Context) -> AppState:
    """Type-safe accessor for AppState from Typer context."""
    return ctx.obj


def _resolve_workspace(db: Database, state: AppState, workspace_id: str | None) -> str:
    """Pick the explicit or configured workspace and check that it exists."""
    workspace_id = workspace_id or state.config.workspace_id
    if not workspace_id:
        console.print(
            "[red]Error:[/red] No workspace given. "
            "Pass --workspace or set workspace_id in the capture config."
        )
        raise typer.Exit(code=1)
    if db.get_workspace(workspace_id) is None:
        console.print(f"[red]Error:[/red] Workspace not found: {workspace_id}")
        raise typer.Exit(code=1)
    return workspace_id


# ---- workspace ----


@workspace_app.command("create")
def workspace_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Workspace name")],
) -> None:
    """Create a workspace and print its id."""
    with Database(get_state(ctx).db_path) as db:
        workspace_id = db.create_workspace(name)
    console.print(f"[green]Created workspace[/green] {name}: [bold]{workspace_id}[/bold]")


@workspace_app.command("list")
def workspace_list(ctx: typer.Context) -> None:
    """List all workspaces."""
    with Database(get_state(ctx).db_path) as db:
        rows = db.list_workspaces()

    if not rows:
        console.print("[dim]No workspaces yet. Run 'conflux workspace create NAME'.[/dim]")
        return

    table = Table(title="Workspaces")
    table.add_column("Name", style="bold cyan")
    table.add_column("Id")
    for row in rows:
        table.add_row(row["name"], row["id"])
    console.print(table)


# ---- people ----


@people_app.command("add")
def people_add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Full name")],
    workspace: WorkspaceOption = None,
    title: Annotated[str | None, typer.Option("--title", "-t", help="Job title")] = None,
) -> None:
    """Add a person to a workspace."""
    state = get_state(ctx)
    with Database(state.db_path) as db:
        workspace_id = _resolve_workspace(db, state, workspace)
        person_id = db.create_person(workspace_id, name, title=title)
    console.print(f"[green]Added[/green] {name}: [bold]{person_id}[/bold]")


@people_app.command("list")
def people_list(ctx: typer.Context, workspace: WorkspaceOption = None) -> None:
    """List people in a workspace."""
    state = get_state(ctx)
    with Database(state.db_path) as db:
        workspace_id = _resolve_workspace(db, state, workspace)
        people = db.list_people(workspace_id)

    table = Table(title=f"People ({len(people)})")
    table.add_column("Name", style="bold cyan")
    table.add_column("Title")
    table.add_column("Id", style="dim")
    for person in people:
        table.add_row(person.full_name, person.title or "", person.id)
    console.print(table)


# ---- organizations ----


@orgs_app.command("add")
def orgs_add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Organization name")],
    workspace: WorkspaceOption = None,
) -> None:
    """Add an organization to a workspace."""
    state = get_state(ctx)
    with Database(state.db_path) as db:
        workspace_id = _resolve_workspace(db, state, workspace)
        org_id = db.create_organization(workspace_id, name)
    console.print(f"[green]Added[/green] {name}: [bold]{org_id}[/bold]")


@orgs_app.command("list")
def orgs_list(ctx: typer.Context, workspace: WorkspaceOption = None) -> None:
    """List organizations in a workspace."""
    state = get_state(ctx)
    with Database(state.db_path) as db:
        workspace_id = _resolve_workspace(db, state, workspace)
        orgs = db.list_organizations(workspace_id)

    table = Table(title=f"Organizations ({len(orgs)})")
    table.add_column("Name", style="bold cyan")
    table.add_column("Id", style="dim")
    for org in orgs:
        table.add_row(org.name, org.id)
    console.print(table)


# ---- capture ----


def _render_matches(session: CaptureSession) -> None:
    table = Table(title=f"Detected Entities ({len(session.editor)})")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Extracted", style="bold")
    table.add_column("Match")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Title / Org")
    table.add_column("Action", style="cyan")

    for i, decision in enumerate(session.editor.decisions):
        result = decision.match_result
        match = result.match
        existing = match.existing_name or ""
        extras = " @ ".join(part for part in (result.title, result.organization_name) if part)
        table.add_row(
            str(i),
            result.type,
            result.extracted_name,
            f"{match.type.value} {existing}".strip(),
            f"{match.score:.0%}",
            f"{result.confidence:.0%}",
            extras,
            decision.action.value,
        )
    console.print(table)


def _prompt_decisions(session: CaptureSession) -> None:
    """Walk each decision and let the user override it.

    Besides the action, people can opt in or out of the title update and
    the affiliation suggested by extraction.
    """
    for i, decision in enumerate(session.editor.decisions):
        result = decision.match_result
        choices = ["create", "skip"]
        if result.match.existing_id:
            choices.insert(0, "link")

        answer = typer.prompt(
            f"[{i}] {result.type} {result.extracted_name!r} ({'/'.join(choices)})",
            default=decision.action.value,
        ).strip().lower()
        if answer not in choices:
            console.print(f"[yellow]Unknown choice {answer!r}, keeping {decision.action.value}[/yellow]")
            answer = decision.action.value

        changes: dict[str, object] = {"action": answer}
        if answer == "link":
            changes["linked_id"] = decision.linked_id or result.match.existing_id
        elif answer == "create":
            changes["new_name"] = typer.prompt("  Name", default=decision.display_name)

        if answer != "skip" and result.type == "person":
            if result.title:
                changes["update_title"] = typer.confirm(
                    f"  Update title to {result.title!r}?", default=decision.update_title
                )
            if result.organization_name:
                changes["create_affiliation"] = typer.confirm(
                    f"  Create affiliation with {result.organization_name!r}?",
                    default=decision.create_affiliation,
                )
        session.editor.update(i, **changes)


@app.command()
def capture(
    ctx: typer.Context,
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Notes or transcript file"),
    ],
    workspace: WorkspaceOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Accept suggested actions without prompting"),
    ] = False,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Mistral model for extraction (overrides config)"),
    ] = None,
) -> None:
    """Extract people and organizations from notes, review, and commit.

    Suggested actions: exact matches link, confident new mentions are
    created, everything else is skipped until you choose otherwise.
    """
    from conflux.config import get_api_key
    from conflux.extraction.client import (
        CreditExhaustedException,
        MistralClient,
        RateLimitException,
    )
    from conflux.services.capture import CaptureService

    state = get_state(ctx)
    config = state.config
    with Database(state.db_path) as db:
        workspace_id = _resolve_workspace(db, state, workspace)

    try:
        api_key = get_api_key()
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    text = file.read_text()
    extractor = MistralClient(api_key, model=model or config.model, temperature=config.temperature)
    service = CaptureService(state.db_path, extractor, created_by=config.created_by)

    try:
        with console.status("Extracting entities..."):
            session = asyncio.run(service.capture(text, workspace_id))
    except (CreditExhaustedException, RateLimitException, ValueError) as e:
        console.print(f"[red]Extraction failed:[/red] {e}")
        raise typer.Exit(code=1)

    if session.summary:
        console.print(Panel(session.summary, title="Summary", border_style="cyan"))
    _render_matches(session)

    if not yes:
        _prompt_decisions(session)
        if not typer.confirm("Save interaction?"):
            console.print("[dim]Discarded; nothing was written.[/dim]")
            raise typer.Exit()

    try:
        result = asyncio.run(service.commit(session))
    except sqlite3.Error as e:
        console.print(f"[red]Commit failed:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(
        f"[green]Saved interaction[/green] [bold]{result.interaction_id}[/bold] "
        f"with {len(result.participant_ids)} participant(s)"
    )
    if result.failures:
        table = Table(title="Failures", border_style="red")
        table.add_column("#", justify="right")
        table.add_column("Entity")
        table.add_column("Step")
        table.add_column("Error")
        for failure in result.failures:
            table.add_row(str(failure.index), failure.entity_name, failure.step, failure.error)
        console.print(table)
        raise typer.Exit(code=1)


# ---- config ----


@config_app.command("set-api-key")
def set_api_key(
    key: Annotated[str, typer.Argument(help="Mistral API key")],
) -> None:
    """Store the Mistral API key in the system keyring."""
    keyring.set_password(SERVICE_NAME, KEY_NAME, key)
    console.print(f"[green]API key stored in system keyring[/green] (service: {SERVICE_NAME})")


@config_app.command("get-api-key")
def show_api_key() -> None:
    """Show the stored Mistral API key (masked)."""
    api_key = keyring.get_password(SERVICE_NAME, KEY_NAME)
    if not api_key:
        console.print(
            "[yellow]No API key stored.[/yellow] "
            "Set it with: [bold]conflux config set-api-key YOUR_KEY[/bold]"
        )
        raise typer.Exit(code=1)
    masked = api_key[:4] + "..." + api_key[-4:] if len(api_key) > 8 else "****"
    console.print(f"API key: [bold]{masked}[/bold]")


if __name__ == "__main__":
    app()
