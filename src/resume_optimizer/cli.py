"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from resume_optimizer.clients.gateway import AnthropicGateway, ModelGateway
from resume_optimizer.config import AppConfig, load_config
from resume_optimizer.diff import PathFormatter, diff_documents
from resume_optimizer.diff.summary import summarize, visible_changes
from resume_optimizer.errors import GatewayError, PreconditionError, ResumeInputError
from resume_optimizer.export import EXPORTERS
from resume_optimizer.export.json_export import to_json
from resume_optimizer.parsers.jd_parser import load_jd_file
from resume_optimizer.parsers.resume_parser import (
    load_resume_file,
    parse_resume_json,
    parse_resume_text,
)
from resume_optimizer.storage.workspace_store import WorkspaceStore, mask_api_key
from resume_optimizer.workflow.session import OptimizationSession
from resume_optimizer.workflow.state import WorkflowState, WorkflowStatus

app = typer.Typer(
    name="resume-optimizer",
    help="Tailor a JSON resume to a job description with Claude.",
    no_args_is_help=True,
)
console = Console()

WORKSPACE_RESUME_ID = "workspace"


class ExportFormat(str, Enum):
    json = "json"
    docx = "docx"
    pdf = "pdf"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except ResumeInputError as exc:
        console.print(f"[red]{exc.message}[/red]")
        for error in exc.errors:
            console.print(f"  [red]- {error}[/red]")
        raise typer.Exit(1)
    except PreconditionError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _open_store(config: AppConfig) -> WorkspaceStore:
    return WorkspaceStore(config.storage.resolved_db_path)


def _api_key(store: WorkspaceStore) -> str | None:
    return os.environ.get("ANTHROPIC_API_KEY") or store.get_api_key()


def _build_gateway(config: AppConfig, store: WorkspaceStore, api_key: str | None = None) -> ModelGateway:
    """Gateway with config prompts, overridden by prompts saved in the workspace."""
    prompts = dataclasses.replace(config.prompts, **store.get_prompts())
    return AnthropicGateway.from_api_key(
        api_key or _api_key(store),
        models=config.llm,
        prompts=prompts,
    )


def _check_file(path: Path, label: str) -> None:
    if not path.exists():
        console.print(f"[red]{label} not found: {path}[/red]")
        raise typer.Exit(1)


def _exit_on_error(state: WorkflowState) -> None:
    if state.status is WorkflowStatus.ERROR:
        console.print(Panel(state.last_error or "Request failed", title="Error", style="red"))
        raise typer.Exit(1)


def _print_changes(state: WorkflowState, config: AppConfig) -> None:
    metrics = summarize(state.diff_items, state.metadata)
    if metrics:
        console.print(
            Panel(
                " | ".join(f"{m.label}: [bold]{m.value}[/bold]" for m in metrics),
                title="Optimization Results",
            )
        )
    if state.metadata and state.metadata.keywords_matched:
        console.print(f"[dim]Keywords: {', '.join(state.metadata.keywords_matched)}[/dim]")
    _print_table(state.diff_items, config)


def _print_table(diff_items, config: AppConfig) -> None:
    if not diff_items:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    formatter = PathFormatter(separator=config.diff.separator)
    rows, note = visible_changes(diff_items, config.diff.max_visible, formatter)
    table = Table(title=f"Changes ({len(diff_items)})", show_lines=True)
    table.add_column("Field", style="bold")
    table.add_column("Before", style="red")
    table.add_column("After", style="green")
    for row in rows:
        table.add_row(row.field, row.before, row.after)
    console.print(table)
    if note:
        console.print(f"[dim]{note}[/dim]")


def _spinner() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    )


@app.command()
def optimize(
    resume: Path = typer.Argument(None, help="Resume JSON file (defaults to the saved workspace resume)"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    adjust: list[str] = typer.Option(None, "--adjust", "-a", help="Follow-up edit instruction (repeatable)"),
    json_out: Path = typer.Option(None, "--json", help="Write the optimized resume as JSON"),
    docx_out: Path = typer.Option(None, "--docx", help="Write the optimized resume as DOCX"),
    pdf_out: Path = typer.Option(None, "--pdf", help="Write the optimized resume as PDF"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Optimize a resume for a job description, then apply adjustments."""
    _setup_logging(verbose)
    if resume is not None:
        _check_file(resume, "Resume file")
    _check_file(jd, "Job description file")

    config = load_config()
    store = _open_store(config)

    with _handle_errors():
        jd_text = load_jd_file(jd)
        store.save_job_description(jd_text)

        gateway = _build_gateway(config, store)
        if resume is None:
            session = OptimizationSession(gateway, on_change=store.persist, state=store.hydrate())
            if session.state.current is None:
                console.print("[red]No saved workspace resume. Pass a resume JSON file.[/red]")
                raise typer.Exit(1)
            resume_id = WORKSPACE_RESUME_ID
            console.print("[dim]Using the saved workspace resume[/dim]")
        else:
            session = OptimizationSession(gateway, on_change=store.persist)
            session.load_resume(load_resume_file(resume))
            resume_id = resume.stem
        original = session.state.current

        async def _run_all() -> WorkflowState:
            with _spinner() as progress:
                task = progress.add_task("Optimizing resume...", total=None)
                state = await session.optimize(jd_text)
                for i, instruction in enumerate(adjust or [], 1):
                    if state.status is WorkflowStatus.ERROR:
                        break
                    progress.update(task, description=f"Applying adjustment {i}...")
                    state = await session.adjust(instruction)
            return state

        state = asyncio.run(_run_all())

    _exit_on_error(state)
    _print_changes(state, config)
    store.save_resume(resume_id, original, state.current)
    console.print(f"[dim]Saved to history as {resume_id}[/dim]")

    for fmt, out in (("json", json_out), ("docx", docx_out), ("pdf", pdf_out)):
        if out is not None:
            EXPORTERS[fmt](state.current, out)
            console.print(f"[green]Saved {fmt.upper()}: {out}[/green]")


@app.command()
def convert(
    textfile: Path = typer.Argument(None, help="Resume as PDF, DOCX, TXT or MD (defaults to the last converted text)"),
    output: Path = typer.Option(None, "--output", "-o", help="Output JSON path (prints to stdout if omitted)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Convert a plain-text resume into structured resume JSON."""
    _setup_logging(verbose)
    if textfile is not None:
        _check_file(textfile, "Resume file")

    config = load_config()
    store = _open_store(config)

    with _handle_errors():
        if textfile is None:
            text = store.get_resume_text()
            if not text:
                console.print("[red]No saved resume text. Pass a resume file.[/red]")
                raise typer.Exit(1)
        else:
            text = parse_resume_text(textfile)
            store.save_resume_text(text)
        session = OptimizationSession(_build_gateway(config, store), on_change=store.persist)

        with _spinner() as progress:
            progress.add_task("Converting resume...", total=None)
            state = asyncio.run(session.convert(text))

    _exit_on_error(state)
    if output is None:
        console.print_json(to_json(state.current))
    else:
        EXPORTERS["json"](state.current, output)
        console.print(f"[green]Saved JSON: {output}[/green]")


@app.command()
def diff(
    before: Path = typer.Argument(help="Original resume JSON"),
    after: Path = typer.Argument(help="Updated resume JSON"),
) -> None:
    """Show field-level changes between two resume JSON files."""
    _check_file(before, "File")
    _check_file(after, "File")
    config = load_config()

    documents = []
    for path in (before, after):
        try:
            documents.append(json.loads(path.read_text(encoding="utf-8")))
        except json.JSONDecodeError as exc:
            console.print(f"[red]{path}: invalid JSON ({exc.msg}, line {exc.lineno})[/red]")
            raise typer.Exit(1)

    _print_table(diff_documents(*documents), config)


@app.command()
def validate(
    file: Path = typer.Argument(help="Resume JSON file"),
) -> None:
    """Normalize and validate a resume JSON file."""
    _check_file(file, "File")
    with _handle_errors():
        document = parse_resume_json(file.read_text(encoding="utf-8"))
    sections = document.get("sections", {})
    console.print(f"[green]Valid resume: {len(sections)} sections[/green]")


@app.command()
def export(
    file: Path = typer.Argument(help="Resume JSON file"),
    fmt: ExportFormat = typer.Option(ExportFormat.pdf, "--format", "-f", help="Output format"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file path"),
) -> None:
    """Export a resume JSON file as JSON, DOCX or PDF."""
    _check_file(file, "File")
    with _handle_errors():
        document = load_resume_file(file)
    EXPORTERS[fmt.value](document, output)
    console.print(f"[green]Saved {fmt.value.upper()}: {output}[/green]")


@app.command("check-key")
def check_key(
    key: str = typer.Option(None, "--key", help="API key to check (defaults to ANTHROPIC_API_KEY or the saved key)"),
    save: bool = typer.Option(False, "--save", help="Save the key to the workspace if it works"),
    forget: bool = typer.Option(False, "--forget", help="Remove the saved key and exit"),
) -> None:
    """Verify the Anthropic API key with a minimal request."""
    config = load_config()
    store = _open_store(config)
    if forget:
        store.remove_api_key()
        console.print("[green]Saved API key removed.[/green]")
        return

    api_key = key or _api_key(store)
    gateway = _build_gateway(config, store, api_key)

    if not gateway.has_credential:
        console.print("[red]No API key configured. Set ANTHROPIC_API_KEY or pass --key.[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(gateway.verify_credential())
    except GatewayError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]API key valid: {mask_api_key(api_key)}[/green]")
    if save:
        store.save_api_key(api_key)
        console.print("[dim]Key saved to workspace.[/dim]")


@app.command()
def history(
    show: str = typer.Option(None, "--show", help="Print the optimized JSON of a saved resume"),
    delete: str = typer.Option(None, "--delete", help="Delete a saved resume"),
) -> None:
    """List, show or delete resumes saved by past optimize runs."""
    config = load_config()
    store = _open_store(config)

    if delete:
        if store.get_resume(delete) is None:
            console.print(f"[red]No saved resume: {delete}[/red]")
            raise typer.Exit(1)
        store.delete_resume(delete)
        console.print(f"[green]Deleted {delete}[/green]")
        return

    if show:
        saved = store.get_resume(show)
        if saved is None:
            console.print(f"[red]No saved resume: {show}[/red]")
            raise typer.Exit(1)
        console.print_json(to_json(saved.optimized or saved.original))
        return

    saved_resumes = store.list_resumes()
    if not saved_resumes:
        console.print("[yellow]No saved resumes.[/yellow]")
        return

    table = Table(title=f"Saved resumes ({len(saved_resumes)})")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Changes", justify="right")
    table.add_column("Updated", style="dim")
    for saved in saved_resumes:
        name = (saved.original.get("basics") or {}).get("name", "")
        changes = len(diff_documents(saved.original, saved.optimized)) if saved.optimized else 0
        updated = time.strftime("%Y-%m-%d %H:%M", time.localtime(saved.updated_at))
        table.add_row(saved.id, name, str(changes), updated)
    console.print(table)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete the saved workspace, prompts, API key and history."""
    if not yes:
        typer.confirm("Remove all saved workspace data?", abort=True)
    config = load_config()
    removed = _open_store(config).clear()
    console.print(f"[green]Workspace cleared ({removed} saved resumes removed).[/green]")


if __name__ == "__main__":
    app()
