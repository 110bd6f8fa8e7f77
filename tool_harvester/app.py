"""Typer CLI entrypoint for Tool-Harvester."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .catalog import SQLiteCatalog
from .config import ConfigRepository, ScrapingSource, SourceType
from .engine import Fetcher
from .infra import SQLiteManager, UserAgentPool
from .ingest import IngestionPolicy, IngestionReport
from .logging_conf import configure_logging
from .manager import ScrapeManager, default_extractors
from .orchestrator import Orchestrator
from .records import PartialRecord
from .registry import SourceNotFoundError, SourceRegistry
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="Tool-Harvester command line",
    no_args_is_help=True,
    rich_markup_mode=None,
)
source_app = typer.Typer(
    name="source",
    help="Manage scrape sources",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    registry: SourceRegistry
    orchestrator: Orchestrator
    scheduler: APSchedulerAdapter
    catalog: SQLiteCatalog


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    global_config = repository.load_global_config()
    registry = SourceRegistry(repository.load_sources())

    fetcher = Fetcher(global_config.fetch, UserAgentPool(global_config.fetch.user_agents))
    manager = ScrapeManager(default_extractors(fetcher, global_config))
    catalog = SQLiteCatalog(
        SQLiteManager(),
        global_config.resolved_catalog_path(repository.locator.project_root),
    )
    orchestrator = Orchestrator(registry, manager, catalog)
    return AppState(
        repository=repository,
        registry=registry,
        orchestrator=orchestrator,
        scheduler=APSchedulerAdapter(),
        catalog=catalog,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _persist_sources(state: AppState) -> None:
    path = state.repository.save_sources(state.registry.list())
    console.print(f"Sources saved to {path}.", style="dim")


def _render_sources_table(sources: Sequence[ScrapingSource]) -> Table:
    table = Table(
        title=f"Sources · {len(sources)} configured",
        box=box.SIMPLE_HEAD,
        show_lines=False,
    )
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type", style="magenta")
    table.add_column("URL", overflow="fold")
    table.add_column("Limit", justify="right")
    table.add_column("Workers", justify="right")
    table.add_column("Schedule", style="yellow")
    table.add_column("Enabled", style="green")
    for source in sources:
        table.add_row(
            source.id,
            source.name,
            source.source_type.value,
            source.target_url or "-",
            str(source.item_limit),
            str(source.concurrency),
            source.schedule or "-",
            "yes" if source.enabled else "no",
        )
    return table


def _render_jobs_table(jobs: Iterable[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job ID", style="cyan", no_wrap=True)
    table.add_column("Next run", style="green")
    table.add_column("Trigger", style="magenta", overflow="fold")
    for job in jobs:
        table.add_row(
            str(job.get("id", "-")),
            str(job.get("next_run_time", "-")),
            str(job.get("trigger", "-")),
        )
    return table


def _render_report(report: IngestionReport, title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Scraped", str(report.scraped_count))
    table.add_row("Inserted", str(report.inserted_count))
    if report.updated_count is not None:
        table.add_row("Updated", str(report.updated_count))
    table.add_row("Skipped", str(report.skipped_count))
    table.add_row("Errors", str(len(report.errors)))
    return table


def _print_report(report: IngestionReport, title: str, as_json: bool) -> None:
    if as_json:
        console.print_json(data=report.to_dict())
        return
    if report.dry_run:
        console.print("Dry run: the catalog was not modified.", style="yellow")
    console.print(_render_report(report, title))
    for item in report.skipped_items:
        console.print(f"skipped {item.key}: {item.reason}", style="dim", markup=False)
    for error in report.errors:
        console.print(error, style="red", markup=False)


def _load_records(path: Path) -> list[PartialRecord]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("items", [])
    if not isinstance(payload, list):
        raise typer.BadParameter("expected a JSON list of records or an object with 'items'")
    return [PartialRecord.model_validate(entry) for entry in payload]


app.add_typer(source_app, name="source", help="Manage scrape sources (list/add/edit/remove)")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@source_app.command("list", help="Show configured sources.")
def source_list(
    ctx: typer.Context,
    source_type: Optional[SourceType] = typer.Option(
        None, "--type", help="Only show sources of this extractor type."
    ),
) -> None:
    state = _get_state(ctx)
    sources = state.registry.by_type(source_type) if source_type else state.registry.list()
    if not sources:
        console.print("No sources configured. Use `tool-harvester source add` to create one.", style="yellow")
        raise typer.Exit(code=0)
    console.print(_render_sources_table(sources))


@source_app.command("add", help="Register a new source.")
def source_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name of the source."),
    source_type: SourceType = typer.Option(..., "--type", help="Extractor used for this source."),
    url: str = typer.Option("", "--url", help="Listing URL; blank uses the extractor default."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum records per run."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Parallel detail fetches."),
    schedule: Optional[str] = typer.Option(None, "--schedule", help="Five-field cron expression."),
    disabled: bool = typer.Option(False, "--disabled", help="Create the source disabled.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    defaults = state.repository.load_global_config()
    try:
        source = state.registry.create(
            name=name,
            source_type=source_type,
            target_url=url,
            item_limit=limit if limit is not None else defaults.default_item_limit,
            concurrency=concurrency if concurrency is not None else defaults.default_concurrency,
            schedule=schedule,
            enabled=not disabled,
        )
    except ValidationError as exc:
        console.print(f"Invalid source: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    _persist_sources(state)
    console.print(f"Source `{source.id}` created.", style="green")


@source_app.command("edit", help="Change fields of an existing source.")
def source_edit(
    ctx: typer.Context,
    source_id: str = typer.Argument(..., help="Source id."),
    name: Optional[str] = typer.Option(None, "--name"),
    url: Optional[str] = typer.Option(None, "--url"),
    limit: Optional[int] = typer.Option(None, "--limit"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency"),
    schedule: Optional[str] = typer.Option(None, "--schedule", help="Pass an empty string to clear."),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled"),
) -> None:
    state = _get_state(ctx)
    changes = {
        key: value
        for key, value in {
            "name": name,
            "target_url": url,
            "item_limit": limit,
            "concurrency": concurrency,
            "schedule": schedule,
            "enabled": enabled,
        }.items()
        if value is not None
    }
    if not changes:
        console.print("Nothing to change.", style="yellow")
        raise typer.Exit(code=0)
    try:
        updated = state.registry.update(source_id, **changes)
    except ValidationError as exc:
        console.print(f"Invalid source: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    if updated is None:
        console.print(f"Source `{source_id}` not found.", style="red")
        raise typer.Exit(code=1)
    _persist_sources(state)
    console.print(f"Source `{source_id}` updated.", style="green")


@source_app.command("remove", help="Delete a source.")
def source_remove(
    ctx: typer.Context,
    source_id: str = typer.Argument(..., help="Source id."),
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    if state.registry.get(source_id) is None:
        console.print(f"Source `{source_id}` not found.", style="red")
        raise typer.Exit(code=1)
    if not yes and not typer.confirm(f"Delete `{source_id}`?", default=False):
        console.print("Cancelled.", style="yellow")
        raise typer.Exit(code=0)
    state.registry.delete(source_id)
    _persist_sources(state)
    console.print(f"Source `{source_id}` deleted.", style="green")


@app.command("scrapers", help="List available extractor types.")
def scrapers(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    for name in state.orchestrator.manager.available():
        console.print(name)


@app.command("catalog", help="Show catalog entries.")
def catalog_list(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", help="Maximum rows to display."),
) -> None:
    state = _get_state(ctx)
    entries = state.catalog.all()
    if not entries:
        console.print("The catalog is empty.", style="yellow")
        raise typer.Exit(code=0)
    table = Table(title=f"Catalog · {len(entries)} entries", box=box.SIMPLE_HEAD)
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Pricing", style="green")
    table.add_column("Website", overflow="fold")
    for entry in entries[:limit]:
        table.add_row(entry.slug, entry.name, entry.category, entry.pricing, entry.website_url)
    console.print(table)


@app.command("ingest", help="Scrape one source and reconcile the results with the catalog.")
def ingest(
    ctx: typer.Context,
    source_id: str = typer.Argument(..., help="Source id."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report without writing.", is_flag=True),
    upsert: bool = typer.Option(False, "--upsert", help="Update duplicates in place.", is_flag=True),
    limit: Optional[int] = typer.Option(None, "--limit", help="Override the source item limit."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    policy = IngestionPolicy(dry_run=dry_run, upsert=upsert)
    try:
        report = state.orchestrator.ingest_source(source_id, policy, limit=limit)
    except SourceNotFoundError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1)
    _print_report(report, f"{source_id} ingestion", as_json)


@app.command("ingest-all", help="Scrape every enabled source concurrently.")
def ingest_all(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", is_flag=True),
    upsert: bool = typer.Option(False, "--upsert", is_flag=True),
    as_json: bool = typer.Option(False, "--json", is_flag=True),
) -> None:
    state = _get_state(ctx)
    reports = state.orchestrator.ingest_enabled(IngestionPolicy(dry_run=dry_run, upsert=upsert))
    if not reports:
        console.print("No enabled sources.", style="yellow")
        raise typer.Exit(code=0)
    if as_json:
        console.print_json(data={key: report.to_dict() for key, report in reports.items()})
        return
    for source_id, report in reports.items():
        _print_report(report, f"{source_id} ingestion", as_json=False)


@app.command("import-file", help="Reconcile records from a JSON export.")
def import_file(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    dry_run: bool = typer.Option(False, "--dry-run", is_flag=True),
    upsert: bool = typer.Option(False, "--upsert", is_flag=True),
    as_json: bool = typer.Option(False, "--json", is_flag=True),
) -> None:
    state = _get_state(ctx)
    try:
        records = _load_records(path)
    except (ValueError, ValidationError) as exc:
        console.print(f"Could not read {path}: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    policy = IngestionPolicy(dry_run=dry_run, upsert=upsert)
    report = state.orchestrator.ingest_records(records, policy, origin=path.name)
    _print_report(report, f"{path.name} import", as_json)


@app.command("serve", help="Run scheduled sources in the foreground until interrupted.")
def serve(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    scheduled = state.orchestrator.register_schedules(state.scheduler)
    if not scheduled:
        state.scheduler.shutdown()
        console.print("No enabled source carries a schedule.", style="yellow")
        raise typer.Exit(code=0)
    console.print(_render_jobs_table(state.scheduler.list_jobs()))
    console.print("Scheduler running. Press Ctrl+C to stop.", style="green")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler.", style="yellow")
    finally:
        state.scheduler.shutdown()


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
