"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdsite.config import Settings, load_config
from mdsite.core.errors import MdsiteError
from mdsite.core.export import write_outputs
from mdsite.core.pipeline import BuildResult, build_site
from mdsite.core.watch import watch
from mdsite.crud.database import init_db, make_engine, reset_db
from mdsite.crud.views import get_cards, get_last_build, list_collections, replace_views


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging from it."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)
    return settings


def _build_overrides(
    content: Optional[str], mode: Optional[str], drafts: bool, base_path: Optional[str], verbose: bool,
    ) -> dict:
    return {
        "content_dir": content,
        "build_mode": mode,
        "show_drafts": drafts or None,
        "base_path": base_path,
        "log_level": "INFO" if verbose else None,
    }


def _build(settings: Settings) -> BuildResult:
    try:
        return build_site(settings)
    except MdsiteError as e:
        _fail("Build failed", e)


def _echo_report(result: BuildResult) -> None:
    """Print every issue, then a summary line."""
    for item in result.report.issues:
        typer.echo(f"  {item}", err=item.severity.value == "error")
    typer.echo(
        f"{len(result.documents)} document(s), "
        f"{len(result.report.errors)} error(s), "
        f"{len(result.report.warnings)} warning(s)"
    )


def _publish(result: BuildResult, settings: Settings) -> None:
    """Write JSON views and replace the stored views for a successful build."""
    output_dir = Path(settings.output_dir)
    try:
        written = write_outputs(result, output_dir)
    except OSError as e:
        _fail("Export failed", e)
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        replace_views(session, result)
    typer.echo(f"Wrote {len(written)} file(s) to {output_dir}/ (digest {result.digest[:12]})")


ContentOpt  = Annotated[Optional[str], typer.Option("--content-dir", help="Content root directory")]
ModeOpt     = Annotated[Optional[str], typer.Option("--mode", help="production or development")]
DraftsOpt   = Annotated[bool, typer.Option("--drafts", help="Show drafts in a production build")]
BaseOpt     = Annotated[Optional[str], typer.Option("--base-path", help="URL prefix for card links")]
VerboseOpt  = Annotated[bool, typer.Option("--verbose", "-v", help="Log progress at INFO level")]


def build_cmd(
    content: ContentOpt = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    mode: ModeOpt = None,
    drafts: DraftsOpt = False,
    base_path: BaseOpt = None,
    verbose: VerboseOpt = False,
    ):
    """Run the full build and publish its views. Nothing is written when any error is found."""
    settings = _settings(overrides={
        **_build_overrides(content, mode, drafts, base_path, verbose), "output_dir": out,
    })
    result = _build(settings)
    _echo_report(result)
    if not result.ok:
        failed = ", ".join(sorted(c.value for c in result.report.failed_collections))
        _fail(f"Build has errors in: {failed or 'content'}; nothing written")
    _publish(result, settings)


def check_cmd(
    content: ContentOpt = None,
    mode: ModeOpt = None,
    drafts: DraftsOpt = False,
    verbose: VerboseOpt = False,
    ):
    """Validate the content tree and print every issue without writing anything."""
    settings = _settings(overrides=_build_overrides(content, mode, drafts, None, verbose))
    result = _build(settings)
    _echo_report(result)
    if not result.ok:
        raise typer.Exit(1)


def list_cmd(
    collection: Annotated[Optional[str], typer.Argument(help="List the cards of this collection")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Restrict to one category")] = None,
    ):
    """List stored collections, or the cards of one collection in resolved order."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        if collection is None:
            cols = list_collections(session)
            if not cols:
                typer.echo("No views found in database. Run 'mdsite build' first.")
                raise typer.Exit(1)
            for c in cols:
                typer.echo(c)
            last = get_last_build(session)
            if last:
                typer.echo(f"Last build: {last.built_at:%Y-%m-%d %H:%M} ({last.build_mode}, digest {last.digest[:12]})")
            return
        try:
            cards = get_cards(session, collection, category)
        except ValueError:
            _fail(f"Unknown collection '{collection}'")
    if not cards:
        typer.echo(f"No cards found for {collection}{'/' + category if category else ''}.")
        raise typer.Exit(1)
    for card in cards:
        marker = " [draft]" if card.is_draft else ""
        typer.echo(f"  {card.published_on}  {card.category}/{card.id}  {card.title}{marker}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def watch_cmd(
    content: ContentOpt = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    mode: ModeOpt = None,
    drafts: DraftsOpt = False,
    base_path: BaseOpt = None,
    interval: Annotated[float, typer.Option("--interval", help="Seconds between polls")] = 1.0,
    max_builds: Annotated[Optional[int], typer.Option("--max-builds", hidden=True)] = None,
    verbose: VerboseOpt = False,
    ):
    """Rebuild on every content change; errors are reported and the previous views are kept."""
    settings = _settings(overrides={
        **_build_overrides(content, mode, drafts, base_path, verbose), "output_dir": out,
    })

    def on_result(result: BuildResult) -> None:
        _echo_report(result)
        if result.ok:
            _publish(result, settings)
        else:
            typer.echo("Build has errors; previous views kept.", err=True)

    typer.echo(f"Watching {settings.content_dir}/ (Ctrl+C to stop)")
    try:
        watch(settings, on_result, interval=interval, max_builds=max_builds)
    except KeyboardInterrupt:
        typer.echo("Stopped.")
