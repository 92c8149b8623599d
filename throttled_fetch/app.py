"""Typer CLI entrypoint for throttled-fetch."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigRepository, DrainPolicy, FetchSettings
from .engine import BoundedFetcher, compute_digest
from .errors import FetchError
from .logging_conf import configure_logging, current_log_dir, tail_log

app = typer.Typer(
    help="Throttled fetch and MD5 digest command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Settings file commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    settings: FetchSettings
    verbose: bool
    config_path: Optional[Path] = None

    def settings_source(self) -> Path:
        return self.config_path or self.repository.settings_path()


def build_state(verbose: bool, config_path: Optional[Path] = None) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose, log_dir=repository.locator.logs_dir)
    try:
        settings = repository.load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        _fail(exc)
    return AppState(
        repository=repository, settings=settings, verbose=verbose, config_path=config_path
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):
        state = build_state(False)
        ctx.obj = state
    return state


def _render_results(identifiers: List[str], contents: List[bytes], uppercase: bool) -> Table:
    table = Table(title="Fetched resources", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("Identifier", overflow="fold")
    table.add_column("Bytes", justify="right")
    table.add_column("MD5", min_width=32, no_wrap=True)
    for index, (identifier, content) in enumerate(zip(identifiers, contents), start=1):
        table.add_row(
            str(index),
            escape(identifier),
            str(len(content)),
            compute_digest(content, uppercase=uppercase),
        )
    return table


def _fail(exc: Exception) -> None:
    console.print(f"[red]{escape(str(exc))}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Settings file to use instead of the default one."
    ),
) -> None:
    ctx.obj = build_state(verbose, config)


@app.command("fetch", help="Fetch resources and print their sizes and digests.")
def fetch(
    ctx: typer.Context,
    identifiers: List[str] = typer.Argument(..., help="URLs, file:// URIs or local paths."),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", help="Maximum in-flight reads (defaults to settings)."
    ),
    policy: Optional[DrainPolicy] = typer.Option(
        None, "--policy", help="Drain policy once the budget is reached."
    ),
    sync: bool = typer.Option(False, "--sync", help="Fetch sequentially instead.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    fetcher = BoundedFetcher(state.settings)
    started = time.perf_counter()
    try:
        if sync:
            contents = fetcher.fetch_all_sync(identifiers, raw=True)
        else:

            async def _run() -> List[bytes]:
                async with fetcher:
                    return await fetcher.fetch_all_bounded(
                        identifiers, concurrency, policy, raw=True
                    )

            contents = asyncio.run(_run())
    except FetchError as exc:
        _fail(exc)
    finally:
        fetcher.close()
    console.print(_render_results(identifiers, contents, state.settings.digest_uppercase))
    console.print(f"Fetched {len(contents)} resource(s) in {time.perf_counter() - started:.3f}s")


@app.command("digest", help="Print the MD5 digest of one resource.")
def digest(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="URL, file:// URI or local path."),
    upper: bool = typer.Option(False, "--upper", help="Uppercase hex output.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    settings = state.settings
    if upper:
        settings = settings.model_copy(update={"digest_uppercase": True})
    fetcher = BoundedFetcher(settings)

    async def _run() -> str:
        async with fetcher:
            return await fetcher.digest_of(identifier)

    try:
        value = asyncio.run(_run())
    except FetchError as exc:
        _fail(exc)
    console.print(value)


@config_app.command("show", help="Print the active settings.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(f"# {escape(str(state.settings_source()))}")
    console.print(
        yaml.safe_dump(state.settings.model_dump(mode="json"), sort_keys=False), end=""
    )


@config_app.command("init", help="Write a default settings file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite existing settings.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.repository.settings_path()
    if path.exists() and not force and state.settings != FetchSettings():
        console.print(f"[yellow]Settings already customised at {path}; use --force.[/yellow]")
        raise typer.Exit(code=1)
    written = state.repository.save_settings(FetchSettings())
    console.print(f"Settings written to {written}")


@log_app.command("tail", help="Show the last lines of the fetch log.")
def log_tail(
    lines: int = typer.Option(50, "--lines", "-n", min=1, help="Number of lines."),
    path: Optional[Path] = typer.Option(None, "--path", help="Log file to read."),
) -> None:
    target = path or current_log_dir() / "fetch.log"
    content = tail_log(target, lines)
    if not content:
        console.print(f"No log entries in {target}")
        return
    for line in content:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


__all__ = ["app"]
