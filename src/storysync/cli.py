"""Command line interface for storysync."""

from __future__ import annotations

import asyncio
import difflib
import json
import logging
from typing import IO, Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from storysync.config import (
    ConfigError,
    ConfigManager,
    SyncConfig,
    assign_path,
    resolve_with_precedence,
)
from storysync.errors import SyncError
from storysync.indexing import DispatchOutcome
from storysync.service import SyncService

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr.

    Args:
        level: Logging level name such as ``INFO``.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _load_config(
    ctx: click.Context, *, json_output: bool, overrides: dict[str, Any] | None = None
) -> SyncConfig:
    """Load configuration and apply the logging level for the invocation.

    Args:
        ctx: Click context carrying group-level options.
        json_output: Indicates whether JSON mode is active.
        overrides: Command-specific values keyed by dotted path.

    Returns:
        SyncConfig: Configuration with command-line options applied last.
    """
    cli_overrides = dict((ctx.obj or {}).get("overrides", {}))
    cli_overrides.update(overrides or {})
    try:
        config = ConfigManager().load(cli_overrides=cli_overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)

    level = (ctx.obj or {}).get("log_level") or config.logging.level
    _configure_logging(level)
    return config


def _build_service(config: SyncConfig) -> SyncService:
    """Return a service connected to the configured Storyblok space and Solr core."""
    return SyncService.from_config(config)


def _run_with_service(
    config: SyncConfig,
    operation: Callable[[SyncService], Awaitable[T]],
    *,
    command: str,
    json_output: bool,
) -> T:
    """Build a service, run ``operation`` on it, and translate failures.

    Args:
        config: Resolved configuration.
        operation: Coroutine factory receiving the service.
        command: Command name used in error codes.
        json_output: Indicates whether JSON mode is active.

    Returns:
        T: Whatever ``operation`` returns.
    """
    try:
        service = _build_service(config)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)

    async def _runner() -> T:
        async with service:
            return await operation(service)

    try:
        return asyncio.run(_runner())
    except SyncError as exc:
        details: dict[str, Any] = {"exception": type(exc).__name__}
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            details["status_code"] = status_code
        _handle_cli_error(
            f"{command} failed: {exc}",
            code=f"{command}_failed",
            json_output=json_output,
            details=details,
            original=exc,
        )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="storysync")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured logging level.",
)
@click.option("--solr-core", help="Override the Solr core for this invocation.")
@click.option(
    "--content-version",
    type=click.Choice(["published", "draft"]),
    help="Read published or draft stories.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: Optional[str],
    solr_core: Optional[str],
    content_version: Optional[str],
) -> None:
    """storysync keeps a Solr index in sync with Storyblok stories."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["overrides"] = {"solr.core": solr_core, "storyblok.version": content_version}


@cli.command()
@click.option("--clear", is_flag=True, help="Delete every document before reindexing.")
@click.option(
    "--per-page", type=click.IntRange(1, 100), help="Stories requested per listing page."
)
@click.option("--starts-with", help="Only index stories whose full slug has this prefix.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary.")
@click.pass_context
def reindex(
    ctx: click.Context,
    clear: bool,
    per_page: Optional[int],
    starts_with: Optional[str],
    json_output: bool,
) -> None:
    """Rebuild the index from every story in the space."""
    config = _load_config(
        ctx,
        json_output=json_output,
        overrides={"storyblok.per_page": per_page, "storyblok.starts_with": starts_with},
    )
    summary = _run_with_service(
        config,
        lambda service: service.reindex(clear=clear),
        command="reindex",
        json_output=json_output,
    )

    if json_output:
        console.print_json(
            data={
                "cleared": clear,
                "pages": summary.pages,
                "total": summary.total,
                "documents": summary.documents,
                "written": summary.written,
            }
        )
        return

    table = Table(title="Reindex summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Index cleared", "yes" if clear else "no")
    table.add_row("Pages fetched", str(summary.pages))
    table.add_row("Stories reported", str(summary.total))
    table.add_row("Documents written", str(summary.documents if summary.written else 0))
    console.print(table)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the Solr response as JSON.")
@click.pass_context
def clear(ctx: click.Context, json_output: bool) -> None:
    """Delete every document from the index."""
    config = _load_config(ctx, json_output=json_output)
    result = _run_with_service(
        config, lambda service: service.clear(), command="clear", json_output=json_output
    )

    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
        return
    console.print("[green]Index cleared.[/green]")


@cli.command()
@click.argument("payload", required=False, type=click.File("r"))
@click.option("--action", type=str, help="Notification action, e.g. published or deleted.")
@click.option("--story-id", type=str, help="Identifier of the affected story.")
@click.option("--json", "json_output", is_flag=True, help="Emit the outcome as JSON.")
@click.pass_context
def dispatch(
    ctx: click.Context,
    payload: Optional[IO[str]],
    action: Optional[str],
    story_id: Optional[str],
    json_output: bool,
) -> None:
    """Apply a change notification read from PAYLOAD (a JSON file, or - for stdin).

    Without an action the whole index is cleared and rebuilt.
    """
    data: dict[str, Any] = {}
    if payload is not None:
        try:
            loaded = json.load(payload)
        except json.JSONDecodeError as exc:
            _handle_cli_error(
                f"Notification is not valid JSON: {exc}",
                code="invalid_payload",
                json_output=json_output,
                original=exc,
            )
        if not isinstance(loaded, dict):
            _handle_cli_error(
                "Notification must be a JSON object.",
                code="invalid_payload",
                json_output=json_output,
            )
        data.update(loaded)
    if action is not None:
        data["action"] = action
    if story_id is not None:
        data["story_id"] = story_id

    config = _load_config(ctx, json_output=json_output)
    outcome = _run_with_service(
        config,
        lambda service: service.dispatch(data),
        command="dispatch",
        json_output=json_output,
    )

    if json_output:
        console.print_json(
            data={
                "action": data.get("action"),
                "story_id": data.get("story_id"),
                "outcome": outcome.value,
            }
        )
    elif outcome is DispatchOutcome.FAILED:
        error_console.print("[red]Dispatch failed; see log output for details.[/red]")
    else:
        console.print(f"[green]Dispatch {outcome.value}.[/green]")

    if outcome is DispatchOutcome.FAILED:
        ctx.exit(1)


@cli.command()
@click.argument("story_id")
@click.option("--json", "json_output", is_flag=True, help="Emit the document as JSON.")
@click.pass_context
def show(ctx: click.Context, story_id: str, json_output: bool) -> None:
    """Print the index document STORY_ID would be written as, without writing it."""
    config = _load_config(ctx, json_output=json_output)
    document = _run_with_service(
        config,
        lambda service: service.preview(story_id),
        command="show",
        json_output=json_output,
    )

    if document is None:
        _handle_cli_error(
            f"Story {story_id} not found.", code="not_found", json_output=json_output
        )

    if json_output:
        console.print_json(data=document.to_payload())
        return

    table = Table(title=f"Index document for story {story_id}")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in document.to_payload().items():
        table.add_row(key, str(value))
    console.print(table)


@cli.group()
def config() -> None:
    """Manage storysync configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration as YAML."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY, parsed as YAML.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY (for example solr.core) and show the diff."""
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'solr.host'.")

    try:
        file_data = manager.load_file_overrides()
        assign_path(file_data, segments, yaml.safe_load(value))
        resolve_with_precedence(defaults=SyncConfig(), file_overrides=file_data)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    def _without_stamp(lines: list[str]) -> list[str]:
        return [line for line in lines if not line.startswith("# Last updated")]

    if _without_stamp(before) == _without_stamp(after):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    diff = difflib.unified_diff(
        before, after, fromfile="config.yaml (before)", tofile="config.yaml (after)", lineterm=""
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR; invalid edits are not saved."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=SyncConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
