"""
Command-line interface for l10n-gpt.

Provides commands for:
- Translating a localization file into another language
- Managing the API key

Usage:
    l10n-gpt translate en.lproj/Localizable.strings de.lproj/Localizable.strings -l de
    l10n-gpt translate Localizable.xcstrings -l fr --batch-size 20 --mark-for-review
    l10n-gpt translate en.json de.json -l de --max-input-tokens 2000 --dry-run
    l10n-gpt keys set
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from l10n_gpt import __version__
from l10n_gpt.config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TEMPERATURE,
    BatchMode,
    TranslateConfig,
)
from l10n_gpt.errors import ConfigError, StoreError
from l10n_gpt.keys import KeyManager, require_key
from l10n_gpt.models import SimpleUnit
from l10n_gpt.pipeline import TranslationOrchestrator
from l10n_gpt.store import load_resource
from l10n_gpt.translate.client import OpenAICompletionClient

app = typer.Typer(
    name="l10n-gpt",
    help="Translate localization files with a GPT-style completion service.",
    add_completion=False,
)
keys_app = typer.Typer(help="Manage the completion-service API key.")
app.add_typer(keys_app, name="keys")

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"l10n-gpt v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log debug output",
    ),
):
    """l10n-gpt: LLM translation for localization files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/] {message}", style="bold")
    raise typer.Exit(1)


@app.command()
def translate(
    source_file: Path = typer.Argument(
        ...,
        exists=True, dir_okay=False,
        envvar="GPT_SOURCE_FILE",
        help="Source localization file (.strings, .json or .xcstrings)",
    ),
    target_file: Optional[Path] = typer.Argument(
        None,
        dir_okay=False,
        envvar="GPT_TARGET_FILE",
        help="File to update; defaults to the source file (String Catalogs)",
    ),
    source_language: str = typer.Option(
        "auto", "--source", "-s",
        envvar="GPT_SOURCE_LANGUAGE",
        help="Source language tag",
    ),
    target_language: str = typer.Option(
        "en", "--target", "-l",
        envvar="GPT_TARGET_LANGUAGE",
        help="Target language tag",
    ),
    model: str = typer.Option(
        DEFAULT_MODEL, "--model", "-m",
        envvar="GPT_MODEL_NAME",
        help="Model identifier",
    ),
    temperature: float = typer.Option(
        DEFAULT_TEMPERATURE, "--temperature",
        envvar="GPT_TEMPERATURE",
        help="Sampling temperature between 0 and 2",
    ),
    request_timeout: float = typer.Option(
        DEFAULT_REQUEST_TIMEOUT, "--timeout",
        envvar="GPT_REQUEST_TIMEOUT",
        help="Request timeout in seconds (also the pause between requests)",
    ),
    pacing_interval: Optional[float] = typer.Option(
        None, "--pacing",
        envvar="GPT_PACING_INTERVAL",
        help="Pause between requests in seconds, if different from --timeout",
    ),
    skip_translated: bool = typer.Option(
        True, "--skip-translated/--retranslate",
        envvar="GPT_SKIP_TRANSLATED",
        help="Only translate strings missing from the target",
    ),
    common_context: Optional[str] = typer.Option(
        None, "--context", "-c",
        envvar="GPT_COMMON_CONTEXT",
        help="Context added to every prompt (app description, tone...)",
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b",
        envvar="GPT_BUNCH_SIZE",
        help="Strings per JSON request (omit for one request per string)",
    ),
    max_input_tokens: Optional[int] = typer.Option(
        None, "--max-input-tokens",
        envvar="GPT_MAX_INPUT_TOKENS",
        help="Token budget per JSON request; overrides --batch-size",
    ),
    max_retries: int = typer.Option(
        DEFAULT_MAX_RETRIES, "--max-retries",
        help="Retries per request after a timeout",
    ),
    mark_for_review: bool = typer.Option(
        False, "--mark-for-review",
        envvar="GPT_MARK_FOR_REVIEW",
        help="Mark new translations as needing review (String Catalogs)",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url",
        envvar="GPT_BASE_URL",
        help="OpenAI-compatible API endpoint",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run",
        help="Show the batches and prompts without calling the service",
    ),
):
    """Translate the strings the target file is missing.

    Translations are kept in memory and written once at the end. If the
    run is interrupted, nothing from that run is saved.
    """
    if target_file is None:
        if source_file.suffix.lower() != ".xcstrings":
            _fail("TARGET_FILE is required unless the source is a String Catalog")
        target_file = source_file

    config = TranslateConfig(
        source_language=source_language,
        target_language=target_language,
        model=model,
        temperature=temperature,
        request_timeout=request_timeout,
        pacing_interval=pacing_interval,
        skip_translated=skip_translated,
        common_context=common_context,
        batch_size=batch_size,
        max_input_tokens=max_input_tokens,
        max_retries=max_retries,
        mark_for_review=mark_for_review,
        base_url=base_url,
    )
    try:
        config.validate()
    except ConfigError as e:
        _fail(str(e))

    try:
        source = load_resource(source_file, config.source_language)
        target = load_resource(target_file, config.target_language)
    except StoreError as e:
        _fail(str(e))

    if not dry_run:
        try:
            config.api_key = require_key(config.api_key)
        except ValueError as e:
            _fail(str(e))

    client = OpenAICompletionClient(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.request_timeout,
    )

    if dry_run:
        orchestrator = TranslationOrchestrator(config, client)
        _show_plan(orchestrator, source.read(), target.read())
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Translating...", total=100)
        wait_task = progress.add_task("Waiting", total=1, visible=False)

        def update_progress(msg: str, pct: float):
            progress.update(task, description=msg, completed=int(pct * 100))

        def update_pacing(elapsed: float, total: float):
            progress.update(
                wait_task,
                description=f"Waiting {total:.0f}s",
                completed=elapsed,
                total=total,
                visible=elapsed < total,
            )

        orchestrator = TranslationOrchestrator(
            config,
            client,
            progress_callback=update_progress,
            pacing_callback=update_pacing,
        )
        try:
            result = orchestrator.run(source, target)
        except StoreError as e:
            _fail(str(e))

    table = Table(title="Translation Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.stats.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)

    if result.success:
        console.print(f"\n[bold green]Saved {result.written} strings to[/] {target_file}")
    else:
        console.print(f"\n[yellow]Saved {result.written} strings to {target_file} "
                      f"with {len(result.errors)} failures:[/]")
        for error in result.errors:
            console.print(f"  - {error}")


def _show_plan(orchestrator: TranslationOrchestrator, source, target) -> None:
    """Print batches and prompts for --dry-run."""
    batches = orchestrator.plan(source, target)
    config = orchestrator.config
    console.print(
        f"[bold]{sum(len(b) for b in batches)} strings in {len(batches)} batches[/] "
        f"({config.batch_mode.value} mode)"
    )
    builder = orchestrator.prompt_builder
    for batch in batches:
        console.rule(f"Batch {batch.index + 1}: {', '.join(batch.keys)}")
        first = batch.tasks[0]
        if config.batch_mode is BatchMode.SINGLE and isinstance(first.unit, SimpleUnit):
            prompt = builder.build_single_prompt(first) if first.unit.value else None
        else:
            prompt = builder.build_batch_prompt(batch.tasks)
        if prompt:
            console.print(prompt, markup=False, highlight=False)
        else:
            console.print("[dim](nothing to translate, no request)[/]")


@keys_app.command("show")
def keys_show():
    """Show where the API key comes from."""
    info = KeyManager().get_key_info()
    if info.is_set:
        console.print(f"[green]API key set[/] ({info.source}): {info.masked_value}")
    else:
        console.print("[yellow]No API key configured[/]")


@keys_app.command("set")
def keys_set(
    key: str = typer.Option(
        ..., prompt="API key", hide_input=True,
        help="API key to store",
    ),
    no_keyring: bool = typer.Option(
        False, "--no-keyring",
        help="Store in ~/.l10n_gpt/keys.json instead of the OS keychain",
    ),
):
    """Store the API key."""
    location = KeyManager().set_key(key, use_keyring=not no_keyring)
    console.print(f"[green]API key stored in {location}[/]")


@keys_app.command("delete")
def keys_delete():
    """Delete the stored API key."""
    if KeyManager().delete_key():
        console.print("[green]API key deleted[/]")
    else:
        console.print("[yellow]No stored API key[/]")
