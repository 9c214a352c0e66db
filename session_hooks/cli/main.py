#!/usr/bin/env python3
"""
Command-line interface for claude-session-hooks.

Claude Code hooks pipe their JSON payload into these commands:

    enrich       payload + project_name + user_inputs, as JSON
    user-inputs  only the extracted user inputs
    notify       render and deliver the notification message
    stop         render and deliver the stop message
    render       print the message notify/stop would deliver
"""

from __future__ import annotations

import sys
import traceback

import orjson
import pydantic
import typer

from session_hooks.cli.logger import configure_logging
from session_hooks.config import settings
from session_hooks.config.hooks import HookSettings
from session_hooks.domain import ExtractOptions, OutputFormat
from session_hooks.exceptions import SessionHooksError
from session_hooks.services.cache import FileSessionCache, MemorySessionCache, SessionCache
from session_hooks.services.classifier import RecordClassifier
from session_hooks.services.discovery import SessionLocator
from session_hooks.services.enrichment import EnrichmentService, parse_payload
from session_hooks.services.extraction import ExtractionPipeline, render_text_entry
from session_hooks.services.notification import HookKind, HookNotifier, NotificationFormatter
from session_hooks.services.sinks import CommandSink, MessageSink, StdoutSink

app = typer.Typer(
    name='claude-session-hooks',
    help='Enrich Claude Code hook payloads with project name and user inputs',
    add_completion=False,
)


FORMAT_OPTION = typer.Option(None, '--format', '-f', help='Output format: basic, detailed or json')
LIMIT_OPTION = typer.Option(None, '--limit', '-n', min=0, help='Maximum user inputs (0 for all)')
REVERSE_OPTION = typer.Option(False, '--reverse', help='Show newest first')
MULTILINE_OPTION = typer.Option(False, '--include-multiline', help='Preserve multiline inputs as single entries')
VERBOSE_OPTION = typer.Option(False, '--verbose', '-v', help='Trace session lookup on stderr')


# ==============================================================================
# Wiring
# ==============================================================================


def _build_cache(config: HookSettings) -> SessionCache:
    if config.CACHE_ENABLED:
        return FileSessionCache(config.CACHE_DIR)
    return MemorySessionCache()


def _build_enrichment(config: HookSettings) -> EnrichmentService:
    locator = SessionLocator(config.CLAUDE_PROJECTS_DIR, _build_cache(config))
    pipeline = ExtractionPipeline(RecordClassifier(config.USER_INPUT_TRUNCATE_LENGTH))
    return EnrichmentService(locator, pipeline, default_project_name=config.DEFAULT_PROJECT_NAME)


def _build_sink(config: HookSettings) -> MessageSink:
    if config.NOTIFY_COMMAND:
        return CommandSink.from_command_line(config.NOTIFY_COMMAND, timeout=config.NOTIFY_TIMEOUT_SECONDS)
    return StdoutSink()


def _extract_options(
    config: HookSettings,
    output_format: OutputFormat | None,
    limit: int | None,
    reverse: bool,
    include_multiline: bool,
) -> ExtractOptions:
    return ExtractOptions(
        format=output_format or OutputFormat(config.DEFAULT_EXTRACT_FORMAT),
        limit=config.USER_INPUT_DEFAULT_LIMIT if limit is None else limit,
        reverse=reverse,
        include_multiline=include_multiline,
    )


def _start(verbose: bool) -> HookSettings:
    """Load settings and configure logging. Exits on invalid configuration."""
    try:
        config: HookSettings = settings
        debug = config.DEBUG
    except (pydantic.ValidationError, FileNotFoundError) as e:
        configure_logging(debug=verbose)
        typer.secho(f'Error: Invalid configuration: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    configure_logging(debug=verbose or debug)
    return config


def _fail(e: Exception, debug: bool) -> typer.Exit:
    """Report an error on stderr and build the exit to raise."""
    if isinstance(e, SessionHooksError):
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
    else:
        typer.secho(f'Error: Unexpected failure: {e}', fg=typer.colors.RED, err=True)
        if debug:
            traceback.print_exc()
    return typer.Exit(1)


# ==============================================================================
# Commands
# ==============================================================================


@app.command()
def enrich(
    output_format: OutputFormat | None = FORMAT_OPTION,
    limit: int | None = LIMIT_OPTION,
    reverse: bool = REVERSE_OPTION,
    include_multiline: bool = MULTILINE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Read a hook payload on stdin and print it with project_name and user_inputs added."""
    config = _start(verbose)
    options = _extract_options(config, output_format, limit, reverse, include_multiline)

    try:
        enriched = _build_enrichment(config).enrich(sys.stdin.read(), options)
    except Exception as e:
        raise _fail(e, config.DEBUG or verbose)

    typer.echo(orjson.dumps(enriched, option=orjson.OPT_INDENT_2).decode())


@app.command('user-inputs')
def user_inputs(
    output_format: OutputFormat | None = FORMAT_OPTION,
    limit: int | None = LIMIT_OPTION,
    reverse: bool = REVERSE_OPTION,
    include_multiline: bool = MULTILINE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Read a hook payload on stdin and print only the extracted user inputs."""
    config = _start(verbose)
    options = _extract_options(config, output_format, limit, reverse, include_multiline)

    try:
        payload = parse_payload(sys.stdin.read())
    except SessionHooksError as e:
        raise _fail(e, config.DEBUG or verbose)

    for entry in _build_enrichment(config).entries_for(payload, options):
        rendered = render_text_entry(entry, options.format)
        typer.echo(f'{rendered}\n' if options.format is OutputFormat.DETAILED else rendered)


def _run_hook(kind: HookKind, verbose: bool) -> None:
    config = _start(verbose)
    notifier = HookNotifier(_build_enrichment(config), NotificationFormatter.from_settings(config), _build_sink(config))
    try:
        sent = notifier.notify(sys.stdin.read(), kind)
    except Exception as e:
        raise _fail(e, config.DEBUG or verbose)
    if not sent:
        raise typer.Exit(1)


@app.command()
def notify(verbose: bool = VERBOSE_OPTION) -> None:
    """Notification hook: deliver the latest user input of the session."""
    _run_hook(HookKind.NOTIFICATION, verbose)


@app.command()
def stop(verbose: bool = VERBOSE_OPTION) -> None:
    """Stop hook: deliver the first user input of the session."""
    _run_hook(HookKind.STOP, verbose)


@app.command()
def render(
    kind: HookKind = typer.Option(HookKind.NOTIFICATION, '--kind', '-k', help='notification or stop'),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the message a hook would deliver, without delivering it."""
    config = _start(verbose)
    notifier = HookNotifier(_build_enrichment(config), NotificationFormatter.from_settings(config), StdoutSink())
    typer.echo(notifier.build_message(sys.stdin.read(), kind))


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
