"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
translation results, language detections, and cache statistics.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import TranslateCacheError
from .models.datatypes import CacheStats, LanguageDetection, TranslateResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, TranslateCacheError):
        typer.secho(f"{command_name} failed: {exc.detail}", fg=typer.colors.RED, err=True)
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_translation(result: TranslateResult) -> None:
    """Print one translated text followed by its cache metadata."""

    typer.echo(result.text)
    typer.echo(f"Source language: {result.source_language}")
    typer.echo(f"Cached: {'yes' if result.cached else 'no'}")
    if result.is_manual_override:
        typer.echo("Manual override: yes")


def echo_batch(results: list[TranslateResult]) -> None:
    """Print numbered batch results in input order."""

    for index, result in enumerate(results, start=1):
        marker = "cached" if result.cached else "translated"
        typer.echo(f"{index}. [{marker}] {result.text}")


def echo_detection(detection: LanguageDetection) -> None:
    """Print a detected language and its confidence."""

    typer.echo(f"Language: {detection.language}")
    typer.echo(f"Confidence: {detection.confidence:.2f}")


def echo_stats(stats: CacheStats) -> None:
    """Print cache totals and per-language entry counts."""

    typer.echo(f"Total entries: {stats.total_entries}")
    typer.echo(f"Manual overrides: {stats.manual_overrides}")
    for language, count in sorted(stats.by_language.items()):
        typer.echo(f"  {language}: {count}")
