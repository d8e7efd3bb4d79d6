"""Publish CLI commands for republishing GeoLite2 databases."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Typer needs Path at runtime

import typer
from loguru import logger

from geolite_publisher.core.config import ConfigError, get_settings
from geolite_publisher.lib.maxmind.types import EDITIONS, resolve_editions
from geolite_publisher.lib.publisher.types import EditionResult, RunSummary

_VALID_EDITIONS = ", ".join(edition.edition_id for edition in EDITIONS)


def _style_status(success: bool) -> str:
    """Return a colored, fixed-width status label."""
    if success:
        return typer.style("PASS", fg=typer.colors.GREEN, bold=True)
    return typer.style("FAIL", fg=typer.colors.RED, bold=True)


def _describe_uploads(result: EditionResult) -> str:
    if result.uploads is None:
        return "R2 skipped"
    return f"R2 {result.uploads_succeeded}/{len(result.uploads)}"


def _print_summary(summary: RunSummary, *, verbose: bool) -> None:
    """Print one line per edition followed by run totals."""
    typer.echo(f"\nVersion {summary.version}")
    for result in summary.results:
        label = _style_status(result.success)
        name = result.edition.edition_id
        if result.success:
            typer.echo(f"  {label}  {name:<20s} npm ok, {_describe_uploads(result)}")
        else:
            typer.echo(f"  {label}  {name:<20s} failed at {result.failed_step}")
            typer.echo(f"         {result.error}")
        if verbose and result.uploads:
            for upload in result.uploads:
                status = "ok" if upload.success else upload.error
                typer.echo(f"         {upload.key}: {status}")

    typer.echo(f"\nTotal: {summary.succeeded} published, {summary.failed} failed")
    typer.echo(f"Duration: {summary.duration_seconds:.1f}s")


def run_command(
    edition: list[str] | None = typer.Option(
        None,
        "--edition",
        "-e",
        help=f"Publish only this edition: {_VALID_EDITIONS} (repeatable)",
    ),
    scratch_dir: Path | None = typer.Option(
        None,
        "--scratch-dir",
        help="Working directory for archives and bundles (default: SCRATCH_DIR env var)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run npm publish --dry-run and skip R2 uploads"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every R2 upload"),
) -> None:
    """Download GeoLite2 databases and publish them to npm and R2.

    Exits 0 once every edition has been attempted, even if some failed.
    Exits 1 if required credentials are missing or the run aborts.
    """
    from geolite_publisher.services.publish_service import create_run_context, run_pipeline

    try:
        editions = resolve_editions(edition)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    settings = get_settings()
    try:
        ctx = create_run_context(settings, editions=editions, scratch_dir=scratch_dir, dry_run=dry_run)
    except ConfigError as exc:
        logger.error(str(exc))
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    prefix = "[DRY RUN] " if dry_run else ""
    typer.echo(f"{prefix}Publishing {len(ctx.editions)} edition(s) as version {ctx.version}")

    try:
        summary = run_pipeline(ctx)
    except Exception as exc:
        logger.exception("Fatal error during publish run")
        typer.echo(f"Error: Publish failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _print_summary(summary, verbose=verbose)


def editions_command() -> None:
    """List the GeoLite2 editions and their npm package names."""
    settings = get_settings()
    for edition in EDITIONS:
        typer.echo(
            f"  {edition.edition_id:<20s} {edition.scoped_package_name(settings.npm_scope):<30s} {edition.display_name}"
        )
