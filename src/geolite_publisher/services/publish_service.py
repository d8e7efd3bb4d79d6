"""Publish service: orchestrates the GeoLite2 fetch and republish pipeline.

For every edition: download the archive from MaxMind, extract the ``.mmdb``
database, build an npm bundle, publish it, then mirror the database to R2.
Each edition is isolated: a failure ends that edition only and the run
continues with the next one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from geolite_publisher.core.config import Settings, validate_required_settings
from geolite_publisher.core.errors import PublisherError
from geolite_publisher.lib.maxmind import EDITIONS, Edition, download_archive, extract_archive
from geolite_publisher.lib.publisher import (
    EditionResult,
    PipelineStep,
    RunSummary,
    UploadResult,
    build_bundle,
    compute_run_version,
    publish_bundle,
    upload_artifact,
)


@dataclass(frozen=True)
class RunContext:
    """Everything one publish run needs, built once and passed to every step.

    Attributes:
        settings: Validated application settings.
        version: Version string shared by every package of the run.
        scratch_dir: Root for archives, extracted files and bundles.
        editions: Editions to process, in order.
        dry_run: When True, npm only validates and R2 is skipped.
    """

    settings: Settings
    version: str
    scratch_dir: Path
    editions: tuple[Edition, ...]
    dry_run: bool = False

    def archive_path(self, edition: Edition) -> Path:
        return self.scratch_dir / f"{edition.edition_id}.tar.gz"

    def extract_dir(self, edition: Edition) -> Path:
        return self.scratch_dir / edition.edition_id

    def bundle_dir(self, edition: Edition) -> Path:
        return self.scratch_dir / f"{edition.edition_id}-npm"


def create_run_context(
    settings: Settings,
    *,
    editions: list[Edition] | None = None,
    scratch_dir: Path | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
) -> RunContext:
    """Validate settings and build the context for one run.

    Args:
        settings: Application settings.
        editions: Editions to process; defaults to the full catalogue.
        scratch_dir: Overrides ``settings.scratch_dir``.
        dry_run: Validate the npm publish without uploading anything.
        now: Clock override used to derive the run version.

    Returns:
        A RunContext ready for :func:`run_pipeline`.

    Raises:
        ConfigError: If a required credential is missing.
    """
    validate_required_settings(settings)
    now = now or datetime.now(tz=UTC)
    return RunContext(
        settings=settings,
        version=compute_run_version(now),
        scratch_dir=(scratch_dir or Path(settings.scratch_dir)).resolve(),
        editions=tuple(editions) if editions is not None else EDITIONS,
        dry_run=dry_run,
    )


def fetch(ctx: RunContext, edition: Edition) -> Path:
    """Download the edition archive into the scratch directory."""
    settings = ctx.settings
    return download_archive(
        edition.edition_id,
        ctx.archive_path(edition),
        account_id=settings.maxmind_account_id or "",
        license_key=settings.maxmind_license_key or "",
        auth_mode=settings.maxmind_auth_mode,
        base_url=settings.maxmind_download_url,
        timeout=settings.maxmind_timeout,
    )


def extract(ctx: RunContext, edition: Edition, archive: Path) -> Path:
    """Unpack the archive and return the ``.mmdb`` path."""
    return extract_archive(archive, ctx.extract_dir(edition))


def package(ctx: RunContext, edition: Edition, artifact: Path) -> Path:
    """Build the npm bundle for the edition."""
    settings = ctx.settings
    return build_bundle(
        edition,
        artifact,
        ctx.bundle_dir(edition),
        version=ctx.version,
        scope=settings.npm_scope,
        token=settings.npm_token or "",
        repository=settings.npm_repository,
        registry_url=settings.npm_registry_url,
    )


def publish_primary(ctx: RunContext, bundle_dir: Path) -> None:
    """Publish the bundle to npm."""
    publish_bundle(bundle_dir, dry_run=ctx.dry_run)


def publish_secondary(ctx: RunContext, edition: Edition, artifact: Path) -> list[UploadResult] | None:
    """Mirror the database to R2 when Cloudflare credentials are configured.

    Returns:
        Upload results, or None when the destination is skipped.
    """
    settings = ctx.settings
    if not settings.r2_enabled:
        logger.info("Cloudflare credentials not configured, skipping R2 upload for {}", edition.edition_id)
        return None
    if ctx.dry_run:
        logger.info("[DRY RUN] Skipping R2 upload for {}", edition.edition_id)
        return None

    return upload_artifact(
        artifact,
        package_name=edition.package_name,
        version=ctx.version,
        account_id=settings.cloudflare_account_id or "",
        api_token=settings.cloudflare_api_token or "",
        bucket=settings.r2_bucket,
        api_url=settings.r2_api_url,
        timeout=settings.r2_upload_timeout,
    )


def process_edition(ctx: RunContext, edition: Edition) -> EditionResult:
    """Run fetch → extract → package → publish for one edition.

    Expected failures in those steps are captured in the returned result.
    R2 upload failures are recorded in ``uploads`` but never mark the
    edition as failed.
    """
    result = EditionResult(edition=edition)
    step = PipelineStep.FETCH
    try:
        archive = fetch(ctx, edition)
        step = PipelineStep.EXTRACT
        result.artifact = extract(ctx, edition, archive)
        step = PipelineStep.PACKAGE
        result.bundle_dir = package(ctx, edition, result.artifact)
        step = PipelineStep.PUBLISH
        publish_primary(ctx, result.bundle_dir)
    except (PublisherError, OSError) as exc:
        result.failed_step = step
        result.error = str(exc)
        return result

    result.success = True
    result.uploads = publish_secondary(ctx, edition, result.artifact)
    return result


def log_results(summary: RunSummary) -> None:
    """Log one success or failure line per edition, then the totals.

    Each edition also gets a structured record routed to the JSON sink.
    """
    for result in summary.results:
        edition_id = result.edition.edition_id
        logger.bind(
            json_output=True,
            version=summary.version,
            edition=edition_id,
            success=result.success,
            step=str(result.failed_step) if result.failed_step else None,
            error=result.error,
            uploads_succeeded=result.uploads_succeeded if result.uploads is not None else None,
        ).info("Edition outcome: {} {}", result.edition.display_name, "published" if result.success else "failed")
        if not result.success:
            logger.error("❌ Failed to process {} at {}: {}", edition_id, result.failed_step, result.error)
            continue
        logger.success("✅ Successfully published {}", result.edition.package_name)
        if result.uploads is not None:
            logger.info("   R2: {}/{} uploads succeeded for {}", result.uploads_succeeded, len(result.uploads), edition_id)

    logger.info(
        "Run {} finished: {} succeeded, {} failed ({:.1f}s)",
        summary.version,
        summary.succeeded,
        summary.failed,
        summary.duration_seconds,
    )


def run_pipeline(ctx: RunContext) -> RunSummary:
    """Process every edition of the run in order.

    Args:
        ctx: Context from :func:`create_run_context`.

    Returns:
        A RunSummary with one EditionResult per edition, in input order.
    """
    summary = RunSummary(version=ctx.version, started_at=datetime.now(tz=UTC))
    logger.info("Starting GeoLite2 download and publish process at {}", summary.started_at.isoformat())
    logger.info("Version: {}", ctx.version)

    ctx.scratch_dir.mkdir(parents=True, exist_ok=True)
    for edition in ctx.editions:
        logger.info("=== Processing {} ===", edition.edition_id)
        summary.results.append(process_edition(ctx, edition))

    summary.finished_at = datetime.now(tz=UTC)
    log_results(summary)
    logger.info("Process completed at {}", summary.finished_at.isoformat())
    return summary
