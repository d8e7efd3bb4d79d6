"""npm bundle creation and publishing.

Builds a throwaway package directory holding one ``.mmdb`` database plus a
generated ``package.json`` and ``.npmrc``, then hands it to ``npm publish``.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from loguru import logger

from geolite_publisher.core.errors import PublisherError
from geolite_publisher.lib.maxmind.types import Edition

PACKAGE_LICENSE = "CC BY-SA 4.0"
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org/"


class PublishError(PublisherError):
    """Raised when ``npm publish`` fails for a bundle."""

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


def compute_run_version(now: datetime) -> str:
    """Return the semver version shared by every package of a run.

    Format is ``YYYY.M.D-HHMMSS``. The time part is a numeric pre-release
    identifier, which semver forbids to have leading zeros, so ``09:30:05``
    renders as ``93005``. Numeric identifiers compare by value, so versions
    from the same day still sort chronologically.
    """
    time_part = int(now.strftime("%H%M%S"))
    return f"{now.year}.{now.month}.{now.day}-{time_part}"


def build_package_json(
    edition: Edition,
    artifact_name: str,
    *,
    version: str,
    scope: str,
    repository: str,
) -> dict[str, Any]:
    """Generate the ``package.json`` document for an edition bundle."""
    return {
        "name": edition.scoped_package_name(scope),
        "version": version,
        "description": f"MaxMind {edition.edition_id} database, updated weekly",
        "main": artifact_name,
        "files": [artifact_name],
        "keywords": ["maxmind", "geolite2", "geoip", edition.package_name],
        "license": PACKAGE_LICENSE,
        "repository": repository,
    }


def npmrc_auth_line(token: str, registry_url: str = DEFAULT_REGISTRY_URL) -> str:
    """Return the ``.npmrc`` line that authenticates against ``registry_url``.

    >>> npmrc_auth_line("abc")
    '//registry.npmjs.org/:_authToken=abc'
    """
    parsed = urlparse(registry_url)
    path = parsed.path if parsed.path.endswith("/") else parsed.path + "/"
    return f"//{parsed.netloc}{path}:_authToken={token}"


def build_bundle(
    edition: Edition,
    artifact: Path,
    bundle_dir: Path,
    *,
    version: str,
    scope: str,
    token: str,
    repository: str,
    registry_url: str = DEFAULT_REGISTRY_URL,
) -> Path:
    """Create a fresh npm bundle directory for one edition.

    Any existing ``bundle_dir`` is destroyed first, so calling this twice for
    the same edition yields the same directory contents.

    Args:
        edition: Edition being packaged.
        artifact: Extracted ``.mmdb`` database.
        bundle_dir: Edition-scoped bundle directory.
        version: Run version.
        scope: npm scope, e.g. ``@geo-mmd``.
        token: npm token written to ``.npmrc``.
        repository: Repository URL for ``package.json``.
        registry_url: Registry the token belongs to.

    Returns:
        ``bundle_dir``.
    """
    shutil.rmtree(bundle_dir, ignore_errors=True)
    bundle_dir.mkdir(parents=True, exist_ok=True)

    package_json = build_package_json(
        edition,
        artifact.name,
        version=version,
        scope=scope,
        repository=repository,
    )
    (bundle_dir / "package.json").write_text(json.dumps(package_json, indent=2), encoding="utf-8")
    shutil.copyfile(artifact, bundle_dir / artifact.name)
    (bundle_dir / ".npmrc").write_text(npmrc_auth_line(token, registry_url) + "\n", encoding="utf-8")

    logger.info("Created npm bundle {}@{} in {}", package_json["name"], version, bundle_dir)
    return bundle_dir


def publish_bundle(bundle_dir: Path, *, dry_run: bool = False, npm_executable: str = "npm") -> None:
    """Run ``npm publish --access public`` inside ``bundle_dir``.

    Args:
        bundle_dir: Directory produced by :func:`build_bundle`.
        dry_run: Pass ``--dry-run`` so npm validates without uploading.
        npm_executable: Name or path of the npm binary.

    Raises:
        PublishError: If npm is not installed or exits non-zero.
    """
    npm_path = shutil.which(npm_executable)
    if npm_path is None:
        msg = f"npm executable not found: {npm_executable!r}"
        logger.error(msg)
        raise PublishError(msg)

    cmd = [npm_path, "publish", "--access", "public"]
    if dry_run:
        cmd.append("--dry-run")

    logger.info("Running {} in {}", " ".join(cmd[1:]), bundle_dir)
    result = subprocess.run(  # noqa: S603
        cmd,
        cwd=bundle_dir,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.stdout.strip():
        logger.info("npm: {}", result.stdout.strip())

    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or "no output"
        msg = f"npm publish exited with code {result.returncode}: {detail}"
        logger.error(msg)
        raise PublishError(msg, returncode=result.returncode)
