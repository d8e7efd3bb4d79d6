"""Cloudflare R2 object uploads over the REST API.

Each database is uploaded twice: once under a version-qualified key and once
under a ``latest`` key that overwrites the previous run's object. The two
PUTs are independent and failures are reported, never raised.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import httpx
from loguru import logger

from geolite_publisher.lib.publisher.types import UploadResult

DEFAULT_API_URL = "https://api.cloudflare.com/client/v4"
LATEST_LABEL = "latest"

_CONTENT_TYPE = "application/octet-stream"
_MAX_LOGGED_BODY = 500


def object_keys(package_name: str, version: str, filename: str) -> tuple[str, str]:
    """Return the (versioned, latest) object keys for a database file.

    >>> object_keys("geolite2-city", "2026.10.17-93005", "GeoLite2-City.mmdb")
    ('geolite2-city/2026.10.17-93005/GeoLite2-City.mmdb', 'geolite2-city/latest/GeoLite2-City.mmdb')
    """
    return (
        f"{package_name}/{version}/{filename}",
        f"{package_name}/{LATEST_LABEL}/{filename}",
    )


def object_url(account_id: str, bucket: str, key: str, api_url: str = DEFAULT_API_URL) -> str:
    """Build the REST endpoint for one object in an R2 bucket."""
    return f"{api_url.rstrip('/')}/accounts/{account_id}/r2/buckets/{bucket}/objects/{quote(key, safe='/')}"


def put_object(client: httpx.Client, url: str, key: str, data: bytes) -> UploadResult:
    """PUT raw bytes to ``url`` and evaluate the response status.

    Args:
        client: httpx client carrying the bearer token.
        url: Object endpoint from :func:`object_url`.
        key: Object key, used for reporting.
        data: Object contents.

    Returns:
        An UploadResult; transport errors and non-2xx statuses yield
        ``success=False``.
    """
    try:
        response = client.put(url, content=data, headers={"Content-Type": _CONTENT_TYPE})
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        error = f"{type(exc).__name__}: {exc}"
        logger.error("R2 upload of {} failed: {}", key, error)
        return UploadResult(key=key, success=False, error=error)

    if response.is_success:
        logger.success("Uploaded {} ({} bytes) to R2", key, len(data))
        return UploadResult(key=key, success=True, status_code=response.status_code)

    error = f"HTTP {response.status_code}: {response.text[:_MAX_LOGGED_BODY]}"
    logger.error("R2 upload of {} failed: {}", key, error)
    return UploadResult(key=key, success=False, status_code=response.status_code, error=error)


def upload_artifact(
    artifact: Path,
    *,
    package_name: str,
    version: str,
    account_id: str,
    api_token: str,
    bucket: str,
    api_url: str = DEFAULT_API_URL,
    timeout: float = 300.0,
) -> list[UploadResult]:
    """Upload a database to its versioned and ``latest`` keys.

    The ``latest`` upload is attempted even when the versioned one fails.

    Args:
        artifact: Extracted ``.mmdb`` file.
        package_name: Unscoped package name, used as the key prefix.
        version: Run version.
        account_id: Cloudflare account ID.
        api_token: Cloudflare API token (sent as a bearer token).
        bucket: R2 bucket name.
        api_url: Cloudflare REST API base URL.
        timeout: Per-request timeout in seconds.

    Returns:
        One UploadResult per key, versioned first.
    """
    keys = object_keys(package_name, version, artifact.name)

    try:
        data = artifact.read_bytes()
    except OSError as exc:
        error = f"Could not read {artifact}: {exc}"
        logger.error(error)
        return [UploadResult(key=key, success=False, error=error) for key in keys]

    results: list[UploadResult] = []
    with httpx.Client(timeout=timeout, headers={"Authorization": f"Bearer {api_token}"}) as client:
        for key in keys:
            url = object_url(account_id, bucket, key, api_url=api_url)
            results.append(put_object(client, url, key, data))
    return results
