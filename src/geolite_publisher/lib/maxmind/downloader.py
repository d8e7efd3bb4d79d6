"""Authenticated download of GeoLite2 archives from MaxMind.

Streams the ``tar.gz`` archive for one edition to disk with a tqdm progress
bar. Uses a ``.part`` temporary file that is renamed on success, so a failed
download never leaves a truncated archive behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from loguru import logger
from tqdm import tqdm

from geolite_publisher.core.errors import PublisherError

if TYPE_CHECKING:
    from pathlib import Path

USER_AGENT = "geo-mmd-downloader/1.0"
DEFAULT_BASE_URL = "https://download.maxmind.com"

_MAX_REDIRECTS = 5
_CHUNK_SIZE = 64 * 1024
_MAX_LOGGED_BODY = 2000


class FetchError(PublisherError):
    """Raised when downloading an edition archive fails.

    Covers transport errors, timeouts and non-success status codes.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers
        self.body = body


def build_download_request(
    edition_id: str,
    *,
    account_id: str,
    license_key: str,
    auth_mode: str = "basic",
    base_url: str = DEFAULT_BASE_URL,
) -> tuple[str, dict[str, str], tuple[str, str] | None]:
    """Build the URL, query parameters and auth for an archive download.

    ``basic`` mode targets the current ``/geoip/databases`` endpoint with HTTP
    Basic auth. ``query`` mode targets the legacy ``/app/geoip_download``
    endpoint and sends the license key as a query parameter.

    Args:
        edition_id: MaxMind edition identifier.
        account_id: MaxMind account ID.
        license_key: MaxMind license key.
        auth_mode: ``basic`` or ``query``.
        base_url: Download service base URL.

    Returns:
        Tuple of (url, params, auth). ``auth`` is None in ``query`` mode.

    Raises:
        ValueError: If ``auth_mode`` is not recognised.
    """
    base = base_url.rstrip("/")
    if auth_mode == "basic":
        url = f"{base}/geoip/databases/{edition_id}/download"
        return url, {"suffix": "tar.gz"}, (account_id, license_key)
    if auth_mode == "query":
        url = f"{base}/app/geoip_download"
        params = {"edition_id": edition_id, "license_key": license_key, "suffix": "tar.gz"}
        return url, params, None
    msg = f"Unsupported auth_mode: {auth_mode!r}"
    raise ValueError(msg)


def download_archive(
    edition_id: str,
    dest: Path,
    *,
    account_id: str,
    license_key: str,
    auth_mode: str = "basic",
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 60.0,
) -> Path:
    """Download the ``tar.gz`` archive for one edition.

    Args:
        edition_id: MaxMind edition identifier (e.g. ``GeoLite2-City``).
        dest: Local path the archive is written to.
        account_id: MaxMind account ID.
        license_key: MaxMind license key.
        auth_mode: ``basic`` or legacy ``query`` authentication.
        base_url: Download service base URL.
        timeout: Request timeout in seconds.

    Returns:
        ``dest``, once the archive is fully written.

    Raises:
        FetchError: On timeouts, transport errors, non-2xx responses, or if
            the archive cannot be written.
    """
    url, params, auth = build_download_request(
        edition_id,
        account_id=account_id,
        license_key=license_key,
        auth_mode=auth_mode,
        base_url=base_url,
    )

    dest.parent.mkdir(parents=True, exist_ok=True)
    part_path = dest.with_suffix(dest.suffix + ".part")

    # The license key may be part of params, so only the bare URL is logged.
    logger.info("Downloading {} from {}...", edition_id, url)

    try:
        with (
            httpx.Client(
                timeout=timeout,
                follow_redirects=True,
                max_redirects=_MAX_REDIRECTS,
                headers={"User-Agent": USER_AGENT},
            ) as client,
            client.stream("GET", url, params=params, auth=auth) as response,
        ):
            if not response.is_success:
                response.read()
            response.raise_for_status()

            content_length = response.headers.get("content-length")
            logger.info("Response status: {}", response.status_code)
            logger.info("Content-Length: {}", content_length)
            total = int(content_length) if content_length and content_length.isdigit() else None

            with (
                part_path.open("wb") as f,
                tqdm(total=total, unit="B", unit_scale=True, desc=dest.name, leave=True) as pbar,
            ):
                for chunk in response.iter_bytes(chunk_size=_CHUNK_SIZE):
                    f.write(chunk)
                    pbar.update(len(chunk))

    except httpx.TimeoutException as exc:
        part_path.unlink(missing_ok=True)
        msg = f"Timeout downloading {edition_id}"
        logger.error(msg)
        raise FetchError(msg) from exc

    except httpx.HTTPStatusError as exc:
        part_path.unlink(missing_ok=True)
        status_code = exc.response.status_code
        headers = dict(exc.response.headers)
        body = exc.response.text
        msg = f"HTTP {status_code} downloading {edition_id}"
        logger.error(msg)
        logger.error("Status: {}", status_code)
        logger.error("Headers: {}", headers)
        logger.error("Data: {}", body[:_MAX_LOGGED_BODY])
        raise FetchError(msg, status_code=status_code, headers=headers, body=body) from exc

    except httpx.HTTPError as exc:
        part_path.unlink(missing_ok=True)
        msg = f"HTTP error downloading {edition_id}: {exc}"
        logger.error(msg)
        raise FetchError(msg) from exc

    except OSError as exc:
        part_path.unlink(missing_ok=True)
        msg = f"File write error for {dest.name}: {exc}"
        logger.error(msg)
        raise FetchError(msg) from exc

    part_path.replace(dest)
    logger.info("Downloaded {} successfully ({} bytes)", edition_id, dest.stat().st_size)
    return dest
