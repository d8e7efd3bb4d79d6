"""Shared test fixtures for settings, run context and GeoLite2 archives."""

import io
import tarfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from geolite_publisher.core.config import Settings


@pytest.fixture
def fixed_now() -> datetime:
    """Clock value whose run version is ``2026.10.17-93005``."""
    return datetime(2026, 10, 17, 9, 30, 5, tzinfo=UTC)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test settings with all required credentials and R2 disabled."""
    return Settings(
        _env_file=None,
        maxmind_account_id="123456",
        maxmind_license_key="test-license-key",
        npm_token="npm-test-token",
        cloudflare_account_id=None,
        cloudflare_api_token=None,
        scratch_dir=str(tmp_path / "scratch"),
    )


@pytest.fixture
def r2_settings(settings: Settings) -> Settings:
    """Test settings with Cloudflare R2 credentials configured."""
    return settings.model_copy(
        update={"cloudflare_account_id": "cf-account", "cloudflare_api_token": "cf-token"},
    )


@pytest.fixture
def make_archive() -> Callable[..., bytes]:
    """Return a builder for in-memory GeoLite2-style tar.gz archives.

    By default the archive mirrors MaxMind's layout: a dated directory with
    the ``.mmdb`` database and a license file.
    """

    def _make(edition_id: str = "GeoLite2-City", files: dict[str, bytes] | None = None) -> bytes:
        if files is None:
            folder = f"{edition_id}_20261014"
            files = {
                f"{folder}/COPYRIGHT.txt": b"Database and Contents Copyright (c) MaxMind, Inc.",
                f"{folder}/LICENSE.txt": b"Creative Commons Attribution-ShareAlike 4.0",
                f"{folder}/{edition_id}.mmdb": f"mmdb-{edition_id}".encode(),
            }
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
            for name, data in files.items():
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o644
                tf.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return _make
