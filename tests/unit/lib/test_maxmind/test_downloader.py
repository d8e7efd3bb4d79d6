"""Unit tests for the MaxMind archive downloader."""

import base64
from pathlib import Path

import httpx
import pytest

from geolite_publisher.lib.maxmind.downloader import (
    USER_AGENT,
    FetchError,
    build_download_request,
    download_archive,
)

_URL = "https://download.maxmind.com/geoip/databases/GeoLite2-City/download?suffix=tar.gz"


class TestBuildDownloadRequest:
    """Tests for build_download_request()."""

    def test_basic_mode(self) -> None:
        url, params, auth = build_download_request("GeoLite2-City", account_id="123", license_key="key")
        assert url == "https://download.maxmind.com/geoip/databases/GeoLite2-City/download"
        assert params == {"suffix": "tar.gz"}
        assert auth == ("123", "key")

    def test_query_mode(self) -> None:
        url, params, auth = build_download_request(
            "GeoLite2-ASN", account_id="123", license_key="key", auth_mode="query"
        )
        assert url == "https://download.maxmind.com/app/geoip_download"
        assert params == {"edition_id": "GeoLite2-ASN", "license_key": "key", "suffix": "tar.gz"}
        assert auth is None

    def test_custom_base_url_trailing_slash(self) -> None:
        url, _, _ = build_download_request(
            "GeoLite2-City", account_id="1", license_key="k", base_url="https://mirror.example.com/"
        )
        assert url == "https://mirror.example.com/geoip/databases/GeoLite2-City/download"

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError, match="auth_mode"):
            build_download_request("GeoLite2-City", account_id="1", license_key="k", auth_mode="token")


class TestDownloadArchive:
    """Tests for download_archive()."""

    def test_successful_download(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        content = b"archive-bytes"
        httpx_mock.add_response(url=_URL, content=content)
        dest = tmp_path / "GeoLite2-City.tar.gz"

        result = download_archive("GeoLite2-City", dest, account_id="123", license_key="key")

        assert result == dest
        assert dest.read_bytes() == content
        assert not dest.with_suffix(".gz.part").exists()

    def test_sends_basic_auth_and_user_agent(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_URL, content=b"x")

        download_archive("GeoLite2-City", tmp_path / "a.tar.gz", account_id="123", license_key="key")

        request = httpx_mock.get_request()
        expected = base64.b64encode(b"123:key").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["User-Agent"] == USER_AGENT

    def test_query_mode_sends_license_key_param(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(
            url="https://download.maxmind.com/app/geoip_download?edition_id=GeoLite2-City&license_key=key&suffix=tar.gz",
            content=b"x",
        )

        download_archive("GeoLite2-City", tmp_path / "a.tar.gz", account_id="123", license_key="key", auth_mode="query")

        request = httpx_mock.get_request()
        assert "Authorization" not in request.headers

    def test_follows_redirect(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_URL, status_code=302, headers={"Location": "https://cdn.example.com/City.tar.gz"})
        httpx_mock.add_response(url="https://cdn.example.com/City.tar.gz", content=b"redirected")
        dest = tmp_path / "a.tar.gz"

        download_archive("GeoLite2-City", dest, account_id="123", license_key="key")

        assert dest.read_bytes() == b"redirected"

    def test_http_401_raises_fetch_error_with_details(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(
            url=_URL,
            status_code=401,
            json={"code": "ACCOUNT_ID_REQUIRED", "error": "Invalid account ID"},
        )
        dest = tmp_path / "a.tar.gz"

        with pytest.raises(FetchError, match="HTTP 401") as exc_info:
            download_archive("GeoLite2-City", dest, account_id="123", license_key="bad")

        assert exc_info.value.status_code == 401
        assert "ACCOUNT_ID_REQUIRED" in (exc_info.value.body or "")
        assert exc_info.value.headers is not None
        assert not dest.exists()

    def test_unfollowed_3xx_raises_fetch_error(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A 3xx that httpx does not follow is a fetch failure, not a crash."""
        httpx_mock.add_response(url=_URL, status_code=304)
        dest = tmp_path / "a.tar.gz"

        with pytest.raises(FetchError, match="HTTP 304") as exc_info:
            download_archive("GeoLite2-City", dest, account_id="123", license_key="key")

        assert exc_info.value.status_code == 304
        assert exc_info.value.body == ""
        assert not dest.exists()
        assert not dest.with_suffix(".gz.part").exists()

    def test_timeout_raises_fetch_error(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=_URL)
        dest = tmp_path / "a.tar.gz"

        with pytest.raises(FetchError, match="Timeout") as exc_info:
            download_archive("GeoLite2-City", dest, account_id="123", license_key="key")

        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)
        assert not dest.exists()
        assert not dest.with_suffix(".gz.part").exists()

    def test_connect_error_raises_fetch_error(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"), url=_URL)

        with pytest.raises(FetchError, match="Connection refused"):
            download_archive("GeoLite2-City", tmp_path / "a.tar.gz", account_id="123", license_key="key")
