"""Unit tests for the GeoLite2 edition catalogue."""

import pytest

from geolite_publisher.lib.maxmind.types import EDITIONS, Edition, package_name_for, resolve_editions


class TestEditions:
    """Tests for the EDITIONS catalogue."""

    def test_catalogue_order_is_fixed(self) -> None:
        assert [e.edition_id for e in EDITIONS] == ["GeoLite2-ASN", "GeoLite2-City", "GeoLite2-Country"]

    def test_package_names_are_lowercase_ids(self) -> None:
        assert [e.package_name for e in EDITIONS] == ["geolite2-asn", "geolite2-city", "geolite2-country"]

    def test_scoped_package_name(self) -> None:
        assert EDITIONS[1].scoped_package_name("@geo-mmd") == "@geo-mmd/geolite2-city"

    def test_package_name_for(self) -> None:
        assert package_name_for("GeoLite2-Country") == "geolite2-country"

    def test_rejects_invalid_edition_id(self) -> None:
        with pytest.raises(ValueError, match="Invalid edition_id"):
            Edition(edition_id="../etc", display_name="bad", package_name="bad")

    def test_rejects_uppercase_package_name(self) -> None:
        with pytest.raises(ValueError, match="lowercase"):
            Edition(edition_id="GeoLite2-City", display_name="City", package_name="GeoLite2-City")


class TestResolveEditions:
    """Tests for resolve_editions()."""

    def test_none_selects_all(self) -> None:
        assert resolve_editions(None) == list(EDITIONS)

    def test_empty_list_selects_all(self) -> None:
        assert resolve_editions([]) == list(EDITIONS)

    def test_keeps_catalogue_order(self) -> None:
        result = resolve_editions(["GeoLite2-Country", "GeoLite2-ASN"])
        assert [e.edition_id for e in result] == ["GeoLite2-ASN", "GeoLite2-Country"]

    def test_case_insensitive(self) -> None:
        result = resolve_editions(["geolite2-city"])
        assert [e.edition_id for e in result] == ["GeoLite2-City"]

    def test_unknown_edition_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown edition"):
            resolve_editions(["GeoLite2-Planet"])
