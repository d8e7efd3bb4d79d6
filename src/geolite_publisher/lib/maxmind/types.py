"""Data types for the maxmind library.

Defines the fixed catalogue of GeoLite2 editions that are republished.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_EDITION_ID_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]*")

MMDB_SUFFIX = ".mmdb"


def package_name_for(edition_id: str) -> str:
    """Derive the unscoped npm package name for an edition.

    npm package names must be lowercase, so ``GeoLite2-City`` becomes
    ``geolite2-city``.
    """
    return edition_id.lower()


@dataclass(frozen=True)
class Edition:
    """A single GeoLite2 database product.

    Attributes:
        edition_id: MaxMind edition identifier (e.g. ``GeoLite2-City``).
        display_name: Human-readable name.
        package_name: Unscoped npm package name.
    """

    edition_id: str
    display_name: str
    package_name: str

    def __post_init__(self) -> None:
        if not _EDITION_ID_RE.fullmatch(self.edition_id):
            msg = f"Invalid edition_id: {self.edition_id!r}"
            raise ValueError(msg)
        if self.package_name != package_name_for(self.package_name):
            msg = f"package_name must be lowercase, got {self.package_name!r}"
            raise ValueError(msg)

    @classmethod
    def from_id(cls, edition_id: str, display_name: str) -> Edition:
        """Build an edition whose package name is derived from its id."""
        return cls(edition_id=edition_id, display_name=display_name, package_name=package_name_for(edition_id))

    def scoped_package_name(self, scope: str) -> str:
        """Return the full npm name, e.g. ``@geo-mmd/geolite2-city``."""
        return f"{scope}/{self.package_name}"


EDITIONS: tuple[Edition, ...] = (
    Edition.from_id("GeoLite2-ASN", "GeoLite2 ASN"),
    Edition.from_id("GeoLite2-City", "GeoLite2 City"),
    Edition.from_id("GeoLite2-Country", "GeoLite2 Country"),
)


def resolve_editions(edition_ids: list[str] | None = None) -> list[Edition]:
    """Select editions from the catalogue, keeping catalogue order.

    Args:
        edition_ids: Edition ids to keep (case-insensitive). ``None`` or an
            empty list selects every edition.

    Returns:
        The matching editions in catalogue order.

    Raises:
        ValueError: If an id is not in the catalogue.
    """
    if not edition_ids:
        return list(EDITIONS)

    known = {edition.edition_id.lower(): edition for edition in EDITIONS}
    wanted = {edition_id.lower() for edition_id in edition_ids}
    unknown = sorted(wanted - known.keys())
    if unknown:
        valid = ", ".join(edition.edition_id for edition in EDITIONS)
        msg = f"Unknown edition(s): {', '.join(unknown)}. Valid options: {valid}"
        raise ValueError(msg)

    return [edition for edition in EDITIONS if edition.edition_id.lower() in wanted]
