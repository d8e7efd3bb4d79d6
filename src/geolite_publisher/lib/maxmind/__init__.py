"""MaxMind library: edition catalogue, archive download and extraction.

Public API for fetching GeoLite2 ``tar.gz`` archives from MaxMind and
locating the ``.mmdb`` database inside them.
"""

from geolite_publisher.lib.maxmind.downloader import FetchError, build_download_request, download_archive
from geolite_publisher.lib.maxmind.extractor import ArtifactNotFoundError, extract_archive, find_mmdb
from geolite_publisher.lib.maxmind.types import EDITIONS, MMDB_SUFFIX, Edition, package_name_for, resolve_editions

__all__ = [
    "EDITIONS",
    "MMDB_SUFFIX",
    "ArtifactNotFoundError",
    "Edition",
    "FetchError",
    "build_download_request",
    "download_archive",
    "extract_archive",
    "find_mmdb",
    "package_name_for",
    "resolve_editions",
]
