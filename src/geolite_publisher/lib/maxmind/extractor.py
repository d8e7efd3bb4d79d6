"""Unpack GeoLite2 archives and locate the ``.mmdb`` database inside.

MaxMind archives contain a single dated directory, e.g.
``GeoLite2-City_20261014/GeoLite2-City.mmdb``, next to license and readme
files.
"""

from __future__ import annotations

import shutil
import tarfile
from typing import TYPE_CHECKING

from loguru import logger

from geolite_publisher.core.errors import PublisherError
from geolite_publisher.lib.maxmind.types import MMDB_SUFFIX

if TYPE_CHECKING:
    from pathlib import Path


class ArtifactNotFoundError(PublisherError):
    """Raised when an archive does not contain the expected database file.

    Indicates an unexpected archive layout, so retrying does not help.
    """


def find_mmdb(extract_dir: Path, suffix: str = MMDB_SUFFIX) -> Path | None:
    """Search the top-level subdirectories of ``extract_dir`` for a database.

    Directories and the files inside them are visited in lexicographic
    order and the first file ending in ``suffix`` wins.

    Args:
        extract_dir: Directory an archive was unpacked into.
        suffix: File suffix of the database.

    Returns:
        Path of the first match, or None.
    """
    for subdir in sorted(p for p in extract_dir.iterdir() if p.is_dir()):
        for candidate in sorted(subdir.iterdir()):
            if candidate.is_file() and candidate.name.endswith(suffix):
                return candidate
    return None


def extract_archive(archive: Path, extract_dir: Path) -> Path:
    """Unpack ``archive`` into a fresh ``extract_dir`` and return the database path.

    Any previous contents of ``extract_dir`` are removed first so a stale
    database from an earlier run can never be picked up.

    Args:
        archive: Path of the downloaded ``tar.gz`` archive.
        extract_dir: Edition-scoped extraction directory.

    Returns:
        Path of the ``.mmdb`` file inside ``extract_dir``.

    Raises:
        ArtifactNotFoundError: If the archive is unreadable or contains no
            ``.mmdb`` file one level below its root.
    """
    shutil.rmtree(extract_dir, ignore_errors=True)
    extract_dir.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive, mode="r:gz") as tf:
            tf.extractall(extract_dir, filter="data")
    except (tarfile.TarError, EOFError) as exc:
        msg = f"Could not unpack {archive.name}: {exc}"
        logger.error(msg)
        raise ArtifactNotFoundError(msg) from exc

    mmdb_path = find_mmdb(extract_dir)
    if mmdb_path is None:
        msg = f"MMDB not found in {archive.name}"
        logger.error(msg)
        raise ArtifactNotFoundError(msg)

    logger.info("Found database {}", mmdb_path.relative_to(extract_dir))
    return mmdb_path
