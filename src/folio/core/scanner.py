# ABOUTME: Library scanner for directories of unpacked EPUB packages.
# ABOUTME: Finds package roots under a directory and parses each one.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from folio.core.pipeline import parse_book
from folio.errors import PackageError
from folio.formats.container import CONTAINER_PATH
from folio.manifest.types import BookManifest

logger = logging.getLogger(__name__)


@dataclass
class ScanEntry:
    """Outcome of parsing one package root found during a scan."""

    root: Path
    manifest: BookManifest | None = None
    error: str | None = None
    stage: str | None = None

    @property
    def ok(self) -> bool:
        return self.manifest is not None


@dataclass
class ScanResult:
    """Aggregated results from scanning a directory tree for package roots."""

    scan_root: Path
    entries: list[ScanEntry] = field(default_factory=list)

    @property
    def parsed(self) -> list[ScanEntry]:
        return [entry for entry in self.entries if entry.ok]

    @property
    def failed(self) -> list[ScanEntry]:
        return [entry for entry in self.entries if not entry.ok]


def is_package_root(path: Path) -> bool:
    """A package root is a directory holding META-INF/container.xml."""
    return (path / CONTAINER_PATH).is_file()


def find_package_roots(root: Path) -> list[Path]:
    """Walk root and return every package root below it, in path order.

    The walk does not descend into a package root once found, and does not
    follow directory symlinks.
    """
    found: list[Path] = []
    if is_package_root(root):
        return [root]
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.debug("Skipping unreadable directory %s: %s", root, exc)
        return found
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            found.extend(find_package_roots(entry))
    return found


def scan_library(root: Path) -> ScanResult:
    """Parse every package root under a directory.

    A package that fails to parse is recorded with its error and the stage
    that failed; the scan carries on with the next one.

    Args:
        root: The top-level directory to scan.

    Returns:
        A ScanResult with one entry per package root found.
    """
    result = ScanResult(scan_root=root)
    for package_root in find_package_roots(root):
        try:
            manifest = parse_book(package_root)
        except PackageError as exc:
            logger.warning("Failed to parse %s (%s stage): %s", package_root, exc.stage, exc)
            result.entries.append(
                ScanEntry(root=package_root, error=str(exc), stage=exc.stage)
            )
            continue
        result.entries.append(ScanEntry(root=package_root, manifest=manifest))
    return result
