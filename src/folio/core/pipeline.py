# ABOUTME: Single-pass parse of an unpacked package into a BookManifest.
# ABOUTME: Wires container, package, TOC, cover, and direction readers together.

import logging
from collections.abc import Iterable
from pathlib import Path

from folio.formats.container import locate_package_document
from folio.formats.cover import resolve_cover
from folio.formats.direction import detect_vertical
from folio.formats.package import parse_package
from folio.formats.toc import resolve_chapters
from folio.manifest.types import BookManifest, ChapterEntry

logger = logging.getLogger(__name__)


def assemble_manifest(
    title: str,
    opf_path: str,
    spine: Iterable[str],
    chapters: Iterable[ChapterEntry],
    cover_href: str | None,
    vertical: bool,
) -> BookManifest:
    """Compose the final manifest value. Performs no I/O or validation."""
    return BookManifest(
        title=title,
        opf_path=opf_path,
        spine=tuple(spine),
        chapters=tuple(chapters),
        cover_href=cover_href,
        vertical=vertical,
    )


def parse_book(root: Path) -> BookManifest:
    """Extract reading metadata from an unpacked EPUB package.

    The package tree is only read, never modified. Parsing the same tree
    twice yields equal manifests.

    Args:
        root: Directory the EPUB archive was extracted into.

    Returns:
        The BookManifest for the package.

    Raises:
        PackageError: A subclass naming the stage that failed (container,
            package, spine, or path). No partial manifest is returned.
    """
    root = Path(root)
    opf_path = locate_package_document(root)
    package = parse_package(root, opf_path)

    chapters = resolve_chapters(root, package)
    cover_href = resolve_cover(root, package)
    vertical = detect_vertical(root, package)

    logger.info(
        "Parsed %s: %r, %d spine items, cover=%s, vertical=%s",
        opf_path,
        package.title,
        len(package.spine),
        cover_href or "none",
        vertical,
    )
    return assemble_manifest(
        title=package.title,
        opf_path=opf_path,
        spine=package.spine,
        chapters=chapters,
        cover_href=cover_href,
        vertical=vertical,
    )
