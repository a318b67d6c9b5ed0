# ABOUTME: Locates the package document (.opf) inside an unpacked EPUB.
# ABOUTME: Uses META-INF/container.xml, falling back to a directory scan.

import logging
from pathlib import Path

from folio.errors import MissingRootfileError, NoPackageDocumentError
from folio.markup import MarkupError, attribute, descendants, parse_xml
from folio.paths import resolve_path

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
PACKAGE_DOC_SUFFIX = ".opf"


def _rootfile_from_container(container: Path) -> str:
    """Return the first declared rootfile full-path in container.xml."""
    try:
        root = parse_xml(container.read_bytes())
    except (OSError, MarkupError) as exc:
        raise MissingRootfileError(f"Unreadable {CONTAINER_PATH}: {exc}") from exc

    for rootfile in descendants(root, "rootfile"):
        full_path = attribute(rootfile, "full-path")
        if full_path:
            return full_path.replace("\\", "/").lstrip("/")
    raise MissingRootfileError(f"No rootfile full-path declared in {CONTAINER_PATH}")


def _scan_for_package_document(root: Path, directory: Path | None = None) -> str | None:
    """Depth-first search for a .opf file, visiting entries in name order."""
    directory = directory or root
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.debug("Skipping unreadable directory %s: %s", directory, exc)
        return None
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            found = _scan_for_package_document(root, entry)
            if found:
                return found
        elif entry.is_file() and entry.name.lower().endswith(PACKAGE_DOC_SUFFIX):
            return entry.relative_to(root).as_posix()
    return None


def locate_package_document(root: Path) -> str:
    """Find the package document's path relative to the package root.

    Reads META-INF/container.xml when present and returns its first rootfile.
    Packages without a container descriptor are scanned for any .opf file.

    Args:
        root: The unpacked package root.

    Returns:
        Package-relative POSIX path of the package document.

    Raises:
        MissingRootfileError: If container.xml exists but names no rootfile.
        NoPackageDocumentError: If there is no container.xml and no .opf file.
        PathTraversalError: If the declared rootfile escapes the root.
    """
    container = resolve_path(root, CONTAINER_PATH)
    if container.is_file():
        opf_path = _rootfile_from_container(container)
        resolve_path(root, opf_path)
        return opf_path

    logger.debug("No %s under %s, scanning for %s", CONTAINER_PATH, root, PACKAGE_DOC_SUFFIX)
    opf_path = _scan_for_package_document(Path(root))
    if opf_path is None:
        raise NoPackageDocumentError(f"No package document found under {root}")
    return opf_path
