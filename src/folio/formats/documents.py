# ABOUTME: Best-effort access to content documents inside a package.
# ABOUTME: Reads files through the path guard and derives display labels.

import logging
from pathlib import Path

from folio.errors import PathTraversalError
from folio.markup import MarkupError, descendants, parse_html, text_content
from folio.paths import href_stem, resolve_path, strip_fragment

logger = logging.getLogger(__name__)


def read_document(root: Path, href: str) -> bytes:
    """Read a package file named by a root-relative href (fragment ignored).

    Raises:
        PathTraversalError: If the href escapes the package root.
        OSError: If the file is missing or unreadable.
    """
    return resolve_path(root, strip_fragment(href)).read_bytes()


def document_title(root: Path, href: str) -> str | None:
    """Text of a content document's <title>, or None if it cannot be had."""
    try:
        doc = parse_html(read_document(root, href))
    except (OSError, PathTraversalError, MarkupError) as exc:
        logger.debug("No title from %s: %s", href, exc)
        return None
    return text_content(descendants(doc, "title")) or None


def fallback_label(href: str, index: int) -> str:
    """Label for a document with no title: its base name, else 'Chapter N' (1-based)."""
    return href_stem(href) or f"Chapter {index + 1}"
