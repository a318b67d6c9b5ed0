# ABOUTME: Heuristic detection of vertical (or right-to-left) page layout.
# ABOUTME: Looks at the first spine document and its stylesheets, then the package spine.

import logging
import re
from pathlib import Path

from folio.errors import PathTraversalError
from folio.formats.documents import read_document
from folio.formats.package import PackageDocument
from folio.markup import MarkupError, attribute, attribute_tokens, descendants, parse_html
from folio.paths import href_dir, is_external, join_href

logger = logging.getLogger(__name__)

# Covers writing-mode, -epub-writing-mode and -webkit-writing-mode.
VERTICAL_STYLE_RE = re.compile(
    r"writing-mode\s*:\s*(?:vertical|tb)|vertical-(?:rl|lr)", re.IGNORECASE
)
RTL_PROGRESSION_RE = re.compile(r"page-progression-direction\s*=\s*[\"']rtl[\"']", re.IGNORECASE)


def _linked_stylesheets(raw: bytes, doc_href: str) -> list[str]:
    """Hrefs of <link rel="stylesheet"> elements, resolved against the document."""
    try:
        doc = parse_html(raw)
    except MarkupError:
        return []
    sheets = []
    for link in descendants(doc, "link"):
        href = attribute(link, "href")
        if href and "stylesheet" in attribute_tokens(link, "rel") and not is_external(href):
            sheets.append(join_href(href_dir(doc_href), href))
    return sheets


def _first_document_is_vertical(root: Path, first: str) -> bool:
    try:
        raw = read_document(root, first)
    except (OSError, PathTraversalError) as exc:
        logger.debug("Cannot read %s for direction detection: %s", first, exc)
        return False

    text = raw.decode("utf-8", errors="replace")
    if VERTICAL_STYLE_RE.search(text) or RTL_PROGRESSION_RE.search(text):
        return True

    for sheet in _linked_stylesheets(raw, first):
        try:
            css = read_document(root, sheet).decode("utf-8", errors="replace")
        except (OSError, PathTraversalError) as exc:
            logger.debug("Skipping stylesheet %s: %s", sheet, exc)
            continue
        if VERTICAL_STYLE_RE.search(css):
            return True
    return False


def detect_vertical(root: Path, package: PackageDocument) -> bool:
    """Whether the book should be laid out vertically.

    True if the first spine document (or a stylesheet it links) declares a
    vertical writing mode or right-to-left page progression, or if the
    package spine declares page-progression-direction="rtl". Never raises.
    """
    if _first_document_is_vertical(root, package.spine[0]):
        return True
    return (package.page_progression or "").lower() == "rtl"
