# ABOUTME: Builds the chapter list from NCX, the EPUB 3 nav document, or the spine itself.
# ABOUTME: Discovered labels are merged onto the spine so every spine entry gets one chapter.

import logging
from collections.abc import Callable
from pathlib import Path
from urllib.parse import unquote

from lxml import etree

from folio.errors import PathTraversalError
from folio.formats.documents import document_title, fallback_label, read_document
from folio.formats.package import ManifestItem, PackageDocument
from folio.manifest.types import ChapterEntry
from folio.markup import (
    MarkupError,
    attribute,
    attribute_tokens,
    children,
    descendants,
    first_child,
    parse_html,
    parse_xml,
    text_content,
)
from folio.paths import href_dir, is_external, join_href, resolve_path, strip_fragment

logger = logging.getLogger(__name__)

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
NAV_PROPERTY = "nav"
TOC_NAV_TYPES = frozenset({"toc", "doc-toc"})

TocTier = Callable[[Path, PackageDocument], list[ChapterEntry]]


def _toc_entry(root: Path, base_dir: str, title: str, target: str | None) -> ChapterEntry | None:
    """Build an entry for a TOC link, or None if it is unusable.

    Links without a label or target, links leaving the package by URL
    scheme, and links escaping the package root are dropped.
    """
    if not title or not target or is_external(target):
        return None
    href = join_href(base_dir, target)
    try:
        resolve_path(root, strip_fragment(href))
    except PathTraversalError:
        logger.debug("Dropping TOC link outside the package: %s", target)
        return None
    return ChapterEntry(title=title, href=href)


def _ncx_item(package: PackageDocument) -> ManifestItem | None:
    """The NCX named by the spine's toc attribute, else any item typed as NCX."""
    if package.toc_id and package.toc_id in package.items:
        return package.items[package.toc_id]
    for item in package.items.values():
        if item.media_type == NCX_MEDIA_TYPE:
            return item
    return None


def read_ncx_entries(root: Path, package: PackageDocument) -> list[ChapterEntry]:
    """Flatten the NCX navMap depth-first, pre-order, in document order.

    navPoints missing a label or a content src are skipped but their
    children are still visited.
    """
    item = _ncx_item(package)
    if item is None:
        return []
    ncx_href = join_href(package.base_dir, item.href)
    try:
        ncx = parse_xml(read_document(root, ncx_href))
    except (OSError, PathTraversalError, MarkupError) as exc:
        logger.debug("Ignoring unreadable NCX %s: %s", ncx_href, exc)
        return []

    nav_map = first_child(ncx, "navMap")
    if nav_map is None:
        nav_map = next(iter(descendants(ncx, "navMap")), None)

    base_dir = href_dir(ncx_href)
    entries: list[ChapterEntry] = []
    stack = list(reversed(children(nav_map, "navPoint")))
    while stack:
        point = stack.pop()
        label = text_content(children(first_child(point, "navLabel"), "text"))
        content = first_child(point, "content")
        src = attribute(content, "src") if content is not None else None
        entry = _toc_entry(root, base_dir, label, src)
        if entry is not None:
            entries.append(entry)
        stack.extend(reversed(children(point, "navPoint")))
    return entries


def _toc_block(doc: etree._Element) -> etree._Element:
    """The <nav> marked as the table of contents, or the whole document."""
    for nav in descendants(doc, "nav"):
        if (attribute_tokens(nav, "type") | attribute_tokens(nav, "role")) & TOC_NAV_TYPES:
            return nav
    return doc


def read_nav_entries(root: Path, package: PackageDocument) -> list[ChapterEntry]:
    """Every link in the nav document's toc block, in document order."""
    item = package.find_item(NAV_PROPERTY)
    if item is None:
        return []
    nav_href = join_href(package.base_dir, item.href)
    try:
        doc = parse_html(read_document(root, nav_href))
    except (OSError, PathTraversalError, MarkupError) as exc:
        logger.debug("Ignoring unreadable nav document %s: %s", nav_href, exc)
        return []

    base_dir = href_dir(nav_href)
    entries: list[ChapterEntry] = []
    for link in descendants(_toc_block(doc), "a"):
        entry = _toc_entry(root, base_dir, text_content(link), attribute(link, "href"))
        if entry is not None:
            entries.append(entry)
    return entries


def _spine_title(root: Path, href: str, index: int) -> str:
    return document_title(root, href) or fallback_label(href, index)


def scrape_spine_titles(root: Path, spine: tuple[str, ...]) -> list[ChapterEntry]:
    """One chapter per spine entry, titled from each document itself."""
    return [
        ChapterEntry(title=_spine_title(root, href, index), href=href)
        for index, href in enumerate(spine)
    ]


def _match_key(href: str) -> str:
    return unquote(strip_fragment(href))


def merge_with_spine(
    root: Path, spine: tuple[str, ...], entries: list[ChapterEntry]
) -> list[ChapterEntry]:
    """Project TOC entries onto the spine.

    Each spine document takes the label of the earliest TOC entry pointing
    at it (fragments ignored). Documents the TOC does not mention fall back
    to their own <title>, then their file name, then "Chapter N".
    """
    titles: dict[str, str] = {}
    for entry in entries:
        titles.setdefault(_match_key(entry.href), entry.title)

    return [
        ChapterEntry(
            title=titles.get(_match_key(href)) or _spine_title(root, href, index),
            href=href,
        )
        for index, href in enumerate(spine)
    ]


TOC_TIERS: tuple[TocTier, ...] = (read_ncx_entries, read_nav_entries)


def resolve_chapters(root: Path, package: PackageDocument) -> list[ChapterEntry]:
    """Produce exactly one chapter per spine entry, in spine order.

    The first TOC tier that yields any entries supplies the labels: the
    legacy NCX first, then the EPUB 3 nav document. With neither, every
    spine document is titled from its own contents.

    Tier entries are always projected onto the spine, even when the TOC
    has more entries than the spine. Readers index chapters by spine
    position, so sub-entries pointing at #fragments inside one document
    only contribute a label and never become chapters of their own.
    """
    for tier in TOC_TIERS:
        entries = tier(root, package)
        if entries:
            logger.debug(
                "%s found %d entries for %d spine items",
                tier.__name__,
                len(entries),
                len(package.spine),
            )
            return merge_with_spine(root, package.spine, entries)
    logger.debug("No usable TOC in %s, titling spine documents directly", package.opf_path)
    return scrape_spine_titles(root, package.spine)
