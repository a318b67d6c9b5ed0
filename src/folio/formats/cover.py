# ABOUTME: Finds the cover image href of a package.
# ABOUTME: Tries the cover meta, then the cover-image manifest property, then the first page's image.

import logging
from pathlib import Path

from lxml import etree

from folio.errors import PathTraversalError
from folio.formats.documents import read_document
from folio.formats.package import PackageDocument
from folio.markup import MarkupError, attribute, descendants, local_name, parse_html
from folio.paths import href_dir, is_external, join_href, resolve_path, strip_fragment

logger = logging.getLogger(__name__)

COVER_META_NAME = "cover"
COVER_PROPERTY = "cover-image"


def _guarded(root: Path, href: str | None) -> str | None:
    """Return href if it stays inside the package, else None."""
    if not href:
        return None
    try:
        resolve_path(root, strip_fragment(href))
    except PathTraversalError:
        logger.debug("Ignoring cover candidate outside the package: %s", href)
        return None
    return href


def _cover_from_meta(package: PackageDocument) -> str | None:
    """EPUB 2 style: <meta name="cover" content="item-id"/>.

    Some packages put the image href in content instead of an id, so a
    content value matching a manifest href is accepted as well.
    """
    content = package.meta.get(COVER_META_NAME)
    if not content:
        return None
    href = package.item_href(content)
    if href is not None:
        return href
    for item in package.items.values():
        if item.href == content:
            return join_href(package.base_dir, item.href)
    return None


def _cover_from_property(package: PackageDocument) -> str | None:
    """EPUB 3 style: the manifest item flagged with properties="cover-image"."""
    item = package.find_item(COVER_PROPERTY)
    if item is None:
        return None
    return join_href(package.base_dir, item.href)


def _image_reference(node: etree._Element) -> str | None:
    if local_name(node.tag) == "img":
        return attribute(node, "src")
    return attribute(node, "href")


def _cover_from_first_page(root: Path, package: PackageDocument) -> str | None:
    """First <img> or SVG <image> in the first spine document, in document order."""
    first = package.spine[0]
    try:
        doc = parse_html(read_document(root, first))
    except (OSError, PathTraversalError, MarkupError) as exc:
        logger.debug("Cannot scan %s for a cover image: %s", first, exc)
        return None
    for node in descendants(doc, ("img", "image")):
        ref = _image_reference(node)
        if ref and not is_external(ref):
            return join_href(href_dir(first), ref)
    return None


def resolve_cover(root: Path, package: PackageDocument) -> str | None:
    """Locate the cover image, or None when the package has none we can find.

    Args:
        root: The unpacked package root.
        package: The parsed package document.

    Returns:
        Package-root-relative href of the cover image, or None.
    """
    cover = _guarded(root, _cover_from_meta(package))
    if cover is None:
        cover = _guarded(root, _cover_from_property(package))
    if cover is None:
        cover = _guarded(root, _cover_from_first_page(root, package))
    return cover
