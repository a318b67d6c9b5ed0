# ABOUTME: Parses the OPF package document into title, manifest, and spine.
# ABOUTME: Tolerates missing namespaces, duplicate ids, and dangling spine references.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from lxml import etree

from folio.errors import EmptySpineError, PackageReadError
from folio.markup import (
    MarkupError,
    attribute,
    children,
    first_child,
    parse_xml,
    text_content,
)
from folio.paths import href_dir, join_href, resolve_path, strip_fragment

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"


@dataclass(frozen=True)
class ManifestItem:
    """One resource declared in the package manifest.

    The href is kept exactly as written, relative to the package document.
    """

    id: str
    href: str
    properties: frozenset[str] = frozenset()
    media_type: str | None = None

    def has_property(self, name: str) -> bool:
        return name in self.properties


@dataclass(frozen=True)
class PackageDocument:
    """Everything the resolvers need from a parsed package document."""

    opf_path: str
    title: str
    items: dict[str, ManifestItem]
    spine: tuple[str, ...]
    toc_id: str | None = None
    meta: dict[str, str] = field(default_factory=dict)
    page_progression: str | None = None

    @property
    def base_dir(self) -> str:
        """Directory of the package document; manifest hrefs are relative to it."""
        return href_dir(self.opf_path)

    def item_href(self, item_id: str) -> str | None:
        """Package-root-relative href of a manifest item, or None if unknown."""
        item = self.items.get(item_id)
        if item is None:
            return None
        return join_href(self.base_dir, item.href)

    def find_item(self, prop: str) -> ManifestItem | None:
        """First manifest item, in declaration order, flagged with a property."""
        for item in self.items.values():
            if item.has_property(prop):
                return item
        return None


def _extract_title(metadata: etree._Element | None) -> str:
    """First non-empty dc:title (or bare title) in the metadata block."""
    title = text_content(children(metadata, "title"))
    return title or DEFAULT_TITLE


def _extract_meta(metadata: etree._Element | None) -> dict[str, str]:
    """Named <meta name=... content=...> entries; the first of each name wins."""
    entries: dict[str, str] = {}
    for node in children(metadata, "meta"):
        name = attribute(node, "name")
        content = attribute(node, "content")
        if name and content and name not in entries:
            entries[name] = content
    return entries


def _extract_items(manifest: etree._Element | None) -> dict[str, ManifestItem]:
    """Manifest items keyed by id. A repeated id replaces the earlier item."""
    items: dict[str, ManifestItem] = {}
    for node in children(manifest, "item"):
        item_id = attribute(node, "id")
        href = attribute(node, "href")
        if not item_id or not href:
            continue
        if item_id in items:
            logger.debug("Duplicate manifest id %r, keeping the later item", item_id)
        items[item_id] = ManifestItem(
            id=item_id,
            href=href.replace("\\", "/"),
            properties=frozenset((attribute(node, "properties") or "").split()),
            media_type=attribute(node, "media-type"),
        )
    return items


def parse_package(root: Path, opf_path: str) -> PackageDocument:
    """Parse the package document into a PackageDocument.

    Spine itemrefs are resolved through the manifest to hrefs relative to the
    package root. Itemrefs naming unknown ids are skipped.

    Args:
        root: The unpacked package root.
        opf_path: Package-relative path of the package document.

    Returns:
        The parsed PackageDocument.

    Raises:
        PackageReadError: If the package document cannot be read or parsed.
        EmptySpineError: If no spine entry resolves to a manifest href.
        PathTraversalError: If a spine href escapes the package root.
    """
    opf_abs = resolve_path(root, opf_path)
    try:
        package = parse_xml(opf_abs.read_bytes())
    except (OSError, MarkupError) as exc:
        raise PackageReadError(f"Failed to read package document {opf_path}: {exc}") from exc

    metadata = first_child(package, "metadata")
    items = _extract_items(first_child(package, "manifest"))
    spine_node = first_child(package, "spine")

    base_dir = href_dir(opf_path)
    spine: list[str] = []
    for itemref in children(spine_node, "itemref"):
        idref = attribute(itemref, "idref")
        item = items.get(idref) if idref else None
        if item is None:
            logger.debug("Skipping spine itemref %r with no manifest item", idref)
            continue
        href = join_href(base_dir, item.href)
        resolve_path(root, strip_fragment(href))
        spine.append(href)

    if not spine:
        raise EmptySpineError(f"Spine is empty (could not resolve itemrefs) in {opf_path}")

    return PackageDocument(
        opf_path=opf_path,
        title=_extract_title(metadata),
        items=items,
        spine=tuple(spine),
        toc_id=attribute(spine_node, "toc") if spine_node is not None else None,
        meta=_extract_meta(metadata),
        page_progression=(
            attribute(spine_node, "page-progression-direction")
            if spine_node is not None
            else None
        ),
    )
