# ABOUTME: Markup parsing and node-coercion helpers built on lxml.
# ABOUTME: Normalizes namespaced XML and loose HTML into one lookup-by-local-name API.

import html
import re
from typing import Any

from lxml import etree
from lxml import html as lxml_html

_WHITESPACE_RE = re.compile(r"\s+")


class MarkupError(ValueError):
    """Raised when a document cannot be parsed into an element tree."""


def parse_xml(raw: bytes) -> etree._Element:
    """Parse XML bytes leniently, without entity expansion or network access."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=True)
    try:
        root = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MarkupError(str(exc)) from exc
    if root is None:
        raise MarkupError("Document has no root element")
    return root


def parse_html(raw: bytes) -> etree._Element:
    """Parse an (X)HTML document with the forgiving HTML parser.

    Namespaced XHTML comes back with plain tag names and prefixed attribute
    keys such as ``epub:type``, which attribute() matches by local name.
    """
    try:
        return lxml_html.document_fromstring(raw)
    except (etree.ParserError, ValueError) as exc:
        raise MarkupError(str(exc)) from exc


def local_name(tag: Any) -> str:
    """Tag or attribute name without its namespace or prefix.

    Comments and processing instructions have no string tag and yield ''.
    """
    if not isinstance(tag, str) or not tag:
        return ""
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    if ":" in tag:
        tag = tag.rsplit(":", 1)[1]
    return tag


def as_sequence(value: Any) -> list:
    """Coerce a missing, single, or repeated value into an ordered list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def text_content(node: Any) -> str:
    """Plain text of a node, with entities decoded and whitespace collapsed.

    Accepts an element, a string, a sequence (first usable entry wins), or
    None, so call sites never branch on the shape of what they found.
    Element text arrives already decoded by the parser; only raw strings
    are unescaped here.
    """
    if node is None:
        return ""
    if isinstance(node, str):
        text = html.unescape(node)
    elif isinstance(node, (list, tuple)):
        for entry in node:
            text = text_content(entry)
            if text:
                return text
        return ""
    else:
        text = "".join(node.itertext())
    return _WHITESPACE_RE.sub(" ", text).strip()


def children(node: etree._Element | None, name: str) -> list[etree._Element]:
    """Direct children of node whose local name matches, in document order."""
    if node is None:
        return []
    return [child for child in node if local_name(child.tag) == name]


def first_child(node: etree._Element | None, name: str) -> etree._Element | None:
    found = children(node, name)
    return found[0] if found else None


def descendants(
    node: etree._Element | None, names: str | list[str] | tuple[str, ...]
) -> list[etree._Element]:
    """All descendants (and node itself) matching any local name, in document order."""
    if node is None:
        return []
    wanted = set(as_sequence(names))
    return [el for el in node.iter() if local_name(el.tag) in wanted]


def attribute(node: etree._Element, name: str) -> str | None:
    """Attribute value matched by local name, stripped; None if absent or blank.

    An exact key match wins over a namespaced or prefixed one, so ``href``
    is preferred to ``xlink:href`` when both are present.
    """
    value = node.get(name)
    if value is None:
        for key, candidate in node.attrib.items():
            if local_name(key) == name:
                value = candidate
                break
    if value is None:
        return None
    return value.strip() or None


def attribute_tokens(node: etree._Element, name: str) -> set[str]:
    """Whitespace-separated tokens of an attribute, lowercased."""
    return {token.lower() for token in (attribute(node, name) or "").split()}
