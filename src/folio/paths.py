# ABOUTME: Path-safety guard and href helpers for package contents.
# ABOUTME: Every file access resolves through resolve_path() before touching disk.

import posixpath
from pathlib import Path
from urllib.parse import unquote, urlsplit

from folio.errors import PathTraversalError


def resolve_path(root: Path, rel_path: str) -> Path:
    """Resolve a package-relative path against root, refusing escapes.

    The href is percent-decoded and its separators normalized before joining,
    and symlinks are resolved on both sides so a link pointing outside the
    package is rejected too.

    Args:
        root: The package root directory.
        rel_path: A path taken from package contents (no fragment).

    Returns:
        The absolute path inside root.

    Raises:
        PathTraversalError: If the resolved path is not contained in root,
            or cannot be resolved at all (an encoded NUL byte, for one).
    """
    base = Path(root).resolve()
    try:
        candidate = (base / unquote(rel_path.replace("\\", "/"))).resolve()
    except (ValueError, OSError) as exc:
        raise PathTraversalError(f"Unusable path in package: {rel_path!r}") from exc
    if not candidate.is_relative_to(base):
        raise PathTraversalError(f"Path escapes package root: {rel_path}")
    return candidate


def strip_fragment(href: str) -> str:
    """Drop a trailing #fragment from an href."""
    return href.split("#", 1)[0]


def href_dir(href: str) -> str:
    """Directory part of a package-relative href, '' for the package root."""
    parent = posixpath.dirname(strip_fragment(href).replace("\\", "/"))
    return "" if parent in ("", ".") else parent


def join_href(base_dir: str, href: str) -> str:
    """Join an href to the directory of the document that declared it.

    Backslashes become forward slashes and dot segments are collapsed.
    A fragment on the href is carried over unchanged.
    """
    path, sep, fragment = href.replace("\\", "/").partition("#")
    if not path:
        return href
    joined = posixpath.normpath(posixpath.join(base_dir, path)) if base_dir else posixpath.normpath(path)
    return f"{joined}{sep}{fragment}"


def href_stem(href: str) -> str:
    """Base name of an href with its extension removed."""
    name = posixpath.basename(strip_fragment(href))
    stem, _ext = posixpath.splitext(name)
    return unquote(stem or name)


def is_external(href: str) -> bool:
    """Whether an href points outside the package (has a URL scheme)."""
    return bool(urlsplit(href.strip()).scheme)
