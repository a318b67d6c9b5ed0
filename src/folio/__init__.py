# ABOUTME: Folio - reading metadata extraction for unpacked EPUB packages.
# ABOUTME: Exposes parse_book() and the BookManifest value it produces.

from folio.core.pipeline import parse_book
from folio.manifest.types import BookManifest, ChapterEntry

__all__ = ["BookManifest", "ChapterEntry", "parse_book"]
