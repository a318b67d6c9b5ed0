# ABOUTME: Manifest package for the reading metadata produced by a parse.
# ABOUTME: Exports the BookManifest and ChapterEntry value types.

from folio.manifest.types import BookManifest, ChapterEntry

__all__ = ["BookManifest", "ChapterEntry"]
