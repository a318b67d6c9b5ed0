# ABOUTME: Immutable value types describing a parsed book.
# ABOUTME: BookManifest is the interchange format handed to readers and storage.

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ChapterEntry:
    """One entry of the chapter list; href may carry a #fragment."""

    title: str
    href: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "href": self.href}


@dataclass(frozen=True)
class BookManifest:
    """Reading metadata for one unpacked package.

    Produced once per parse and never mutated. The spine is never empty and
    there is exactly one chapter per spine entry, in spine order. Hrefs are
    relative to the package root and have all passed the path guard.
    """

    title: str
    opf_path: str
    spine: tuple[str, ...]
    chapters: tuple[ChapterEntry, ...] = field(default_factory=tuple)
    cover_href: str | None = None
    vertical: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the stable field names downstream consumers read."""
        data: dict[str, Any] = {
            "title": self.title,
            "opfPath": self.opf_path,
            "spine": list(self.spine),
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }
        if self.cover_href is not None:
            data["coverHref"] = self.cover_href
        data["vertical"] = self.vertical
        return data

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookManifest":
        """Rebuild a manifest from its serialized form (e.g. a stored manifest.json).

        A missing ``vertical`` reads as False, as consumers treat it.
        """
        return cls(
            title=data["title"],
            opf_path=data["opfPath"],
            spine=tuple(data["spine"]),
            chapters=tuple(
                ChapterEntry(title=entry["title"], href=entry["href"])
                for entry in data.get("chapters") or []
            ),
            cover_href=data.get("coverHref"),
            vertical=bool(data.get("vertical", False)),
        )
