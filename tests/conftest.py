# ABOUTME: Shared pytest fixtures for Folio tests.
# ABOUTME: Provides unpacked EPUB 2, EPUB 3, and TOC-less package trees.

import zipfile
from pathlib import Path

import pytest
from ebooklib import epub

from tests.fixtures.packages import container_xml, nav, ncx, opf, write_tree, xhtml


@pytest.fixture
def epub2_root(tmp_path: Path) -> Path:
    """An EPUB 2 style package under OEBPS/ with an NCX covering all chapters."""
    return write_tree(tmp_path / "epub2", {
        "mimetype": "application/epub+zip",
        "META-INF/container.xml": container_xml("OEBPS/content.opf"),
        "OEBPS/content.opf": opf(
            [
                ("ncx", "toc.ncx"),
                ("c1", "Text/chapter1.xhtml"),
                ("c2", "Text/chapter2.xhtml"),
                ("img", "Images/cover.jpg"),
            ],
            ["c1", "c2"],
            title="The Name of the Rose",
            toc="ncx",
            metadata_extra='<meta name="cover" content="img"/>',
        ),
        "OEBPS/toc.ncx": ncx([
            ("First Day", "Text/chapter1.xhtml", []),
            ("Second Day", "Text/chapter2.xhtml", []),
        ]),
        "OEBPS/Text/chapter1.xhtml": xhtml("One"),
        "OEBPS/Text/chapter2.xhtml": xhtml("Two"),
        "OEBPS/Images/cover.jpg": b"\xff\xd8\xff",
    })


@pytest.fixture
def epub3_root(tmp_path: Path) -> Path:
    """An EPUB 3 style package at the root with a nav document and cover-image item."""
    return write_tree(tmp_path / "epub3", {
        "META-INF/container.xml": container_xml("package.opf"),
        "package.opf": opf(
            [
                ("nav", "nav.xhtml", "nav"),
                ("p1", "part1.xhtml"),
                ("p2", "part2.xhtml"),
                ("cover", "img/cover.png", "cover-image"),
            ],
            ["p1", "p2"],
            title="Dune",
        ),
        "nav.xhtml": nav([("Part One", "part1.xhtml"), ("Part Two", "part2.xhtml#start")]),
        "part1.xhtml": xhtml("p1"),
        "part2.xhtml": xhtml("p2"),
        "img/cover.png": b"\x89PNG",
    })


@pytest.fixture
def bare_root(tmp_path: Path) -> Path:
    """A package with no TOC of any kind and no container.xml."""
    return write_tree(tmp_path / "bare", {
        "book.opf": opf(
            [("a", "intro.xhtml"), ("b", "body.xhtml"), ("c", "missing.xhtml")],
            ["a", "b", "c"],
            title=None,
        ),
        "intro.xhtml": xhtml("Introduction"),
        "body.xhtml": xhtml(None),
    })


@pytest.fixture
def unpacked_ebooklib_epub(tmp_path: Path) -> Path:
    """Build a real EPUB with ebooklib and unpack it into a directory."""
    book = epub.EpubBook()
    book.set_identifier("test-isbn-978-0-123456-47-2")
    book.set_title("The Name of the Rose")
    book.set_language("en")
    book.add_author("Umberto Eco")

    chapter1 = epub.EpubHtml(title="Prologue", file_name="chap01.xhtml", lang="en")
    chapter1.content = b"<html><body><h1>Prologue</h1><p>In the beginning.</p></body></html>"
    chapter2 = epub.EpubHtml(title="First Day", file_name="chap02.xhtml", lang="en")
    chapter2.content = b"<html><body><h1>First Day</h1><p>Prime.</p></body></html>"
    book.add_item(chapter1)
    book.add_item(chapter2)

    book.toc = [
        epub.Link("chap01.xhtml", "Prologue", "chap01"),
        epub.Link("chap02.xhtml", "First Day", "chap02"),
    ]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = [chapter1, chapter2]

    archive = tmp_path / "name_of_the_rose.epub"
    epub.write_epub(str(archive), book)

    root = tmp_path / "unpacked"
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(root)
    return root
