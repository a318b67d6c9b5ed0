# ABOUTME: Integration tests for parse_book over complete package trees.
# ABOUTME: Covers EPUB 2, EPUB 3, TOC-less, and ebooklib-built packages end to end.

import json
from pathlib import Path

import pytest

from folio import BookManifest, ChapterEntry, parse_book
from folio.errors import EmptySpineError, NoPackageDocumentError, PackageError, PathTraversalError
from tests.fixtures.packages import container_xml, ncx, opf, write_tree, xhtml


class TestEpub2Package:
    def test_manifest(self, epub2_root: Path) -> None:
        manifest = parse_book(epub2_root)
        assert manifest == BookManifest(
            title="The Name of the Rose",
            opf_path="OEBPS/content.opf",
            spine=("OEBPS/Text/chapter1.xhtml", "OEBPS/Text/chapter2.xhtml"),
            chapters=(
                ChapterEntry("First Day", "OEBPS/Text/chapter1.xhtml"),
                ChapterEntry("Second Day", "OEBPS/Text/chapter2.xhtml"),
            ),
            cover_href="OEBPS/Images/cover.jpg",
            vertical=False,
        )

    def test_parse_is_repeatable(self, epub2_root: Path) -> None:
        assert parse_book(epub2_root) == parse_book(epub2_root)

    def test_tree_is_not_modified(self, epub2_root: Path) -> None:
        before = {p: p.read_bytes() for p in epub2_root.rglob("*") if p.is_file()}
        parse_book(epub2_root)
        after = {p: p.read_bytes() for p in epub2_root.rglob("*") if p.is_file()}
        assert before == after


class TestEpub3Package:
    def test_nav_labels_and_cover_image(self, epub3_root: Path) -> None:
        manifest = parse_book(epub3_root)
        assert manifest.title == "Dune"
        assert manifest.opf_path == "package.opf"
        assert manifest.cover_href == "img/cover.png"
        assert [(c.title, c.href) for c in manifest.chapters] == [
            ("Part One", "part1.xhtml"),
            ("Part Two", "part2.xhtml"),
        ]

    def test_vertical_from_progression(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path, {
            "META-INF/container.xml": container_xml("content.opf"),
            "content.opf": opf(
                [("a", "a.xhtml")], ["a"], spine_attrs=' page-progression-direction="rtl"'
            ),
            "a.xhtml": xhtml("A"),
        })
        assert parse_book(root).vertical is True


class TestBarePackage:
    def test_spine_titles_and_defaults(self, bare_root: Path) -> None:
        manifest = parse_book(bare_root)
        assert manifest.title == "Untitled"
        assert manifest.opf_path == "book.opf"
        assert [c.title for c in manifest.chapters] == ["Introduction", "body", "missing"]
        assert manifest.cover_href is None
        assert manifest.vertical is False


class TestChapterInvariant:
    """Every manifest has exactly one chapter per spine entry, in order."""

    @pytest.mark.parametrize("fixture", ["epub2_root", "epub3_root", "bare_root"])
    def test_chapters_follow_spine(self, fixture: str, request: pytest.FixtureRequest) -> None:
        manifest = parse_book(request.getfixturevalue(fixture))
        assert len(manifest.chapters) == len(manifest.spine) > 0
        assert [c.href for c in manifest.chapters] == list(manifest.spine)

    def test_partial_ncx_is_filled_from_spine(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path, {
            "META-INF/container.xml": container_xml("content.opf"),
            "content.opf": opf(
                [("ncx", "toc.ncx"), ("a", "a.xhtml"), ("b", "b.xhtml"), ("c", "c.xhtml")],
                ["a", "b", "c"],
                toc="ncx",
            ),
            "toc.ncx": ncx([("Start", "a.xhtml", [])]),
            "a.xhtml": xhtml("A"),
            "b.xhtml": xhtml("Middle"),
            "c.xhtml": xhtml(None),
        })
        manifest = parse_book(root)
        assert [c.title for c in manifest.chapters] == ["Start", "Middle", "c"]


class TestEbooklibPackage:
    def test_real_archive(self, unpacked_ebooklib_epub: Path) -> None:
        manifest = parse_book(unpacked_ebooklib_epub)
        assert manifest.title == "The Name of the Rose"
        assert manifest.opf_path == "EPUB/content.opf"
        assert manifest.spine == ("EPUB/chap01.xhtml", "EPUB/chap02.xhtml")
        assert [c.title for c in manifest.chapters] == ["Prologue", "First Day"]

    def test_serialized_manifest(self, unpacked_ebooklib_epub: Path) -> None:
        data = json.loads(parse_book(unpacked_ebooklib_epub).to_json())
        assert data["opfPath"] == "EPUB/content.opf"
        assert data["vertical"] is False
        assert "coverHref" not in data


class TestTerminalErrors:
    """Terminal failures raise and never yield a partial manifest."""

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(NoPackageDocumentError):
            parse_book(tmp_path)

    def test_unresolvable_spine(self, tmp_path: Path) -> None:
        write_tree(tmp_path, {
            "META-INF/container.xml": container_xml("content.opf"),
            "content.opf": opf([("a", "a.xhtml")], ["ghost"]),
        })
        with pytest.raises(EmptySpineError) as excinfo:
            parse_book(tmp_path)
        assert excinfo.value.stage == "spine"

    def test_escaping_rootfile(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "book", {
            "META-INF/container.xml": container_xml("../outside.opf"),
        })
        write_tree(tmp_path, {"outside.opf": opf([("a", "a.xhtml")], ["a"])})
        with pytest.raises(PathTraversalError):
            parse_book(root)

    def test_errors_share_a_base(self, tmp_path: Path) -> None:
        with pytest.raises(PackageError):
            parse_book(tmp_path)
