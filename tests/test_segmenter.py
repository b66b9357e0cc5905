"""Tests for the heading-aware lesson segmenter."""

import pytest

from lesson_import.config import SegmentationConfig
from lesson_import.ingestion.canonical import text_length
from lesson_import.ingestion.readers import DocumentReader
from lesson_import.ingestion.segmenter import (
    DEFAULT_SECTION_TITLE,
    LessonSegmenter,
    split_top_level,
)
from lesson_import.models.document import CanonicalDocument


@pytest.fixture
def segmenter() -> LessonSegmenter:
    return LessonSegmenter(SegmentationConfig())


def _doc(html: str, title: str = "Doc") -> CanonicalDocument:
    return CanonicalDocument(suggested_title=title, html=html)


def _paragraphs(count: int, size: int) -> str:
    return "\n".join(f"<p>{chr(ord('a') + i % 26) * size}</p>" for i in range(count))


# ── Top-level splitting ──────────────────────────────────────────────────────


class TestSplitTopLevel:
    def test_pieces_carry_stripped_length(self) -> None:
        pieces = split_top_level("<h2>Intro</h2>\n<p>Hello <strong>you</strong></p>")
        assert [p.heading for p in pieces] == ["Intro", None]
        assert [p.length for p in pieces] == [5, 9]

    def test_whitespace_between_elements_is_ignored(self) -> None:
        assert len(split_top_level("\n<p>a</p>\n\n<p>b</p>\n")) == 2


# ── Heading mode ─────────────────────────────────────────────────────────────


class TestSegmentByHeadings:
    def test_three_headings_three_sections(self, segmenter: LessonSegmenter) -> None:
        html = (
            "<h2>One</h2>\n<p>first</p>\n"
            "<h2>Two</h2>\n<p>second</p>\n"
            "<h2>Three</h2>\n<p>third</p>"
        )
        sections = segmenter.segment(_doc(html))
        assert [s.title for s in sections] == ["One", "Two", "Three"]
        assert sections[0].html == "<h2>One</h2>\n<p>first</p>"

    def test_scenario_from_html_upload(self, segmenter: LessonSegmenter) -> None:
        data = (
            b"<html><body><h2>Alpha</h2><p>a</p><h2>Beta</h2><p>b</p>"
            b"<h2>Gamma</h2><p>c</p></body></html>"
        )
        doc = DocumentReader().read(data, "lesson.html")
        sections = segmenter.segment(doc)
        assert [s.title for s in sections] == ["Alpha", "Beta", "Gamma"]

    def test_content_before_first_heading_gets_generic_title(self, segmenter: LessonSegmenter) -> None:
        sections = segmenter.segment(_doc("<p>preface</p>\n<h1>Chapter</h1>\n<p>body</p>"))
        assert [s.title for s in sections] == [DEFAULT_SECTION_TITLE, "Chapter"]

    def test_heading_whitespace_is_collapsed(self, segmenter: LessonSegmenter) -> None:
        sections = segmenter.segment(_doc("<h3>  Part \n one </h3>\n<p>x</p>"))
        assert sections[0].title == "Part one"

    def test_overflow_closes_section_early(self) -> None:
        segmenter = LessonSegmenter(SegmentationConfig(max_chars=10, overflow_ratio=1.6))
        html = "<h2>H</h2>\n<p>aaaaaaaaaa</p>\n<p>bbbbbbbbbb</p>"
        sections = segmenter.segment(_doc(html))
        assert [s.title for s in sections] == ["H", DEFAULT_SECTION_TITLE]
        assert sections[0].html == "<h2>H</h2>\n<p>aaaaaaaaaa</p>"
        assert sections[1].html == "<p>bbbbbbbbbb</p>"

    def test_heading_stays_with_first_block(self) -> None:
        segmenter = LessonSegmenter(SegmentationConfig(max_chars=5, overflow_ratio=1.0))
        sections = segmenter.segment(_doc("<h2>Title</h2>\n<p>far too long a paragraph</p>"))
        assert len(sections) == 1
        assert sections[0].title == "Title"

    def test_trailing_heading_becomes_own_section(self, segmenter: LessonSegmenter) -> None:
        sections = segmenter.segment(_doc("<h2>A</h2>\n<p>x</p>\n<h2>B</h2>"))
        assert [s.title for s in sections] == ["A", "B"]
        assert sections[1].html == "<h2>B</h2>"


# ── Paragraph mode ───────────────────────────────────────────────────────────


class TestSegmentByParagraphs:
    def test_two_paragraph_txt_is_one_section(self, segmenter: LessonSegmenter) -> None:
        doc = DocumentReader().read(b"First paragraph.\n\nSecond paragraph.", "notes.txt")
        assert doc.html.count("<p>") == 2
        sections = segmenter.segment(doc)
        assert len(sections) == 1
        assert sections[0].title == f"{DEFAULT_SECTION_TITLE} 1"

    def test_nested_heading_does_not_switch_mode(self, segmenter: LessonSegmenter) -> None:
        doc = _doc("<blockquote><h2>Quoted</h2></blockquote>\n" + _paragraphs(3, 10))
        sections = segmenter.segment(doc, max_chars=15)
        assert [s.title for s in sections] == [f"{DEFAULT_SECTION_TITLE} {i}" for i in range(1, 5)]
        assert sections[0].html == "<blockquote><h2>Quoted</h2></blockquote>"

    def test_accumulates_up_to_limit(self, segmenter: LessonSegmenter) -> None:
        sections = segmenter.segment(_doc(_paragraphs(3, 10)), max_chars=25)
        assert [s.title for s in sections] == ["Section 1", "Section 2"]
        assert sections[0].html.count("<p>") == 2
        assert sections[1].html.count("<p>") == 1

    def test_sections_respect_size_bound(self, segmenter: LessonSegmenter) -> None:
        sections = segmenter.segment(_doc(_paragraphs(40, 97)), max_chars=500)
        assert len(sections) > 1
        for section in sections:
            assert text_length(section.html) <= 500

    def test_oversize_paragraph_is_kept_whole(self, segmenter: LessonSegmenter) -> None:
        html = "<p>short</p>\n<p>" + "x" * 100 + "</p>\n<p>tail</p>"
        sections = segmenter.segment(_doc(html), max_chars=20)
        assert len(sections) == 3
        assert sections[1].html == "<p>" + "x" * 100 + "</p>"


# ── Shared guarantees ────────────────────────────────────────────────────────


class TestSegmenterGuarantees:
    @pytest.mark.parametrize(
        "html",
        [
            _paragraphs(25, 400),
            "<h1>A</h1>\n" + _paragraphs(30, 500) + "\n<h2>B</h2>\n<p>end</p>",
            "<p>intro</p>\n<h2>X</h2>\n<ul><li>1</li></ul>\n<table><tr><td>t</td></tr></table>",
        ],
    )
    def test_sections_cover_document_in_order(self, segmenter: LessonSegmenter, html: str) -> None:
        sections = segmenter.segment(_doc(html))
        assert "\n".join(s.html for s in sections) == html

    def test_empty_document_has_no_sections(self, segmenter: LessonSegmenter) -> None:
        assert segmenter.segment(_doc("")) == []

    def test_default_limit_comes_from_config(self) -> None:
        segmenter = LessonSegmenter(SegmentationConfig(max_chars=15))
        sections = segmenter.segment(_doc(_paragraphs(3, 10)))
        assert len(sections) == 3
