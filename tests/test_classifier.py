"""Tests for content-type classification, ordering and course titles."""

from itertools import permutations

import pytest

from lesson_import.config import ClassifierConfig
from lesson_import.ingestion.classifier import FileClassifier, filename_number
from lesson_import.models.lesson import AnalysisInput, ContentType


@pytest.fixture
def classifier() -> FileClassifier:
    return FileClassifier(ClassifierConfig())


def _input(file_name: str, html: str = "<p>short text</p>", title: str | None = None) -> AnalysisInput:
    return AnalysisInput(
        title=title if title is not None else file_name.rsplit(".", 1)[0],
        html=html,
        file_name=file_name,
    )


def _words(count: int) -> str:
    return " ".join(["word"] * count)


class TestFilenameNumber:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Lecture 12.docx", 12),
            ("part3-v2.txt", 3),
            ("intro.txt", None),
        ],
    )
    def test_first_integer_token(self, name: str, expected: int | None) -> None:
        assert filename_number(name) == expected


class TestAnalyze:
    def test_lecture_needs_length_and_headings(self, classifier: FileClassifier) -> None:
        html = f"<h2>Topic</h2><p>{_words(1600)}</p>"
        [result] = classifier.analyze([_input("a.txt", html)])
        assert result.content_type == ContentType.LECTURE
        assert result.has_headings
        assert result.heading_count == 1
        assert result.word_count == 1601

    def test_long_without_headings_is_mixed(self, classifier: FileClassifier) -> None:
        [result] = classifier.analyze([_input("a.txt", f"<p>{_words(1600)}</p>")])
        assert result.content_type == ContentType.MIXED

    def test_short_table_is_reference(self, classifier: FileClassifier) -> None:
        html = "<table><tr><td>term</td><td>meaning</td></tr></table>"
        [result] = classifier.analyze([_input("a.txt", html)])
        assert result.content_type == ContentType.REFERENCE
        assert result.has_tables

    def test_short_text_is_summary(self, classifier: FileClassifier) -> None:
        [result] = classifier.analyze([_input("a.txt", f"<p>{_words(40)}</p>")])
        assert result.content_type == ContentType.SUMMARY

    def test_medium_text_is_mixed(self, classifier: FileClassifier) -> None:
        html = f'<p>{_words(600)}</p><ul><li>x</li></ul><p><img src="a.png"></p>'
        [result] = classifier.analyze([_input("a.txt", html)])
        assert result.content_type == ContentType.MIXED
        assert result.has_lists
        assert result.has_images

    def test_preserves_input_order(self, classifier: FileClassifier) -> None:
        results = classifier.analyze([_input("b.txt"), _input("a.txt")])
        assert [r.file_name for r in results] == ["b.txt", "a.txt"]


class TestOrder:
    def test_type_priority(self, classifier: FileClassifier) -> None:
        files = [
            _input("summary.txt", f"<p>{_words(10)}</p>"),
            _input("reference.txt", "<table><tr><td>x</td></tr></table>"),
            _input("mixed.txt", f"<p>{_words(600)}</p>"),
            _input("lecture.txt", f"<h1>T</h1><p>{_words(1600)}</p>"),
        ]
        ordered = classifier.analyze_and_order(files)
        assert [f.content_type for f in ordered] == [
            ContentType.LECTURE,
            ContentType.MIXED,
            ContentType.REFERENCE,
            ContentType.SUMMARY,
        ]

    def test_filename_numbers_compare_numerically(self, classifier: FileClassifier) -> None:
        files = [_input("Lecture 10.txt"), _input("Lecture 2.txt"), _input("Lecture 1.txt")]
        ordered = classifier.analyze_and_order(files)
        assert [f.file_name for f in ordered] == ["Lecture 1.txt", "Lecture 2.txt", "Lecture 10.txt"]

    def test_titles_break_ties_case_insensitively(self, classifier: FileClassifier) -> None:
        files = [_input("b.txt", title="beta"), _input("a.txt", title="Alpha")]
        ordered = classifier.analyze_and_order(files)
        assert [f.title for f in ordered] == ["Alpha", "beta"]

    def test_cyrillic_titles_follow_alphabet_order(self, classifier: FileClassifier) -> None:
        files = [
            _input("a.txt", title="Яблоко"),
            _input("b.txt", title="Ёлка"),
            _input("c.txt", title="Елка"),
            _input("d.txt", title="Жук"),
        ]
        ordered = classifier.analyze_and_order(files)
        assert [f.title for f in ordered] == ["Елка", "Ёлка", "Жук", "Яблоко"]

    def test_order_independent_of_input_order(self, classifier: FileClassifier) -> None:
        files = [
            _input("Lecture 3.txt"),
            _input("Intro.txt"),
            _input("Lecture 1.txt"),
            _input("notes 2.txt", f"<p>{_words(600)}</p>"),
            _input("Appendix.txt", "<table><tr><td>x</td></tr></table>"),
        ]
        expected = [f.file_name for f in classifier.analyze_and_order(files)]
        for permutation in permutations(files):
            ordered = classifier.analyze_and_order(list(permutation))
            assert [f.file_name for f in ordered] == expected


class TestSuggestCourseTitle:
    def test_common_prefix_is_cleaned(self, classifier: FileClassifier) -> None:
        ordered = classifier.analyze_and_order(
            [_input("Lecture 1 Intro.docx"), _input("Lecture 2 Body.docx")]
        )
        assert classifier.suggest_course_title(ordered) == "Lecture"

    def test_short_prefix_falls_back_to_first_title(self, classifier: FileClassifier) -> None:
        ordered = classifier.analyze_and_order(
            [_input("1.txt", title="Alpha"), _input("2.txt", title="Beta")]
        )
        assert classifier.suggest_course_title(ordered) == "Alpha"

    def test_single_file_keeps_title(self, classifier: FileClassifier) -> None:
        ordered = classifier.analyze_and_order([_input("Lecture 1.txt")])
        assert classifier.suggest_course_title(ordered) == "Lecture 1"

    def test_no_files(self, classifier: FileClassifier) -> None:
        assert classifier.suggest_course_title([]) == ""
