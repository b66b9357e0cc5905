"""Tests for data models."""

import pytest
from pydantic import ValidationError

from lesson_import.models import (
    BlockDocument,
    CalloutBlock,
    CanonicalDocument,
    ContentType,
    ImportResult,
    LessonDraft,
    QuizBlock,
    RawUpload,
    TableBlock,
)


class TestRawUpload:
    def test_keeps_filename_and_bytes(self) -> None:
        upload = RawUpload(filename="Lecture 1.DOCX", data=b"\x00\xff")
        assert upload.filename == "Lecture 1.DOCX"
        assert upload.data == b"\x00\xff"


class TestCanonicalDocument:
    def test_is_immutable(self) -> None:
        doc = CanonicalDocument(suggested_title="T", html="<p>x</p>")
        with pytest.raises(ValidationError):
            doc.html = "<p>y</p>"  # type: ignore[misc]


class TestLessonDraft:
    def test_defaults(self) -> None:
        draft = LessonDraft(title="Intro", content="<p>Hi</p>")
        assert draft.type == "text"
        assert draft.order_index == 0
        assert draft.id

    def test_ids_are_unique(self) -> None:
        a = LessonDraft(title="A", content="")
        b = LessonDraft(title="B", content="")
        assert a.id != b.id

    def test_serializes_camel_case(self) -> None:
        data = LessonDraft(title="Intro", content="", order_index=2).model_dump(by_alias=True)
        assert data["orderIndex"] == 2
        assert "order_index" not in data


class TestImportResult:
    def test_serializes_camel_case(self) -> None:
        result = ImportResult(course_title="Course", sections_count=0)
        data = result.model_dump(by_alias=True, mode="json")
        assert data["courseTitle"] == "Course"
        assert data["sectionsCount"] == 0
        assert data["lessons"] == []
        assert data["failures"] == []

    def test_content_type_serializes_as_value(self) -> None:
        assert ContentType.LECTURE.value == "lecture"
        assert ContentType("summary") is ContentType.SUMMARY


class TestBlocks:
    def test_quiz_defaults_to_two_options(self) -> None:
        quiz = QuizBlock()
        assert len(quiz.options) == 2
        assert [o.is_correct for o in quiz.options] == [True, False]

    def test_quiz_does_not_enforce_single_correct(self) -> None:
        quiz = QuizBlock.model_validate(
            {"question": "?", "options": [{"text": "a", "isCorrect": True}, {"text": "b", "isCorrect": True}]}
        )
        assert all(o.is_correct for o in quiz.options)

    def test_discriminated_union(self) -> None:
        blocks = BlockDocument.validate_python(
            [
                {"id": "1", "type": "callout", "kind": "warning", "content": "Careful"},
                {"id": "2", "type": "table", "tableHtml": "<table></table>"},
            ]
        )
        assert isinstance(blocks[0], CalloutBlock)
        assert blocks[0].kind == "warning"
        assert isinstance(blocks[1], TableBlock)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlockDocument.validate_python([{"id": "1", "type": "carousel"}])

    def test_invalid_callout_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlockDocument.validate_python([{"type": "callout", "kind": "danger"}])
