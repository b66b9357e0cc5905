"""Classification and lesson output models."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentType(str, Enum):
    """Coarse content label used to order uploaded files."""

    LECTURE = "lecture"
    REFERENCE = "reference"
    SUMMARY = "summary"
    MIXED = "mixed"


class CamelModel(BaseModel):
    """Base for models that leave the service as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisInput(BaseModel):
    """One parsed file handed to the classifier."""

    title: str
    html: str
    file_name: str


class ClassifiedFile(CamelModel):
    """A parsed file annotated with structure statistics and a content label."""

    file_name: str
    title: str
    html: str
    word_count: int = 0
    has_headings: bool = False
    heading_count: int = 0
    has_tables: bool = False
    has_images: bool = False
    has_lists: bool = False
    content_type: ContentType = ContentType.MIXED


class FileAnalysis(CamelModel):
    """The part of a classification reported back to the caller."""

    file_name: str
    title: str
    word_count: int
    content_type: ContentType


class LessonDraft(CamelModel):
    """A lesson produced by an import, not yet persisted."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str = "text"
    title: str
    content: str
    order_index: int = 0


class FileFailure(CamelModel):
    """A file that was skipped, with a caller-safe reason."""

    file_name: str
    error: str


class ImportResult(CamelModel):
    """Outcome of one import request."""

    course_title: str
    lessons: list[LessonDraft] = Field(default_factory=list)
    sections_count: int = 0
    analysis: list[FileAnalysis] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
