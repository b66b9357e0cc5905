"""Data models for the lesson import service."""

from lesson_import.models.blocks import (
    AccordionBlock,
    BlockDocument,
    BulletListBlock,
    CalloutBlock,
    ContentBlock,
    Heading1Block,
    Heading2Block,
    ImageBlock,
    NumberedListBlock,
    ParagraphBlock,
    QuizBlock,
    QuizOption,
    QuoteBlock,
    TableBlock,
    TermBlock,
    VideoBlock,
)
from lesson_import.models.document import CanonicalDocument, RawUpload, Section
from lesson_import.models.lesson import (
    AnalysisInput,
    ClassifiedFile,
    ContentType,
    FileAnalysis,
    FileFailure,
    ImportResult,
    LessonDraft,
)

__all__ = [
    "AccordionBlock",
    "AnalysisInput",
    "BlockDocument",
    "BulletListBlock",
    "CalloutBlock",
    "CanonicalDocument",
    "ClassifiedFile",
    "ContentBlock",
    "ContentType",
    "FileAnalysis",
    "FileFailure",
    "Heading1Block",
    "Heading2Block",
    "ImageBlock",
    "ImportResult",
    "LessonDraft",
    "NumberedListBlock",
    "ParagraphBlock",
    "QuizBlock",
    "QuizOption",
    "QuoteBlock",
    "RawUpload",
    "Section",
    "TableBlock",
    "TermBlock",
    "VideoBlock",
]
