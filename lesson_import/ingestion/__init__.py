"""Document ingestion: reading, canonicalizing, segmenting and ordering."""

from lesson_import.ingestion.canonical import canonicalize, strip_tags
from lesson_import.ingestion.classifier import FileClassifier
from lesson_import.ingestion.importer import CourseImporter
from lesson_import.ingestion.readers import DocumentReader
from lesson_import.ingestion.segmenter import LessonSegmenter

__all__ = [
    "CourseImporter",
    "DocumentReader",
    "FileClassifier",
    "LessonSegmenter",
    "canonicalize",
    "strip_tags",
]
