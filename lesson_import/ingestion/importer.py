"""Batch import: uploads in, ordered lesson drafts out."""

import logging

from lesson_import.config import AppConfig
from lesson_import.errors import BatchTooLarge, EmptyBatch, EmptyDocument, FileError, ImportFailed
from lesson_import.ingestion.classifier import FileClassifier
from lesson_import.ingestion.readers import DocumentReader
from lesson_import.ingestion.segmenter import LessonSegmenter
from lesson_import.models.document import CanonicalDocument, RawUpload, Section
from lesson_import.models.lesson import (
    AnalysisInput,
    FileAnalysis,
    FileFailure,
    ImportResult,
    LessonDraft,
)

logger = logging.getLogger(__name__)


class CourseImporter:
    """Turns a batch of uploaded files into an ordered list of lesson drafts.

    Files are read one after another, never in parallel: parsing several
    large DOCX files at once exceeds the CPU budget of the hosting process.
    A file that fails is recorded and skipped; the batch only fails when
    no file could be imported.

    Args:
        config: Application configuration.
        reader: Optional reader instance, mainly for tests.
    """

    def __init__(self, config: AppConfig, reader: DocumentReader | None = None) -> None:
        self._config = config
        self._reader = reader or DocumentReader()
        self._segmenter = LessonSegmenter(config.segmentation)
        self._classifier = FileClassifier(config.classifier)

    def run(self, uploads: list[RawUpload]) -> ImportResult:
        """Import a batch of uploads.

        Args:
            uploads: Files in the order they were received.

        Returns:
            The lessons, course title suggestion, per-file analysis and
            per-file failures.

        Raises:
            EmptyBatch: If no files were uploaded.
            BatchTooLarge: If the batch exceeds the configured limit.
            ImportFailed: If every file failed.
        """
        limit = self._config.import_.max_files_per_request
        if not uploads:
            raise EmptyBatch()
        if len(uploads) > limit:
            raise BatchTooLarge(limit=limit, actual=len(uploads))

        logger.info("Importing %d file(s)", len(uploads))

        inputs: list[AnalysisInput] = []
        sections: list[list[Section]] = []
        failures: list[FileFailure] = []

        for upload in uploads:
            try:
                document, file_sections = self._process(upload)
            except FileError as exc:
                logger.warning("Skipping %s: %s", upload.filename, exc.message)
                failures.append(FileFailure(file_name=upload.filename, error=exc.message))
                continue
            inputs.append(
                AnalysisInput(
                    title=document.suggested_title,
                    html=document.html,
                    file_name=upload.filename,
                )
            )
            sections.append(file_sections)

        if not inputs:
            raise ImportFailed(failures)

        classified = self._classifier.analyze(inputs)
        sections_by_file = {id(c): s for c, s in zip(classified, sections)}
        ordered = self._classifier.order(classified)

        drafts: list[tuple[str, str]] = []
        for file in ordered:
            if self._config.import_.split_sections:
                drafts.extend((s.title, s.html) for s in sections_by_file[id(file)])
            else:
                drafts.append((file.title, file.html))

        lessons = [
            LessonDraft(title=title, content=content, order_index=index)
            for index, (title, content) in enumerate(drafts)
        ]

        result = ImportResult(
            course_title=self._classifier.suggest_course_title(ordered),
            lessons=lessons,
            sections_count=len(lessons),
            analysis=[
                FileAnalysis(
                    file_name=f.file_name,
                    title=f.title,
                    word_count=f.word_count,
                    content_type=f.content_type,
                )
                for f in ordered
            ],
            failures=failures,
        )
        logger.info(
            "Imported %d lesson(s) from %d file(s), %d failed",
            len(lessons),
            len(inputs),
            len(failures),
        )
        return result

    def _process(self, upload: RawUpload) -> tuple[CanonicalDocument, list[Section]]:
        document = self._reader.read_upload(upload)
        file_sections = self._segmenter.segment(document)
        if not file_sections:
            raise EmptyDocument(upload.filename)
        return document, file_sections
