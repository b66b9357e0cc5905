"""Error taxonomy for the import pipeline.

Per-file errors (``UnsupportedFormat``, ``ParseFailure``, ``EmptyDocument``)
are recovered by the importer and reported next to the lessons. Request
errors abort the whole request and map directly onto an HTTP status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lesson_import.models.lesson import FileFailure


class LessonImportError(Exception):
    """Base class for every error the pipeline raises on purpose."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FileError(LessonImportError):
    """An error scoped to a single uploaded file."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(message)
        self.filename = filename


class UnsupportedFormat(FileError):
    """The file extension is not one the readers understand."""


class ParseFailure(FileError):
    """A reader could not extract any content from the file."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(filename, f"Could not read '{filename}': {reason}")
        self.reason = reason


class EmptyDocument(FileError):
    """The document produced zero sections."""

    def __init__(self, filename: str) -> None:
        super().__init__(filename, f"No content found in '{filename}'")


class MalformedRequest(LessonImportError):
    """The request does not have the expected shape."""


class EmptyBatch(LessonImportError):
    """The request carried no files."""

    def __init__(self) -> None:
        super().__init__("No files uploaded")


class BatchTooLarge(LessonImportError):
    """The request carried more files than allowed."""

    def __init__(self, limit: int, actual: int) -> None:
        super().__init__(
            f"Too many files: {actual} uploaded, at most {limit} allowed per request"
        )
        self.limit = limit
        self.actual = actual


class ImportFailed(LessonImportError):
    """Every file in the batch failed."""

    def __init__(self, failures: list[FileFailure]) -> None:
        details = "; ".join(f"{f.file_name}: {f.error}" for f in failures)
        super().__init__(f"None of the uploaded files could be imported ({details})")
        self.failures = failures


class Unauthorized(LessonImportError):
    """No valid credentials were presented."""

    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class Forbidden(LessonImportError):
    """The caller is authenticated but lacks an allowed role."""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)
