"""Content-type classification, ordering and course title suggestion."""

import logging
import re
from functools import cmp_to_key, lru_cache

from bs4 import BeautifulSoup
from pyuca import Collator

from lesson_import.config import ClassifierConfig
from lesson_import.ingestion.canonical import HEADING_TAGS
from lesson_import.models.lesson import AnalysisInput, ClassifiedFile, ContentType

logger = logging.getLogger(__name__)

# Display order: lower comes first
CONTENT_TYPE_PRIORITY: dict[ContentType, int] = {
    ContentType.LECTURE: 0,
    ContentType.MIXED: 1,
    ContentType.REFERENCE: 2,
    ContentType.SUMMARY: 3,
}

_NUMBER_RE = re.compile(r"\d+")
_TITLE_TAIL_RE = re.compile(r"[\d\W_]+$")


def filename_number(file_name: str) -> int | None:
    """Return the first integer token in a filename, if any."""
    match = _NUMBER_RE.search(file_name)
    return int(match.group()) if match else None


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loads the Unicode collation table once per process
    return Collator()


def _title_key(title: str) -> tuple[int, ...]:
    return _collator().sort_key(title)


def _compare(a: ClassifiedFile, b: ClassifiedFile) -> int:
    diff = CONTENT_TYPE_PRIORITY[a.content_type] - CONTENT_TYPE_PRIORITY[b.content_type]
    if diff:
        return diff

    num_a = filename_number(a.file_name)
    num_b = filename_number(b.file_name)
    if num_a is not None and num_b is not None and num_a != num_b:
        return -1 if num_a < num_b else 1

    for key_a, key_b in (
        (_title_key(a.title), _title_key(b.title)),
        (a.title, b.title),
        (a.file_name, b.file_name),
    ):
        if key_a != key_b:
            return -1 if key_a < key_b else 1
    return 0


class FileClassifier:
    """Labels parsed files and arranges them into a lesson order.

    Args:
        config: ClassifierConfig with the word-count thresholds.
    """

    def __init__(self, config: ClassifierConfig) -> None:
        self._config = config

    def analyze(self, files: list[AnalysisInput]) -> list[ClassifiedFile]:
        """Compute structure statistics and a content type for every file.

        Args:
            files: Parsed files in upload order.

        Returns:
            One ClassifiedFile per input, in the same order.
        """
        return [self._classify(f) for f in files]

    def order(self, files: list[ClassifiedFile]) -> list[ClassifiedFile]:
        """Sort files into display order.

        Content type priority first, then the number in the filename when
        both files carry one, then the title (case- and
        normalization-insensitive), then the filename. The result does not
        depend on the input order.
        """
        # Numbers only compare when both files have one, so the comparison is
        # not a total order; a canonical starting order keeps the result stable.
        canonical = sorted(files, key=lambda f: (f.file_name, f.title, f.html))
        return sorted(canonical, key=cmp_to_key(_compare))

    def analyze_and_order(self, files: list[AnalysisInput]) -> list[ClassifiedFile]:
        return self.order(self.analyze(files))

    def suggest_course_title(self, files: list[ClassifiedFile]) -> str:
        """Suggest a course title from the file titles.

        Uses the longest common prefix of all titles, cleaned of trailing
        digits, punctuation and whitespace, when it is long enough;
        otherwise the first file's title. A lone file keeps its title.

        Args:
            files: Files in display order.

        Returns:
            The suggested title, or an empty string for no files.
        """
        if not files:
            return ""
        if len(files) == 1:
            return files[0].title

        titles = [f.title for f in files]
        prefix = titles[0]
        for title in titles[1:]:
            length = 0
            for left, right in zip(prefix, title):
                if left != right:
                    break
                length += 1
            prefix = prefix[:length]

        if len(prefix) > self._config.min_prefix_length:
            cleaned = _TITLE_TAIL_RE.sub("", prefix).strip()
            if cleaned:
                return cleaned
        return files[0].title

    def _classify(self, file: AnalysisInput) -> ClassifiedFile:
        soup = BeautifulSoup(file.html or "", "html.parser")
        word_count = len(soup.get_text(" ").split())
        heading_count = len(soup.find_all(HEADING_TAGS))
        has_tables = soup.find("table") is not None
        has_images = soup.find("img") is not None
        has_lists = soup.find(("ul", "ol")) is not None

        cfg = self._config
        if word_count > cfg.long_words and heading_count > 0:
            content_type = ContentType.LECTURE
        elif has_tables and word_count < cfg.short_words:
            content_type = ContentType.REFERENCE
        elif word_count < cfg.min_words:
            content_type = ContentType.SUMMARY
        else:
            content_type = ContentType.MIXED

        logger.debug(
            "Classified %s as %s (%d words, %d headings)",
            file.file_name,
            content_type.value,
            word_count,
            heading_count,
        )
        return ClassifiedFile(
            file_name=file.file_name,
            title=file.title,
            html=file.html,
            word_count=word_count,
            has_headings=heading_count > 0,
            heading_count=heading_count,
            has_tables=has_tables,
            has_images=has_images,
            has_lists=has_lists,
            content_type=content_type,
        )
