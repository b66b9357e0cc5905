"""Heading-aware splitter that cuts canonical documents into lesson sections."""

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, NavigableString, Tag

from lesson_import.config import SegmentationConfig
from lesson_import.ingestion.canonical import HEADING_TAGS
from lesson_import.models.document import CanonicalDocument, Section

logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLE = "Section"


@dataclass(frozen=True)
class _Piece:
    """One top-level element of a canonical document."""

    html: str
    length: int
    heading: str | None = None


def split_top_level(html: str) -> list[_Piece]:
    """Split canonical markup into its top-level elements.

    Each piece carries its markup-stripped length and, for h1-h3, the
    heading text. Whitespace between elements is discarded.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    pieces: list[_Piece] = []
    for node in soup.contents:
        if isinstance(node, NavigableString):
            if node.strip():
                pieces.append(_Piece(html=str(node), length=len(node)))
            continue
        text = node.get_text()
        heading = None
        if isinstance(node, Tag) and node.name in HEADING_TAGS:
            heading = " ".join(text.split())
        pieces.append(_Piece(html=str(node), length=len(text), heading=heading))
    return pieces


class LessonSegmenter:
    """Splits a canonical document into titled, lesson-sized sections.

    Strategy:
    1. Headings: cut at every h1-h3; each heading titles the content
       that follows it. A section that grows past
       ``max_chars * overflow_ratio`` is closed early and the rest
       continues under the generic title.
    2. No headings: accumulate top-level blocks into numbered sections of
       at most ``max_chars`` characters.

    Sizes are always measured on markup-stripped text. A single block
    larger than the limit becomes its own section; content is never
    truncated or dropped. A heading is never separated from the first
    block after it.

    Args:
        config: SegmentationConfig with max_chars and overflow_ratio.
    """

    def __init__(self, config: SegmentationConfig) -> None:
        self._config = config

    def segment(self, doc: CanonicalDocument, max_chars: int | None = None) -> list[Section]:
        """Split a canonical document into sections.

        Args:
            doc: The document to split.
            max_chars: Size target in stripped characters. Defaults to
                the configured value.

        Returns:
            Sections in document order; empty for an empty document.
        """
        limit = max_chars or self._config.max_chars
        pieces = split_top_level(doc.html)
        if not pieces:
            return []

        if any(piece.heading is not None for piece in pieces):
            sections = self._segment_by_headings(pieces, limit * self._config.overflow_ratio)
        else:
            sections = self._segment_by_paragraphs(pieces, limit)

        logger.debug("Split '%s' into %d sections", doc.suggested_title, len(sections))
        return sections

    def _segment_by_headings(self, pieces: list[_Piece], overflow_limit: float) -> list[Section]:
        sections: list[Section] = []
        buffer: list[str] = []
        buffer_len = 0
        has_body = False
        title: str | None = None

        def flush() -> None:
            nonlocal buffer, buffer_len, has_body, title
            if buffer:
                sections.append(
                    Section(title=title or DEFAULT_SECTION_TITLE, html="\n".join(buffer))
                )
            buffer = []
            buffer_len = 0
            has_body = False
            title = None

        for piece in pieces:
            if piece.heading is not None:
                flush()
                title = piece.heading or DEFAULT_SECTION_TITLE
                buffer.append(piece.html)
                buffer_len = piece.length
                continue

            if has_body and buffer_len + piece.length > overflow_limit:
                flush()

            buffer.append(piece.html)
            buffer_len += piece.length
            has_body = True

        flush()
        return sections

    def _segment_by_paragraphs(self, pieces: list[_Piece], limit: int) -> list[Section]:
        sections: list[Section] = []
        buffer: list[str] = []
        buffer_len = 0

        for piece in pieces:
            if buffer and buffer_len + piece.length > limit:
                sections.append(
                    Section(
                        title=f"{DEFAULT_SECTION_TITLE} {len(sections) + 1}",
                        html="\n".join(buffer),
                    )
                )
                buffer = []
                buffer_len = 0
            buffer.append(piece.html)
            buffer_len += piece.length

        if buffer:
            sections.append(
                Section(
                    title=f"{DEFAULT_SECTION_TITLE} {len(sections) + 1}",
                    html="\n".join(buffer),
                )
            )
        return sections
