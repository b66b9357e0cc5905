"""Shared fixtures for building test documents."""

import io
import zipfile
from collections.abc import Callable

import docx
import pytest

from lesson_import.config import AppConfig

W_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    """Build a DOCX file with python-docx and return its bytes.

    ``paragraphs`` is a list of ``(style, text)`` pairs; a style of None
    means the default paragraph style.
    """

    def build(paragraphs: list[tuple[str | None, str]]) -> bytes:
        document = docx.Document()
        for style, text in paragraphs:
            document.add_paragraph(text, style=style)
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return build


@pytest.fixture
def make_raw_docx() -> Callable[..., bytes]:
    """Build a bare ZIP holding word/document.xml and optionally word/styles.xml.

    python-docx refuses such a package, so reading it exercises the
    fallback reader.
    """

    def build(body_xml: str, styles_xml: str | None = None) -> bytes:
        xml = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f'<w:document xmlns:w="{W_NAMESPACE}">'
            f"<w:body>{body_xml}</w:body></w:document>"
        )
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("word/document.xml", xml)
            if styles_xml is not None:
                archive.writestr(
                    "word/styles.xml",
                    f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
                    f'<w:styles xmlns:w="{W_NAMESPACE}">{styles_xml}</w:styles>',
                )
        return buffer.getvalue()

    return build
