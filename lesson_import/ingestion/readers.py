"""Format readers: turn uploaded bytes into a canonical document.

Supports plain text, HTML, DOCX (python-docx with a raw-XML fallback) and a
best-effort salvage of legacy binary DOC files. PDF is rejected outright.
"""

import base64
import html
import io
import logging
import re
import zipfile
from pathlib import PurePath

import chardet

from lesson_import.errors import ParseFailure, UnsupportedFormat
from lesson_import.ingestion.canonical import canonicalize
from lesson_import.models.document import CanonicalDocument, RawUpload

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".txt": "txt",
    ".html": "html",
    ".htm": "html",
    ".docx": "docx",
    ".doc": "doc",
}

# Extensions recognised but refused, with guidance for the user
REJECTED_FORMATS: dict[str, str] = {
    ".pdf": (
        "PDF files are not supported. "
        "Please convert the document to DOCX or TXT and upload it again."
    ),
}

TITLE_STYLES: frozenset[str] = frozenset({"title", "название", "titel", "titre", "título"})
HEADING_STYLE_RE = re.compile(
    r"^(?:heading|заголовок|überschrift|titre|título)\s*(\d+)$", re.IGNORECASE
)

# Characters kept by the legacy DOC salvage: printable ASCII, Cyrillic, line breaks
_DOC_NOISE_RE = re.compile(r"[^\x20-\x7E\u0400-\u04FF\n\r\t]")
_DOC_WORD_RE = re.compile(r"[A-Za-z\u0400-\u04FF]{3,}")

# Raw WordprocessingML tokens used by the fallback DOCX reader
_W_PARAGRAPH_RE = re.compile(r"<w:p(?:\s[^>]*)?>(.*?)</w:p>", re.DOTALL)
_W_STYLE_RE = re.compile(r'<w:pStyle\s+w:val="([^"]*)"')
_W_STYLE_DEF_RE = re.compile(r"<w:style\b([^>]*)>(.*?)</w:style>", re.DOTALL)
_W_STYLE_ID_RE = re.compile(r'w:styleId="([^"]*)"')
_W_STYLE_NAME_RE = re.compile(r'<w:name\s+w:val="([^"]*)"')
_W_RUN_RE = re.compile(r"<w:r(?:\s[^>]*)?>(.*?)</w:r>", re.DOTALL)
_W_TEXT_RE = re.compile(r"<w:t(?:\s[^>]*)?>(.*?)</w:t>", re.DOTALL)
_W_BOLD_RE = re.compile(r"<w:b(?:\s+w:val=\"([^\"]*)\")?\s*/>")
_W_ITALIC_RE = re.compile(r"<w:i(?:\s+w:val=\"([^\"]*)\")?\s*/>")
_W_OFF_VALUES = ("0", "false", "off")


def text_to_html(text: str) -> str:
    """Convert plain text to paragraphs.

    Blank lines separate paragraphs; single newlines become line breaks.

    Args:
        text: Plain text.

    Returns:
        One ``<p>`` per paragraph, markup-significant characters escaped.
    """
    parts = [p.strip() for p in re.split(r"\n\s*\n", text.replace("\r\n", "\n"))]
    return "\n".join(
        f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in parts if p
    )


def heading_tag_for_style(style_name: str) -> str | None:
    """Map a Word paragraph style name or id to a canonical heading tag.

    Handles the English built-in names and their Russian, German, French and
    Spanish equivalents. ``Title`` maps to h1, ``Heading 4`` and deeper to h3.
    """
    name = (style_name or "").strip().lower()
    if name in TITLE_STYLES:
        return "h1"
    match = HEADING_STYLE_RE.match(name)
    if match:
        level = int(match.group(1))
        if level >= 1:
            return f"h{min(level, 3)}"
    return None


class DocumentReader:
    """Reads uploaded documents into the canonical rich-text form.

    Every reader is deterministic: the same bytes always produce the same
    CanonicalDocument.
    """

    def read(self, data: bytes, filename: str) -> CanonicalDocument:
        """Read one uploaded file.

        Args:
            data: Raw file bytes.
            filename: Declared filename, used for format and title.

        Returns:
            The canonical document.

        Raises:
            UnsupportedFormat: If the extension is not supported.
            ParseFailure: If no content could be extracted.
        """
        file_format = self._detect_format(filename)
        stem = PurePath(filename).stem

        dispatch = {
            "txt": self._read_txt,
            "html": self._read_html,
            "docx": self._read_docx,
            "doc": self._read_doc,
        }
        title, raw_html = dispatch[file_format](data, filename)

        return CanonicalDocument(
            suggested_title=title or stem,
            html=canonicalize(raw_html),
        )

    def read_upload(self, upload: RawUpload) -> CanonicalDocument:
        return self.read(upload.data, upload.filename)

    def _detect_format(self, filename: str) -> str:
        """Determine file format from extension.

        Raises:
            UnsupportedFormat: If extension is rejected or unknown.
        """
        ext = PurePath(filename).suffix.lower()
        if ext in REJECTED_FORMATS:
            raise UnsupportedFormat(filename, REJECTED_FORMATS[ext])
        if ext not in SUPPORTED_FORMATS:
            raise UnsupportedFormat(
                filename,
                f"Unsupported file format: '{ext or filename}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}",
            )
        return SUPPORTED_FORMATS[ext]

    def _decode_text(self, data: bytes, filename: str) -> str:
        """Decode text bytes with encoding detection.

        Tries UTF-8 first, then uses chardet for fallback detection.
        """
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        detected = chardet.detect(data)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence") or 0

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                filename,
                encoding,
                confidence * 100,
            )

        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode %s as %s", filename, encoding)
            return data.decode("utf-8", errors="replace")

    def _read_txt(self, data: bytes, filename: str) -> tuple[str, str]:
        return "", text_to_html(self._decode_text(data, filename))

    def _read_html(self, data: bytes, filename: str) -> tuple[str, str]:
        """Extract the body of an HTML document and its <title>."""
        from bs4 import BeautifulSoup

        try:
            soup = BeautifulSoup(self._decode_text(data, filename), "lxml")
            title = soup.title.get_text(strip=True) if soup.title else ""
            body = soup.body.decode_contents() if soup.body else str(soup)
        except Exception as exc:
            logger.exception("Failed to parse HTML: %s", filename)
            raise ParseFailure(filename, "the HTML could not be parsed") from exc
        return title, body

    def _read_docx(self, data: bytes, filename: str) -> tuple[str, str]:
        """Read a DOCX file, falling back to a raw XML walk on failure."""
        try:
            return "", self._docx_to_html(data)
        except Exception:
            logger.warning(
                "Primary DOCX reader failed for %s, retrying with fallback reader",
                filename,
                exc_info=True,
            )
        return "", self._docx_fallback_to_html(data, filename)

    def _docx_to_html(self, data: bytes) -> str:
        """Convert a DOCX body to HTML using python-docx.

        Paragraph styles decide headings and lists; bold, italic and
        underline runs become emphasis; inline images are embedded as data
        URIs so the result is self-contained.
        """
        import docx
        from docx.table import Table

        document = docx.Document(io.BytesIO(data))
        parts: list[str] = []
        open_list: str | None = None

        for block in document.iter_inner_content():
            if isinstance(block, Table):
                if open_list:
                    parts.append(f"</{open_list}>")
                    open_list = None
                parts.append(self._docx_table_html(block, document))
                continue

            inline = self._docx_paragraph_inline(block, document)
            style_name = block.style.name if block.style is not None else ""
            heading = heading_tag_for_style(style_name)
            list_tag = None if heading else self._docx_list_tag(block, style_name)

            if list_tag != open_list:
                if open_list:
                    parts.append(f"</{open_list}>")
                if list_tag:
                    parts.append(f"<{list_tag}>")
                open_list = list_tag

            if list_tag:
                parts.append(f"<li>{inline}</li>")
            elif heading:
                parts.append(f"<{heading}>{inline}</{heading}>")
            else:
                parts.append(f"<p>{inline}</p>")

        if open_list:
            parts.append(f"</{open_list}>")
        return "".join(parts)

    def _docx_list_tag(self, paragraph, style_name: str) -> str | None:
        name = style_name.lower()
        if name.startswith("list bullet"):
            return "ul"
        if name.startswith("list number"):
            return "ol"
        p_pr = paragraph._p.pPr
        if p_pr is not None and p_pr.numPr is not None:
            return "ul"
        return None

    def _docx_paragraph_inline(self, paragraph, document) -> str:
        from docx.text.hyperlink import Hyperlink

        pieces: list[str] = []
        for item in paragraph.iter_inner_content():
            runs = item.runs if isinstance(item, Hyperlink) else [item]
            for run in runs:
                pieces.append(self._docx_run_html(run, document))
        return "".join(pieces)

    def _docx_run_html(self, run, document) -> str:
        text = html.escape(run.text, quote=False).replace("\n", "<br>")
        text = text.replace("\t", " ")
        if text:
            if run.italic or run.underline:
                text = f"<em>{text}</em>"
            if run.bold:
                text = f"<strong>{text}</strong>"
        return text + "".join(self._docx_run_images(run, document))

    def _docx_run_images(self, run, document) -> list[str]:
        from docx.oxml.ns import qn

        images: list[str] = []
        alt = ""
        doc_pr = run.element.find(".//" + qn("wp:docPr"))
        if doc_pr is not None:
            alt = doc_pr.get("descr") or ""

        for blip in run.element.iter(qn("a:blip")):
            rel_id = blip.get(qn("r:embed"))
            part = document.part.related_parts.get(rel_id) if rel_id else None
            if part is None:
                continue
            encoded = base64.b64encode(part.blob).decode("ascii")
            images.append(
                f'<img src="data:{part.content_type};base64,{encoded}" '
                f'alt="{html.escape(alt)}">'
            )
        return images

    def _docx_table_html(self, table, document) -> str:
        rows: list[str] = []
        for row in table.rows:
            cells: list[str] = []
            previous = None
            for cell in row.cells:
                # Merged cells are repeated by python-docx
                if previous is not None and cell._tc is previous:
                    continue
                previous = cell._tc
                content = "<br>".join(
                    self._docx_paragraph_inline(p, document) for p in cell.paragraphs
                )
                cells.append(f"<td>{content}</td>")
            rows.append(f"<tr>{''.join(cells)}</tr>")
        return f"<table>{''.join(rows)}</table>"

    def _docx_fallback_to_html(self, data: bytes, filename: str) -> str:
        """Recover headings, paragraphs and emphasis straight from document.xml.

        Tables and images are not recovered on this path.

        Raises:
            ParseFailure: If the archive or its main part cannot be read.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                xml_data = archive.read("word/document.xml")
                try:
                    styles_data = archive.read("word/styles.xml")
                except KeyError:
                    styles_data = b""
        except (zipfile.BadZipFile, KeyError, OSError) as exc:
            raise ParseFailure(filename, "the file is not a valid DOCX document") from exc

        xml_text = xml_data.decode("utf-8", errors="replace")
        style_names = _w_style_names(styles_data.decode("utf-8", errors="replace"))
        parts: list[str] = []

        for paragraph in _W_PARAGRAPH_RE.finditer(xml_text):
            body = paragraph.group(1)
            style = _W_STYLE_RE.search(body)
            tag = None
            if style:
                # Localized Word builds use numeric ids; the display name carries the level
                style_id = style.group(1)
                tag = heading_tag_for_style(style_names.get(style_id, style_id))
                tag = tag or heading_tag_for_style(style_id)

            runs: list[str] = []
            for run in _W_RUN_RE.finditer(body):
                run_xml = run.group(1)
                text = "".join(html.unescape(t) for t in _W_TEXT_RE.findall(run_xml))
                if not text:
                    continue
                text = html.escape(text, quote=False)
                if _w_flag_on(_W_ITALIC_RE, run_xml):
                    text = f"<em>{text}</em>"
                if _w_flag_on(_W_BOLD_RE, run_xml):
                    text = f"<strong>{text}</strong>"
                runs.append(text)

            content = "".join(runs)
            if content.strip():
                tag = tag or "p"
                parts.append(f"<{tag}>{content}</{tag}>")

        return "\n".join(parts)

    def _read_doc(self, data: bytes, filename: str) -> tuple[str, str]:
        """Salvage readable text from a legacy binary DOC file.

        The output is advisory: binary noise is replaced with spaces and the
        remainder goes through the plain-text paragraph splitter. Never
        raises on malformed input.
        """
        candidates = (
            data.decode("utf-8", errors="replace"),
            data.decode("utf-16-le", errors="ignore"),
        )
        # Pick the decoding that yields the most word-like runs
        text = max(candidates, key=lambda c: sum(len(w) for w in _DOC_WORD_RE.findall(c)))

        text = _DOC_NOISE_RE.sub(" ", text).replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"[ \t]+", " ", text)
        text = "\n".join(line.strip() for line in text.split("\n"))
        text = re.sub(r"\n{3,}", "\n\n", text).strip()

        if not text:
            logger.warning("No readable text salvaged from %s", filename)
        return "", text_to_html(text)


def _w_style_names(styles_xml: str) -> dict[str, str]:
    """Map paragraph style ids to their display names."""
    names: dict[str, str] = {}
    for definition in _W_STYLE_DEF_RE.finditer(styles_xml):
        style_id = _W_STYLE_ID_RE.search(definition.group(1))
        name = _W_STYLE_NAME_RE.search(definition.group(2))
        if style_id and name:
            names[style_id.group(1)] = html.unescape(name.group(1))
    return names


def _w_flag_on(pattern: re.Pattern[str], run_xml: str) -> bool:
    match = pattern.search(run_xml)
    if match is None:
        return False
    return (match.group(1) or "true").lower() not in _W_OFF_VALUES
