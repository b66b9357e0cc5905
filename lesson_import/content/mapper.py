"""Conversion between canonical lesson HTML and typed content blocks.

``html_to_blocks`` is used when an imported lesson is first opened in the
editor; ``blocks_to_html`` renders blocks for learners and exports. The
stored lesson body is the JSON produced by ``stringify_blocks``.
"""

import html
import json
import logging
import re
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from pydantic import ValidationError

from lesson_import.models.blocks import (
    STRUCTURAL_BLOCK_TYPES,
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
    QuoteBlock,
    TableBlock,
    TermBlock,
    VideoBlock,
)

logger = logging.getLogger(__name__)

# Never turned into blocks, not even their text
_IGNORED_TAGS = frozenset({"script", "style", "template"})

_VIDEO_EMBEDS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([a-zA-Z0-9_-]+)"),
        "https://www.youtube.com/embed/{0}",
    ),
    (re.compile(r"vimeo\.com/(\d+)"), "https://player.vimeo.com/video/{0}"),
    (re.compile(r"rutube\.ru/video/([a-zA-Z0-9]+)"), "https://rutube.ru/play/embed/{0}"),
    (re.compile(r"vk\.com/video(-?\d+)_(\d+)"), "https://vk.com/video_ext.php?oid={0}&id={1}"),
)

_LONE_SURROGATE_RE = re.compile("[\ud800-\udfff]")

# Field names written by the earlier flat block format
_LEGACY_FIELDS: dict[str, str] = {
    "accordionTitle": "title",
    "accordionOpen": "isOpen",
    "quizQuestion": "question",
    "quizOptions": "options",
    "quizExplanation": "explanation",
    "termWord": "word",
    "termDefinition": "definition",
    "imageSrc": "src",
    "imageAlt": "alt",
    "videoUrl": "url",
}


def html_to_blocks(source: str) -> list[ContentBlock]:
    """Map canonical HTML onto a sequence of content blocks.

    Walks the node tree depth first. Headings, paragraphs, lists, quotes,
    images and tables become blocks; wrapper and unknown elements are
    transparent so their text still ends up in paragraphs. A paragraph
    holding nothing but an image becomes an image block. Tables are kept
    as their full markup.

    Args:
        source: Lesson HTML.

    Returns:
        Blocks in reading order, with empty text blocks removed.
    """
    soup = BeautifulSoup(source or "", "html.parser")
    blocks: list[ContentBlock] = []

    def visit(node: Any) -> None:
        if isinstance(node, NavigableString):
            if isinstance(node, PreformattedString):
                return
            text = node.strip()
            if text:
                blocks.append(ParagraphBlock(content=text))
            return
        if not isinstance(node, Tag) or node.name in _IGNORED_TAGS:
            return

        name = node.name
        if name == "h1":
            blocks.append(Heading1Block(content=node.get_text().strip()))
        elif name in ("h2", "h3"):
            blocks.append(Heading2Block(content=node.get_text().strip()))
        elif name == "p":
            children = node.contents
            if len(children) == 1 and isinstance(children[0], Tag) and children[0].name == "img":
                blocks.append(_image_block(children[0]))
            else:
                blocks.append(ParagraphBlock(content=node.decode_contents()))
        elif name in ("ul", "ol"):
            items = "\n".join(li.decode_contents() for li in node.find_all("li", recursive=False))
            block_cls = BulletListBlock if name == "ul" else NumberedListBlock
            blocks.append(block_cls(content=items))
        elif name == "blockquote":
            blocks.append(QuoteBlock(content=node.decode_contents()))
        elif name == "img":
            blocks.append(_image_block(node))
        elif name == "table":
            blocks.append(TableBlock(table_html=str(node)))
        else:
            # div, section, article, span and anything unrecognised
            for child in list(node.children):
                visit(child)

    for top in list(soup.contents):
        visit(top)

    return [b for b in blocks if b.type in STRUCTURAL_BLOCK_TYPES or _has_text(b)]


def _image_block(tag: Tag) -> ImageBlock:
    return ImageBlock(src=tag.get("src") or "", alt=tag.get("alt") or "")


def _has_text(block: ContentBlock) -> bool:
    if isinstance(block, VideoBlock):
        return bool(block.url.strip())
    return bool(getattr(block, "content", "").strip())


def video_embed_url(url: str) -> str | None:
    """Return the player URL for YouTube, Vimeo, Rutube and VK links."""
    if not url:
        return None
    for pattern, template in _VIDEO_EMBEDS:
        match = pattern.search(url)
        if match:
            return template.format(*match.groups())
    return None


def blocks_to_html(blocks: list[ContentBlock]) -> str:
    """Render blocks as HTML.

    Headings, paragraphs, lists, quotes, images and tables render to the
    canonical vocabulary, so mapping the output back with
    ``html_to_blocks`` recovers them. Tables are emitted verbatim.
    """
    rendered = (_render_block(block) for block in blocks)
    return "\n".join(part for part in rendered if part)


def _render_block(block: ContentBlock) -> str:
    if isinstance(block, ParagraphBlock):
        return f"<p>{block.content}</p>"
    if isinstance(block, Heading1Block):
        return f"<h1>{html.escape(block.content, quote=False)}</h1>"
    if isinstance(block, Heading2Block):
        return f"<h2>{html.escape(block.content, quote=False)}</h2>"
    if isinstance(block, (BulletListBlock, NumberedListBlock)):
        tag = "ul" if isinstance(block, BulletListBlock) else "ol"
        items = "".join(f"<li>{line}</li>" for line in block.content.split("\n") if line.strip())
        return f"<{tag}>{items}</{tag}>"
    if isinstance(block, QuoteBlock):
        return f"<blockquote>{block.content}</blockquote>"
    if isinstance(block, CalloutBlock):
        return f'<aside class="callout callout-{block.kind}">{block.content}</aside>'
    if isinstance(block, AccordionBlock):
        opened = " open" if block.is_open else ""
        title = html.escape(block.title, quote=False)
        return f"<details{opened}><summary>{title}</summary>{block.body_html}</details>"
    if isinstance(block, QuizBlock):
        options = "".join(
            f'<li data-correct="{"true" if o.is_correct else "false"}">'
            f"{html.escape(o.text, quote=False)}</li>"
            for o in block.options
        )
        explanation = ""
        if block.explanation:
            explanation = (
                f'<p class="quiz-explanation">{html.escape(block.explanation, quote=False)}</p>'
            )
        return (
            '<div class="quiz">'
            f'<p class="quiz-question">{html.escape(block.question, quote=False)}</p>'
            f'<ol class="quiz-options">{options}</ol>{explanation}</div>'
        )
    if isinstance(block, TermBlock):
        return (
            f'<dl class="term"><dt>{html.escape(block.word, quote=False)}</dt>'
            f"<dd>{html.escape(block.definition, quote=False)}</dd></dl>"
        )
    if isinstance(block, ImageBlock):
        if not block.src:
            return ""
        return f'<p><img src="{html.escape(block.src)}" alt="{html.escape(block.alt)}"></p>'
    if isinstance(block, VideoBlock):
        embed = video_embed_url(block.url)
        if embed:
            return (
                f'<div class="video"><iframe src="{html.escape(embed)}" '
                'allowfullscreen></iframe></div>'
            )
        if block.url:
            url = html.escape(block.url)
            return f'<p><a href="{url}">{url}</a></p>'
        return ""
    if isinstance(block, TableBlock):
        return block.table_html
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def stringify_blocks(blocks: list[ContentBlock]) -> str:
    """Serialize blocks to the stored lesson body format (a JSON array).

    Unpaired surrogates (possible in text that came from a JSON ``\\ud800``
    escape) are written back as escapes so the result always encodes to UTF-8.
    """
    text = json.dumps(
        BlockDocument.dump_python(blocks, by_alias=True),
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return _LONE_SURROGATE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def parse_blocks(stored: Any) -> list[ContentBlock]:
    """Parse a stored lesson body.

    Accepts the current format and the earlier flat block format. Anything
    that is not a valid block array yields an empty list; this function
    never raises.

    Args:
        stored: The stored JSON string.

    Returns:
        The blocks, or ``[]`` for malformed or foreign input.
    """
    if not isinstance(stored, (str, bytes, bytearray)):
        return []
    try:
        raw = json.loads(stored)
    except (ValueError, TypeError):
        logger.warning("Stored lesson body is not valid JSON")
        return []
    if not isinstance(raw, list):
        logger.warning("Stored lesson body is not a block array")
        return []

    items = [_upgrade_legacy_block(item) if isinstance(item, dict) else item for item in raw]
    try:
        return BlockDocument.validate_python(items)
    except ValidationError as exc:
        logger.warning("Stored lesson body failed validation: %d error(s)", exc.error_count())
        return []


def _upgrade_legacy_block(item: dict) -> dict:
    """Rewrite a block saved in the flat format into the current shape."""
    block_type = item.get("type")
    if not isinstance(block_type, str):
        return item
    is_callout = block_type.startswith("callout-")
    if not is_callout and not any(key in item for key in _LEGACY_FIELDS):
        return item

    upgraded = {key: value for key, value in item.items() if key not in _LEGACY_FIELDS}
    for old, new in _LEGACY_FIELDS.items():
        if old in item:
            upgraded[new] = item[old]
    if is_callout:
        upgraded["type"] = "callout"
        upgraded["kind"] = block_type[len("callout-"):]
    if block_type == "accordion":
        upgraded["bodyHtml"] = item.get("content", "")
    return upgraded
