"""Canonical rich-text form shared by every reader.

The canonical vocabulary is small: paragraphs, three heading
levels, strong/em, lists, blockquotes, tables and images. Anything else is
either dropped with its content (scripts, styles, embedded objects) or
unwrapped so that its text survives.
"""

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

VOCABULARY: frozenset[str] = frozenset({
    "p", "br", "h1", "h2", "h3", "strong", "em", "ul", "ol", "li",
    "blockquote", "table", "thead", "tbody", "tr", "th", "td", "img",
})

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3")

# Elements removed together with everything inside them
DROPPED_TAGS: tuple[str, ...] = (
    "script", "style", "head", "title", "meta", "link", "noscript",
    "iframe", "object", "embed", "svg", "form",
)

RENAMED_TAGS: dict[str, str] = {
    "b": "strong",
    "i": "em",
    "u": "em",
    "ins": "em",
    "h4": "h3",
    "h5": "h3",
    "h6": "h3",
}

INLINE_TAGS: frozenset[str] = frozenset({"strong", "em", "br", "img"})

KEPT_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src", "alt"),
    "td": ("colspan", "rowspan"),
    "th": ("colspan", "rowspan"),
}

PRESENTATION_CLASSES: dict[str, str] = {
    "table": "lesson-table",
    "img": "lesson-image",
}


def canonicalize(html: str) -> str:
    """Normalize arbitrary markup into the canonical vocabulary.

    Top-level elements are emitted one per line. The function is
    idempotent: canonicalizing its own output returns it unchanged.

    Args:
        html: Markup produced by a reader (or any HTML fragment).

    Returns:
        Canonical HTML string; empty string when nothing survives.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        node.extract()
    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        tag.name = RENAMED_TAGS.get(tag.name, tag.name)
        if tag.name not in VOCABULARY:
            tag.unwrap()
            continue
        if tag.name == "img" and not tag.get("src"):
            tag.decompose()
            continue
        _clean_attributes(tag)

    _wrap_loose_inline(soup)
    _drop_empty_blocks(soup)

    parts = [
        str(node)
        for node in soup.contents
        if not (isinstance(node, NavigableString) and not node.strip())
    ]
    return "\n".join(parts)


def _clean_attributes(tag: Tag) -> None:
    attrs: dict[str, str] = {}
    for name in KEPT_ATTRIBUTES.get(tag.name, ()):
        value = tag.get(name)
        if value is None:
            continue
        attrs[name] = " ".join(value) if isinstance(value, list) else value
    if tag.name in PRESENTATION_CLASSES:
        attrs["class"] = PRESENTATION_CLASSES[tag.name]
    tag.attrs = attrs


def _is_inline(node: object) -> bool:
    if isinstance(node, NavigableString):
        return True
    return isinstance(node, Tag) and node.name in INLINE_TAGS


def _wrap_loose_inline(soup: BeautifulSoup) -> None:
    """Wrap runs of top-level text and inline elements into paragraphs."""
    run: list = []
    for node in list(soup.contents) + [None]:
        if node is not None and _is_inline(node):
            run.append(node)
            continue
        if run:
            _wrap_run(soup, run)
            run = []


def _wrap_run(soup: BeautifulSoup, run: list) -> None:
    has_content = any(
        (isinstance(n, NavigableString) and n.strip())
        or (isinstance(n, Tag) and (n.get_text(strip=True) or n.name == "img" or n.find("img")))
        for n in run
    )
    if not has_content:
        for node in run:
            node.extract()
        return

    while run and isinstance(run[0], NavigableString) and not run[0].strip():
        run.pop(0).extract()
    while run and isinstance(run[-1], NavigableString) and not run[-1].strip():
        run.pop().extract()

    paragraph = soup.new_tag("p")
    run[0].insert_before(paragraph)
    for node in run:
        paragraph.append(node.extract())


def _drop_empty_blocks(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(("p",) + HEADING_TAGS):
        if not tag.get_text(strip=True) and not tag.find("img"):
            tag.decompose()


def strip_tags(html: str) -> str:
    """Return the markup-free text of an HTML fragment, entities decoded."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text()


def text_length(html: str) -> int:
    """Character count of the markup-stripped text."""
    return len(strip_tags(html))
