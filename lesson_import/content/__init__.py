"""Lesson body model: HTML to blocks and back, plus storage format."""

from lesson_import.content.mapper import (
    blocks_to_html,
    html_to_blocks,
    parse_blocks,
    stringify_blocks,
    video_embed_url,
)

__all__ = [
    "blocks_to_html",
    "html_to_blocks",
    "parse_blocks",
    "stringify_blocks",
    "video_embed_url",
]
