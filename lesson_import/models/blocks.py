"""Typed content blocks: the lesson body model used by the editor and renderer.

Each block type is its own model, and ``ContentBlock`` is the union of all of
them discriminated on ``type``. Blocks serialize with camelCase keys, which is
the stored lesson body format.
"""

from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class _Block(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))


class ParagraphBlock(_Block):
    type: Literal["paragraph"] = "paragraph"
    content: str = ""


class Heading1Block(_Block):
    type: Literal["heading1"] = "heading1"
    content: str = ""


class Heading2Block(_Block):
    type: Literal["heading2"] = "heading2"
    content: str = ""


class BulletListBlock(_Block):
    """List items, one per line, each holding inline markup."""

    type: Literal["bulletList"] = "bulletList"
    content: str = ""


class NumberedListBlock(_Block):
    """List items, one per line, each holding inline markup."""

    type: Literal["numberedList"] = "numberedList"
    content: str = ""


class QuoteBlock(_Block):
    type: Literal["quote"] = "quote"
    content: str = ""


class CalloutBlock(_Block):
    type: Literal["callout"] = "callout"
    kind: Literal["info", "warning", "tip"] = "info"
    content: str = ""


class AccordionBlock(_Block):
    type: Literal["accordion"] = "accordion"
    title: str = ""
    is_open: bool = True
    body_html: str = ""


class QuizOption(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: str = ""
    is_correct: bool = False


def _default_quiz_options() -> list[QuizOption]:
    return [QuizOption(is_correct=True), QuizOption()]


class QuizBlock(_Block):
    """A single-question quiz.

    Exactly one option is expected to be correct; the editor keeps that true,
    this model does not check it.
    """

    type: Literal["quiz"] = "quiz"
    question: str = ""
    options: list[QuizOption] = Field(default_factory=_default_quiz_options)
    explanation: str = ""


class TermBlock(_Block):
    type: Literal["term"] = "term"
    word: str = ""
    definition: str = ""


class ImageBlock(_Block):
    type: Literal["image"] = "image"
    src: str = ""
    alt: str = ""


class VideoBlock(_Block):
    type: Literal["video"] = "video"
    url: str = ""


class TableBlock(_Block):
    """A table kept as raw markup; it is never decomposed."""

    type: Literal["table"] = "table"
    table_html: str = ""


ContentBlock = Annotated[
    Union[
        ParagraphBlock,
        Heading1Block,
        Heading2Block,
        BulletListBlock,
        NumberedListBlock,
        QuoteBlock,
        CalloutBlock,
        AccordionBlock,
        QuizBlock,
        TermBlock,
        ImageBlock,
        VideoBlock,
        TableBlock,
    ],
    Field(discriminator="type"),
]

BlockDocument = TypeAdapter(list[ContentBlock])

# Blocks whose value is their structure; they are kept even when empty.
STRUCTURAL_BLOCK_TYPES = frozenset({"quiz", "accordion", "term", "image", "table"})
