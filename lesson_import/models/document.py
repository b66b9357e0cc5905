"""Document models produced by the readers and the segmenter."""

from pydantic import BaseModel, ConfigDict


class RawUpload(BaseModel):
    """An uploaded file as received: declared filename plus bytes."""

    filename: str
    data: bytes


class CanonicalDocument(BaseModel):
    """A document normalized to the canonical tag vocabulary."""

    model_config = ConfigDict(frozen=True)

    suggested_title: str
    html: str


class Section(BaseModel):
    """A contiguous, self-contained slice of a canonical document."""

    model_config = ConfigDict(frozen=True)

    title: str
    html: str
