from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class ImageSource(str, Enum):
    primary = "primary"
    secondary = "secondary"
    fallback = "fallback"


class ImageResult(BaseModel):
    """A single photo reference tagged with where it came from."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    title: str
    image_link: str
    thumbnail_link: str
    context_link: str
    source: ImageSource

    @model_validator(mode="after")
    def _live_results_need_a_link(self) -> "ImageResult":
        if self.source is not ImageSource.fallback and not self.image_link.strip():
            raise ValueError(f"{self.source.value} image result must have an image link")
        return self
