from __future__ import annotations

from pydantic import BaseModel, Field

from ..images.models import ImageResult


class Restaurant(BaseModel):
    id: str
    name: str
    cuisine: str
    price_range: str
    neighborhood: str
    description: str
    rating: float = Field(ge=0.0, le=5.0)
    address: str

    @property
    def image_query(self) -> str:
        return f"{self.name} {self.neighborhood} New York"


class RestaurantWithImages(Restaurant):
    images: list[ImageResult]


class RecommendationOut(BaseModel):
    name: str
    cuisine: str
    location: str
    price_range: str | None = None
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    description: str = ""
    images: list[ImageResult]


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ChatResponse(BaseModel):
    message: str
    recommendations: list[RecommendationOut]
