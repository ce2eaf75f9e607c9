from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

GarmentCategory = Literal["tops", "bottoms", "dresses", "outerwear", "accessories"]


class GarmentDetails(BaseModel):
    name: str | None = None
    category: GarmentCategory | None = None
    brand: str | None = None
    description: str | None = None

    def missing_fields(self) -> set[str]:
        return {field for field in ("name", "category", "description") if not getattr(self, field)}


class GarmentCreate(GarmentDetails):
    image_url: str = Field(min_length=1, max_length=1000)


class GarmentAnalysis(BaseModel):
    """Metadata the vision model suggests for an uploaded garment photo."""

    name: str | None = Field(default=None, max_length=255)
    category: GarmentCategory | None = None
    description: str | None = None


class GarmentRead(BaseModel):
    id: str
    name: str | None
    image_url: str
    category: str | None
    brand: str | None
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
