from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

BrandCharacter = Literal["luxury", "minimalist", "urban", "sporty", "bohemian", "classic", "edgy", "casual"]


class BrandSeedCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    domain: str | None = Field(default=None, max_length=255)
    brand_style: str | None = None
    character: BrandCharacter | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Brand seed name must not be blank")
        return cleaned


class BrandSeedRead(BaseModel):
    id: str
    name: str
    domain: str | None
    brand_style: str | None
    character: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
