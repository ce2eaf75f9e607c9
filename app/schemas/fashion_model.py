from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ModelGender = Literal["female", "male", "neutral"]


class FashionModelCreate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    gender: ModelGender | None = None
    prompt: str | None = None


class FashionModelRead(BaseModel):
    id: str
    name: str | None
    gender: str | None
    prompt: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
