from datetime import datetime

from pydantic import BaseModel


class GeneratedImageRead(BaseModel):
    id: str
    garment_id: str | None
    status: str
    image_url: str | None
    model_type: str | None
    prompt_used: str | None
    error_message: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
