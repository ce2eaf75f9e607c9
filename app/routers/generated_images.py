from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.generated_image import GeneratedImage
from app.schemas.generated_image import GeneratedImageRead

router = APIRouter(prefix="/generated-images", tags=["generated-images"])


@router.get("", response_model=list[GeneratedImageRead])
def list_generated_images(garment_id: str | None = Query(default=None), db: Session = Depends(get_db)) -> list[GeneratedImage]:
    stmt = select(GeneratedImage).order_by(GeneratedImage.created_at.desc())
    if garment_id:
        stmt = stmt.where(GeneratedImage.garment_id == garment_id)
    return list(db.scalars(stmt).all())
