import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.garment import Garment
from app.schemas.garment import GarmentAnalysis, GarmentCreate, GarmentDetails, GarmentRead
from app.services.generation.gateway import GenerationError, GenerationGateway, get_generation_gateway
from app.services.storage import delete_media_if_exists, save_garment_upload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/garments", tags=["garments"])

ANALYSIS_PROMPT = (
    "Look at this garment product photo and suggest a short product name, "
    "one category (tops, bottoms, dresses, outerwear or accessories) and a one-sentence description."
)


@router.post("", response_model=GarmentRead, status_code=status.HTTP_201_CREATED)
def create_garment(payload: GarmentCreate, db: Session = Depends(get_db)) -> Garment:
    garment = Garment(**payload.model_dump())
    db.add(garment)
    db.commit()
    db.refresh(garment)
    return garment


@router.post("/upload", response_model=GarmentRead, status_code=status.HTTP_201_CREATED)
async def upload_garment(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
    category: str | None = Form(default=None),
    brand: str | None = Form(default=None),
    description: str | None = Form(default=None),
    db: Session = Depends(get_db),
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> Garment:
    try:
        details = GarmentDetails(name=name, category=category, brand=brand, description=description)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    image_url = await save_garment_upload(file)

    missing = details.missing_fields()
    if missing:
        try:
            analysis = gateway.invoke_llm(ANALYSIS_PROMPT, [image_url], GarmentAnalysis)
        except GenerationError as exc:
            logger.warning("garment_analysis_failed", extra={"image_url": image_url, "error": str(exc)})
        else:
            suggested = analysis.model_dump(include=missing, exclude_none=True)
            details = details.model_copy(update=suggested)

    garment = Garment(**details.model_dump(), image_url=image_url)
    db.add(garment)
    db.commit()
    db.refresh(garment)
    return garment


@router.get("", response_model=list[GarmentRead])
def list_garments(db: Session = Depends(get_db)) -> list[Garment]:
    return list(db.scalars(select(Garment).order_by(Garment.created_at.desc())).all())


@router.get("/{garment_id}", response_model=GarmentRead)
def get_garment(garment_id: str, db: Session = Depends(get_db)) -> Garment:
    garment = db.get(Garment, garment_id)
    if not garment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Garment not found")
    return garment


@router.delete("/{garment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_garment(garment_id: str, db: Session = Depends(get_db)) -> None:
    garment = db.get(Garment, garment_id)
    if not garment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Garment not found")
    delete_media_if_exists(garment.image_url)
    db.delete(garment)
    db.commit()
    return None
