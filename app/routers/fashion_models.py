from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.fashion_model import FashionModel
from app.schemas.fashion_model import FashionModelCreate, FashionModelRead

router = APIRouter(prefix="/fashion-models", tags=["fashion-models"])


@router.post("", response_model=FashionModelRead, status_code=status.HTTP_201_CREATED)
def create_fashion_model(payload: FashionModelCreate, db: Session = Depends(get_db)) -> FashionModel:
    persona = FashionModel(**payload.model_dump())
    db.add(persona)
    db.commit()
    db.refresh(persona)
    return persona


@router.get("", response_model=list[FashionModelRead])
def list_fashion_models(db: Session = Depends(get_db)) -> list[FashionModel]:
    return list(db.scalars(select(FashionModel).order_by(FashionModel.created_at.desc())).all())


@router.get("/{model_id}", response_model=FashionModelRead)
def get_fashion_model(model_id: str, db: Session = Depends(get_db)) -> FashionModel:
    persona = db.get(FashionModel, model_id)
    if not persona:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Model not found")
    return persona


@router.delete("/{model_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fashion_model(model_id: str, db: Session = Depends(get_db)) -> None:
    persona = db.get(FashionModel, model_id)
    if not persona:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Model not found")
    db.delete(persona)
    db.commit()
    return None
