from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.brand_seed import BrandSeed
from app.schemas.brand_seed import BrandSeedCreate, BrandSeedRead

router = APIRouter(prefix="/brand-seeds", tags=["brand-seeds"])


@router.post("", response_model=BrandSeedRead, status_code=status.HTTP_201_CREATED)
def create_brand_seed(payload: BrandSeedCreate, db: Session = Depends(get_db)) -> BrandSeed:
    seed = BrandSeed(**payload.model_dump())
    db.add(seed)
    db.commit()
    db.refresh(seed)
    return seed


@router.get("", response_model=list[BrandSeedRead])
def list_brand_seeds(db: Session = Depends(get_db)) -> list[BrandSeed]:
    return list(db.scalars(select(BrandSeed).order_by(BrandSeed.created_at.desc())).all())


@router.get("/{seed_id}", response_model=BrandSeedRead)
def get_brand_seed(seed_id: str, db: Session = Depends(get_db)) -> BrandSeed:
    seed = db.get(BrandSeed, seed_id)
    if not seed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand seed not found")
    return seed


@router.delete("/{seed_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_brand_seed(seed_id: str, db: Session = Depends(get_db)) -> None:
    seed = db.get(BrandSeed, seed_id)
    if not seed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand seed not found")
    db.delete(seed)
    db.commit()
    return None
