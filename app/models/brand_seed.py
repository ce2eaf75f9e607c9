from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.common import TimestampMixin, UUIDPrimaryKeyMixin


class BrandSeed(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "brand_seeds"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    brand_style: Mapped[str | None] = mapped_column(Text, nullable=True)
    character: Mapped[str | None] = mapped_column(String(32), nullable=True)
