from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.common import TimestampMixin, UUIDPrimaryKeyMixin


class GeneratedImage(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "generated_images"

    garment_id: Mapped[str | None] = mapped_column(ForeignKey("garments.id", ondelete="SET NULL"), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(32), default="completed", nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    model_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    prompt_used: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    garment = relationship("Garment", back_populates="generated_images")
