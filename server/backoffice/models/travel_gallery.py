"""Travel gallery image record."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .travel_package import TravelPackage


class TravelGallery(Base):
    """
    One gallery image of a travel package.

    ``name`` is the stored file name shared by the full-size image and its
    thumbnail on disk.
    """

    __tablename__ = "travel_galleries"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    travel_package_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("travel_packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    uploaded_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    travel_package: Mapped["TravelPackage"] = relationship("TravelPackage", back_populates="travel_galleries")

    def __repr__(self) -> str:
        return f"<TravelGallery(id={self.id}, slug='{self.slug}', name='{self.name}')>"
