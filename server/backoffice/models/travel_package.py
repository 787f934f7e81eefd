"""Travel package model definition."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .transaction import Transaction
    from .travel_gallery import TravelGallery


# Packages above this status are published and get galleries
PUBLISHED_BASELINE_STATUS = 0


class TravelPackage(Base):
    """Travel package offered on the storefront; read-only for the back-office."""

    __tablename__ = "travel_packages"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=PUBLISHED_BASELINE_STATUS,
        server_default="0",
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    travel_galleries: Mapped[list["TravelGallery"]] = relationship(
        "TravelGallery",
        back_populates="travel_package",
        order_by="TravelGallery.id",
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="travel_package",
    )

    def __repr__(self) -> str:
        return f"<TravelPackage(id={self.id}, title='{self.title}', slug='{self.slug}')>"
