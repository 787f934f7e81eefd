"""Transaction (booking/invoice) and transaction detail models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Union

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .travel_package import TravelPackage


class TransactionStatus(str, Enum):
    """Transaction status enumeration."""
    IN_CART = "IN_CART"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    CANCEL = "CANCEL"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Active:
    """The record has no tombstone."""


@dataclass(frozen=True)
class Trashed:
    """The record was soft-deleted at ``at`` by actor ``by``."""
    at: datetime
    by: int | None


RecordState = Union[Active, Trashed]


class Transaction(Base):
    """A booking record identified externally by its invoice number."""

    __tablename__ = "transactions"
    # Fetch server-generated timestamps right after INSERT/UPDATE
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    travel_package_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("travel_packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Minor currency units
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[TransactionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TransactionStatus.IN_CART,
        index=True
    )

    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Tombstone
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    deleted_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    travel_package: Mapped["TravelPackage"] = relationship("TravelPackage", back_populates="transactions")
    transaction_details: Mapped[list["TransactionDetail"]] = relationship(
        "TransactionDetail",
        back_populates="transaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def state(self) -> RecordState:
        if self.deleted_at is None:
            return Active()
        return Trashed(at=self.deleted_at, by=self.deleted_by)

    @property
    def is_trashed(self) -> bool:
        return isinstance(self.state, Trashed)

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, invoice_number='{self.invoice_number}', status='{self.status}')>"


class TransactionDetail(Base):
    """A traveller line item of a transaction."""

    __tablename__ = "transaction_details"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    nationality: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    transaction: Mapped["Transaction"] = relationship("Transaction", back_populates="transaction_details")
