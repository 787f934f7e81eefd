"""Transaction-related Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.transaction import TransactionStatus
from .common import Page


class UpdateTransactionRequest(BaseModel):
    """Fields staff may change on an active transaction."""

    status: TransactionStatus = Field(..., description="New transaction status")


class TransactionPackage(BaseModel):
    id: int
    title: str


class TransactionListItem(BaseModel):
    """Listing projection of a transaction."""

    travel_package_id: int
    total: int = Field(..., description="Total in minor currency units")
    invoice_number: str
    status: TransactionStatus
    travel_package: TransactionPackage


class TransactionPage(Page):
    items: List[TransactionListItem]


class TransactionDetailView(BaseModel):
    """Transaction detail with its line-item count."""

    invoice_number: str
    travel_package_id: int
    travel_package_title: Optional[str] = None
    total: int
    status: TransactionStatus
    updated_by: Optional[int] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    created_at: datetime
    transaction_details_count: int = Field(..., ge=0)


class TransactionEditForm(BaseModel):
    invoice_number: str
    status: TransactionStatus
    statuses: List[TransactionStatus]


class InvoiceNumber(BaseModel):
    invoice_number: str
