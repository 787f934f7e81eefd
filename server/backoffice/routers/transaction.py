"""Transaction router: listings, detail and lifecycle mutations."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ElevatedAuth, RequiredAuth
from ..models.transaction import TransactionStatus
from ..schemas.common import ActionResponse, RouteKey
from ..schemas.transaction import (
    InvoiceNumber,
    TransactionDetailView,
    TransactionEditForm,
    TransactionPage,
    UpdateTransactionRequest,
)
from ..services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/transactions", tags=["transactions"])

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)
KEYWORD_QUERY = Query(None, max_length=255, description="Travel package title contains")
STATUS_QUERY = Query(None, description="Only transactions in this status")
PAGE_QUERY = Query(1, ge=1, description="Page number")


@router.get("", response_model=TransactionPage)
async def list_transactions(
    keyword: Optional[str] = KEYWORD_QUERY,
    status: Optional[TransactionStatus] = STATUS_QUERY,
    page: int = PAGE_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    """Active transactions, newest first."""
    return await TransactionService(db).list_transactions(keyword, status, page)


@router.get("/invoice-number", response_model=InvoiceNumber)
async def generate_invoice_number(db: AsyncSession = DB_DEPENDENCY, user: dict = RequiredAuth):
    """Fresh invoice number for a transaction created by the checkout flow."""
    return InvoiceNumber(invoice_number=TransactionService(db).generate_invoice_number())


@router.get("/trash", response_model=TransactionPage)
async def list_trashed_transactions(
    keyword: Optional[str] = KEYWORD_QUERY,
    status: Optional[TransactionStatus] = STATUS_QUERY,
    page: int = PAGE_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = ElevatedAuth,
):
    """Soft-deleted transactions, newest first."""
    return await TransactionService(db).list_transactions(keyword, status, page, trashed=True)


@router.get("/trash/{invoice_number}", response_model=TransactionDetailView)
async def show_trashed_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = ElevatedAuth,
):
    return await TransactionService(db).get_transaction_detail(invoice_number, trashed=True)


@router.post("/trash/{invoice_number}/restore", response_model=ActionResponse)
async def restore_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = ElevatedAuth,
):
    """Move a trashed transaction back to the active list."""
    outcome = await TransactionService(db).restore_transaction(invoice_number)
    return ActionResponse.from_outcome(outcome, RouteKey.TRANSACTIONS_TRASH)


@router.delete("/trash/{invoice_number}", response_model=ActionResponse)
async def force_delete_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = ElevatedAuth,
):
    """Permanently delete a trashed transaction."""
    outcome = await TransactionService(db).force_delete_transaction(invoice_number)
    return ActionResponse.from_outcome(outcome, RouteKey.TRANSACTIONS_TRASH)


@router.get("/{invoice_number}", response_model=TransactionDetailView)
async def show_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    return await TransactionService(db).get_transaction_detail(invoice_number)


@router.get("/{invoice_number}/edit", response_model=TransactionEditForm)
async def edit_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    """Current status of an active transaction and the statuses it may take."""
    return await TransactionService(db).get_edit_form(invoice_number)


@router.put("/{invoice_number}", response_model=ActionResponse)
async def update_transaction(
    invoice_number: str,
    request: UpdateTransactionRequest,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    outcome = await TransactionService(db).update_transaction(
        invoice_number, request.model_dump(mode="json"), actor_id=user["user_id"]
    )
    logger.info(
        "Transaction update handled",
        extra={"invoice_number": invoice_number, "ok": outcome.ok, "actor_id": user["user_id"]},
    )
    return ActionResponse.from_outcome(outcome, RouteKey.TRANSACTIONS_INDEX)


@router.delete("/{invoice_number}", response_model=ActionResponse)
async def delete_transaction(
    invoice_number: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    """Move an active transaction to the trash."""
    outcome = await TransactionService(db).delete_transaction(invoice_number, actor_id=user["user_id"])
    return ActionResponse.from_outcome(outcome, RouteKey.TRANSACTIONS_INDEX)
