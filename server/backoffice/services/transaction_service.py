"""Transaction lifecycle: listing, edits, soft delete, restore and permanent delete."""

import math
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from ..core.config import settings
from ..core.exceptions import NotFoundError, PersistenceWriteFailedError
from ..core.observability import get_logger
from ..models.transaction import Transaction, TransactionDetail, TransactionStatus
from ..models.travel_package import TravelPackage
from .action_runner import ActionRunner, Outcome
from .persistence import PersistenceGateway, WriteResult

logger = get_logger(__name__)

UPDATE_SUCCESS = "Transaction updated successfully"
DELETE_SUCCESS = "Transaction moved to trash successfully"
RESTORE_SUCCESS = "Transaction restored successfully"
FORCE_DELETE_SUCCESS = "Transaction permanently deleted successfully"

UPDATE_FAILED = "Failed to update transaction"
DELETE_FAILED = "Failed to delete transaction"
RESTORE_FAILED = "Failed to restore transaction"
FORCE_DELETE_FAILED = "Failed to permanently delete transaction"

_INVOICE_ALPHABET = string.ascii_letters + string.digits


def _ensure_written(result: WriteResult, message: str) -> None:
    if not result.ok:
        raise PersistenceWriteFailedError(message, reason=result.failure.value)


class TransactionService:
    """Service for transaction back-office operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.gateway = PersistenceGateway(db)
        self.runner = ActionRunner(self.gateway)

    # Lookups

    async def get_transaction_by_invoice_number(
        self, invoice_number: str, trashed: bool = False
    ) -> Optional[Transaction]:
        """
        Get a transaction by invoice number in the requested soft-delete state.

        Args:
            invoice_number: Invoice number to search for
            trashed: True to search the trash, False for active transactions

        Returns:
            Transaction if found, None otherwise
        """
        tombstone = Transaction.deleted_at.is_not(None) if trashed else Transaction.deleted_at.is_(None)
        stmt = select(Transaction).where(Transaction.invoice_number == invoice_number, tombstone)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_transaction_by_invoice_number_or_raise(
        self, invoice_number: str, trashed: bool = False
    ) -> Transaction:
        """
        Get a transaction by invoice number or raise NotFoundError.

        Raises:
            NotFoundError: If no transaction in the requested state matches
        """
        transaction = await self.get_transaction_by_invoice_number(invoice_number, trashed=trashed)
        if not transaction:
            logger.warning("Transaction not found", invoice_number=invoice_number, trashed=trashed)
            raise NotFoundError(
                resource_type="deleted transaction" if trashed else "transaction",
                resource_id=invoice_number,
            )
        return transaction

    # Reads

    async def list_transactions(
        self,
        keyword: Optional[str] = None,
        status: Optional[TransactionStatus] = None,
        page: int = 1,
        trashed: bool = False,
    ) -> dict[str, Any]:
        """
        List transactions newest first, one page at a time.

        Args:
            keyword: Case-insensitive substring of the travel package title
            status: Only transactions in this status
            page: 1-based page number
            trashed: List the trash instead of active transactions

        Returns:
            dict with ``items`` and the pagination fields
        """
        conditions = [
            Transaction.deleted_at.is_not(None) if trashed else Transaction.deleted_at.is_(None)
        ]
        if keyword:
            conditions.append(TravelPackage.title.ilike(f"%{keyword}%"))
        if status:
            conditions.append(Transaction.status == TransactionStatus(status).value)

        count_stmt = (
            select(func.count(Transaction.id))
            .join(Transaction.travel_package)
            .where(*conditions)
        )
        total = (await self.db.execute(count_stmt)).scalar_one()

        per_page = settings.page_size
        stmt = (
            select(Transaction)
            .join(Transaction.travel_package)
            .options(contains_eager(Transaction.travel_package))
            .where(*conditions)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        rows = (await self.db.execute(stmt)).scalars().all()

        return {
            "items": [
                {
                    "travel_package_id": row.travel_package_id,
                    "total": row.total,
                    "invoice_number": row.invoice_number,
                    "status": row.status,
                    "travel_package": {"id": row.travel_package.id, "title": row.travel_package.title},
                }
                for row in rows
            ],
            "page": page,
            "per_page": per_page,
            "total": total,
            "last_page": max(1, math.ceil(total / per_page)),
        }

    async def get_transaction_detail(self, invoice_number: str, trashed: bool = False) -> dict[str, Any]:
        """Load a transaction together with the number of its line items."""
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number, trashed=trashed)

        count_stmt = select(func.count(TransactionDetail.id)).where(
            TransactionDetail.transaction_id == transaction.id
        )
        details_count = (await self.db.execute(count_stmt)).scalar_one()
        package = await self.db.get(TravelPackage, transaction.travel_package_id)

        return {
            "invoice_number": transaction.invoice_number,
            "travel_package_id": transaction.travel_package_id,
            "travel_package_title": package.title if package else None,
            "total": transaction.total,
            "status": transaction.status,
            "updated_by": transaction.updated_by,
            "deleted_at": transaction.deleted_at,
            "deleted_by": transaction.deleted_by,
            "created_at": transaction.created_at,
            "transaction_details_count": details_count,
        }

    async def get_edit_form(self, invoice_number: str) -> dict[str, Any]:
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number)
        return {
            "invoice_number": transaction.invoice_number,
            "status": transaction.status,
            "statuses": [status.value for status in TransactionStatus],
        }

    def generate_invoice_number(self, now: Optional[datetime] = None) -> str:
        """``<prefix>-<ddmmyy><16 random letters/digits>``."""
        now = now or datetime.now(timezone.utc)
        random_part = "".join(secrets.choice(_INVOICE_ALPHABET) for _ in range(16))
        return f"{settings.invoice_prefix}-{now:%d%m%y}{random_part}"

    # Mutations

    async def update_transaction(self, invoice_number: str, fields: dict[str, Any], actor_id: int) -> Outcome:
        """
        Apply validated fields to an active transaction.

        Raises:
            NotFoundError: If no active transaction has this invoice number
        """
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number)
        data = {**fields, "updated_by": actor_id}

        async def action():
            _ensure_written(await self.gateway.update(transaction, data), UPDATE_FAILED)

        return await self.runner.run(UPDATE_SUCCESS, action, operation="transaction.update")

    async def delete_transaction(self, invoice_number: str, actor_id: int) -> Outcome:
        """
        Move an active transaction to the trash, recording who deleted it.

        Raises:
            NotFoundError: If no active transaction has this invoice number
        """
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number)

        async def action():
            _ensure_written(await self.gateway.update(transaction, {"deleted_by": actor_id}), UPDATE_FAILED)
            _ensure_written(await self.gateway.soft_delete(transaction), DELETE_FAILED)

        return await self.runner.run(
            DELETE_SUCCESS, action, use_transaction=True, operation="transaction.delete",
            failure_message=DELETE_FAILED,
        )

    async def restore_transaction(self, invoice_number: str) -> Outcome:
        """
        Bring a trashed transaction back to the active set.

        Raises:
            NotFoundError: If no trashed transaction has this invoice number
        """
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number, trashed=True)

        async def action():
            _ensure_written(await self.gateway.update(transaction, {"deleted_by": None}), UPDATE_FAILED)
            _ensure_written(await self.gateway.restore(transaction), RESTORE_FAILED)

        return await self.runner.run(
            RESTORE_SUCCESS, action, use_transaction=True, operation="transaction.restore",
            failure_message=RESTORE_FAILED,
        )

    async def force_delete_transaction(self, invoice_number: str) -> Outcome:
        """
        Permanently remove a trashed transaction.

        Raises:
            NotFoundError: If no trashed transaction has this invoice number
        """
        transaction = await self.get_transaction_by_invoice_number_or_raise(invoice_number, trashed=True)

        async def action():
            _ensure_written(await self.gateway.delete(transaction), FORCE_DELETE_FAILED)

        return await self.runner.run(FORCE_DELETE_SUCCESS, action, operation="transaction.force_delete")
