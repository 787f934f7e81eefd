"""Unit tests for the transaction lifecycle service."""

import re
from datetime import datetime

import pytest
from sqlalchemy import func, select

from backoffice.core.exceptions import NotFoundError
from backoffice.models import Active, Transaction, TransactionStatus, Trashed
from backoffice.services.persistence import WriteFailure, WriteResult
from backoffice.services.transaction_service import TransactionService

INVOICE = "RelaxArc-0101230000000000000000000001"


async def _reload(session, invoice_number: str) -> Transaction:
    stmt = select(Transaction).where(Transaction.invoice_number == invoice_number)
    return (await session.execute(stmt)).scalar_one()


@pytest.mark.asyncio
async def test_update_status(test_session, pending_transaction):
    """Updating a PENDING transaction to SUCCESS stores the status and the editor."""
    service = TransactionService(test_session)

    outcome = await service.update_transaction(INVOICE, {"status": "SUCCESS"}, actor_id=7)

    assert outcome.ok is True
    assert outcome.message == "Transaction updated successfully"
    transaction = await _reload(test_session, INVOICE)
    assert transaction.status == TransactionStatus.SUCCESS
    assert transaction.updated_by == 7


@pytest.mark.asyncio
async def test_update_reports_write_failure(test_session, pending_transaction, monkeypatch):
    """A write that does not apply becomes a failed outcome with the update message."""
    service = TransactionService(test_session)

    async def no_rows(record, fields):
        return WriteResult.failed(WriteFailure.NO_ROWS_MATCHED)

    monkeypatch.setattr(service.gateway, "update", no_rows)

    outcome = await service.update_transaction(INVOICE, {"status": "SUCCESS"}, actor_id=7)

    assert outcome.ok is False
    assert outcome.message == "Failed to update transaction"


@pytest.mark.asyncio
async def test_lookup_missing_invoice_raises_not_found(test_session, pending_transaction):
    """Unknown invoice numbers fail in both the active set and the trash."""
    service = TransactionService(test_session)

    with pytest.raises(NotFoundError):
        await service.get_transaction_by_invoice_number_or_raise("RelaxArc-unknown")
    with pytest.raises(NotFoundError):
        await service.get_transaction_by_invoice_number_or_raise("RelaxArc-unknown", trashed=True)


@pytest.mark.asyncio
async def test_active_transaction_is_not_in_trash(test_session, pending_transaction):
    """An active record is invisible to trash lookups and vice versa."""
    service = TransactionService(test_session)

    with pytest.raises(NotFoundError):
        await service.get_transaction_by_invoice_number_or_raise(INVOICE, trashed=True)
    found = await service.get_transaction_by_invoice_number_or_raise(INVOICE)
    assert isinstance(found.state, Active)


@pytest.mark.asyncio
async def test_soft_delete_then_restore(test_session, pending_transaction):
    """Soft delete stamps the tombstone and actor; restore clears both."""
    service = TransactionService(test_session)

    deleted = await service.delete_transaction(INVOICE, actor_id=3)
    assert deleted.ok is True
    assert deleted.message == "Transaction moved to trash successfully"

    transaction = await _reload(test_session, INVOICE)
    assert isinstance(transaction.state, Trashed)
    assert transaction.state.by == 3
    assert isinstance(transaction.deleted_at, datetime)

    restored = await service.restore_transaction(INVOICE)
    assert restored.ok is True

    transaction = await _reload(test_session, INVOICE)
    assert transaction.state == Active()
    assert transaction.deleted_at is None
    assert transaction.deleted_by is None


@pytest.mark.asyncio
async def test_restore_active_transaction_raises_not_found(test_session, pending_transaction):
    service = TransactionService(test_session)

    with pytest.raises(NotFoundError):
        await service.restore_transaction(INVOICE)


@pytest.mark.asyncio
async def test_soft_delete_rolls_back_actor_when_tombstone_fails(test_session, pending_transaction, monkeypatch):
    """If the second write fails, the first one is rolled back with it."""
    service = TransactionService(test_session)

    async def tombstone_fails(record, at=None):
        return WriteResult.failed(WriteFailure.CONNECTION_ERROR)

    monkeypatch.setattr(service.gateway, "soft_delete", tombstone_fails)

    outcome = await service.delete_transaction(INVOICE, actor_id=3)

    assert outcome.ok is False
    assert outcome.message == "Failed to delete transaction"
    transaction = await _reload(test_session, INVOICE)
    assert transaction.deleted_by is None
    assert transaction.deleted_at is None


@pytest.mark.asyncio
async def test_restore_failure_message_names_the_failed_step(
    test_session, travel_package, transaction_factory, monkeypatch
):
    await transaction_factory(travel_package.id, trashed=True)
    service = TransactionService(test_session)

    async def restore_fails(record):
        return WriteResult.failed(WriteFailure.DATABASE_ERROR)

    monkeypatch.setattr(service.gateway, "restore", restore_fails)

    outcome = await service.restore_transaction(INVOICE)

    assert outcome.ok is False
    assert outcome.message == "Failed to restore transaction"
    transaction = await _reload(test_session, INVOICE)
    assert transaction.deleted_by == 1
    assert transaction.deleted_at is not None


@pytest.mark.asyncio
async def test_force_delete_requires_trashed_transaction(test_session, pending_transaction):
    """Force delete never reaches an active record."""
    service = TransactionService(test_session)

    with pytest.raises(NotFoundError):
        await service.force_delete_transaction(INVOICE)

    count = (await test_session.execute(select(func.count(Transaction.id)))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_force_delete_removes_trashed_transaction(test_session, travel_package, transaction_factory):
    await transaction_factory(travel_package.id, trashed=True)
    service = TransactionService(test_session)

    outcome = await service.force_delete_transaction(INVOICE)

    assert outcome.ok is True
    assert outcome.message == "Transaction permanently deleted successfully"
    count = (await test_session.execute(select(func.count(Transaction.id)))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_list_transactions_filters_and_paginates(test_session, package_factory, transaction_factory):
    """Listings match the package title, filter by status, page by 10 and exclude the trash."""
    bali = await package_factory(title="Bali Island Escape", slug="bali")
    kyoto = await package_factory(title="Kyoto Temples", slug="kyoto")
    bali_id, kyoto_id = bali.id, kyoto.id

    for i in range(12):
        await transaction_factory(bali_id, invoice_number=f"RelaxArc-bali-{i:02d}")
    await transaction_factory(kyoto_id, invoice_number="RelaxArc-kyoto-paid", status=TransactionStatus.SUCCESS)
    await transaction_factory(kyoto_id, invoice_number="RelaxArc-kyoto-trash", trashed=True)

    service = TransactionService(test_session)

    first = await service.list_transactions(keyword="bali")
    assert first["total"] == 12
    assert first["last_page"] == 2
    assert len(first["items"]) == 10
    assert first["items"][0]["invoice_number"] == "RelaxArc-bali-11"
    assert first["items"][0]["travel_package"]["title"] == "Bali Island Escape"

    second = await service.list_transactions(keyword="BALI", page=2)
    assert [item["invoice_number"] for item in second["items"]] == ["RelaxArc-bali-01", "RelaxArc-bali-00"]

    paid = await service.list_transactions(status=TransactionStatus.SUCCESS)
    assert [item["invoice_number"] for item in paid["items"]] == ["RelaxArc-kyoto-paid"]

    trash = await service.list_transactions(trashed=True)
    assert [item["invoice_number"] for item in trash["items"]] == ["RelaxArc-kyoto-trash"]


@pytest.mark.asyncio
async def test_transaction_detail_counts_line_items(test_session, pending_transaction):
    from backoffice.models import TransactionDetail

    test_session.add_all([
        TransactionDetail(transaction_id=pending_transaction.id, username="ayu", nationality="ID"),
        TransactionDetail(transaction_id=pending_transaction.id, username="kenji", nationality="JP"),
    ])
    await test_session.commit()

    detail = await TransactionService(test_session).get_transaction_detail(INVOICE)

    assert detail["transaction_details_count"] == 2
    assert detail["travel_package_title"] == "Bali Island Escape"
    assert detail["status"] == "PENDING"


def test_generate_invoice_number(test_session):
    service = TransactionService(test_session)

    invoice = service.generate_invoice_number(now=datetime(2023, 1, 1))

    assert re.fullmatch(r"RelaxArc-010123[A-Za-z0-9]{16}", invoice)
    assert invoice != service.generate_invoice_number(now=datetime(2023, 1, 1))
