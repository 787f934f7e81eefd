"""Unit tests for the action runner."""

from unittest.mock import AsyncMock

import pytest

from backoffice.core.exceptions import CapacityExceededError, PersistenceWriteFailedError
from backoffice.services.action_runner import ActionRunner
from backoffice.services.persistence import WriteFailure, WriteResult


@pytest.fixture
def gateway():
    gateway = AsyncMock()
    gateway.begin_transaction = AsyncMock()
    gateway.commit_transaction = AsyncMock(return_value=WriteResult())
    gateway.rollback_transaction = AsyncMock()
    return gateway


@pytest.mark.asyncio
async def test_failing_transactional_action_rolls_back_once(gateway):
    """A raising action inside a transaction is rolled back exactly once and never committed."""
    runner = ActionRunner(gateway)

    async def action():
        raise PersistenceWriteFailedError("Failed to delete transaction")

    outcome = await runner.run("done", action, use_transaction=True)

    assert outcome.ok is False
    assert outcome.message == "Failed to delete transaction"
    gateway.begin_transaction.assert_awaited_once()
    gateway.rollback_transaction.assert_awaited_once()
    gateway.commit_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_succeeding_transactional_action_commits_once(gateway):
    """A completed action inside a transaction is committed exactly once and never rolled back."""
    runner = ActionRunner(gateway)
    calls = []

    async def action():
        calls.append("ran")

    outcome = await runner.run("Transaction restored successfully", action, use_transaction=True)

    assert outcome.ok is True
    assert outcome.message == "Transaction restored successfully"
    assert calls == ["ran"]
    gateway.commit_transaction.assert_awaited_once()
    gateway.rollback_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_non_transactional_action_never_touches_transaction(gateway):
    """Without use_transaction the runner neither begins, commits nor rolls back."""
    runner = ActionRunner(gateway)

    async def failing():
        raise RuntimeError("disk full")

    async def succeeding():
        return None

    failed = await runner.run("done", failing)
    succeeded = await runner.run("done", succeeding)

    assert failed.ok is False
    assert succeeded.ok is True
    gateway.begin_transaction.assert_not_awaited()
    gateway.commit_transaction.assert_not_awaited()
    gateway.rollback_transaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_failure_message_is_passed_through_verbatim(gateway):
    """The raised message reaches the outcome unchanged, for domain and plain errors alike."""
    runner = ActionRunner(gateway)

    async def over_capacity():
        raise CapacityExceededError(5)

    async def plain_error():
        raise ValueError("Unsupported image extension '.gif'")

    capacity = await runner.run("done", over_capacity)
    plain = await runner.run("done", plain_error)

    assert capacity.message == "The amount of travel galleries has exceeded capacity (max 5 items)"
    assert plain.message == "Unsupported image extension '.gif'"


@pytest.mark.asyncio
async def test_failed_commit_is_not_rolled_back_again(gateway):
    """A commit that fails reports the failure message and leaves rollback to the gateway."""
    gateway.commit_transaction = AsyncMock(return_value=WriteResult.failed(WriteFailure.CONNECTION_ERROR))
    runner = ActionRunner(gateway)
    compensation = AsyncMock()

    async def action():
        return None

    outcome = await runner.run(
        "done",
        action,
        use_transaction=True,
        failure_message="Failed to create new travel gallery",
        on_failure=compensation,
    )

    assert outcome.ok is False
    assert outcome.message == "Failed to create new travel gallery"
    gateway.commit_transaction.assert_awaited_once()
    gateway.rollback_transaction.assert_not_awaited()
    compensation.assert_awaited_once()


@pytest.mark.asyncio
async def test_compensation_runs_after_rollback_only_on_failure(gateway):
    runner = ActionRunner(gateway)
    calls = []
    gateway.rollback_transaction = AsyncMock(side_effect=lambda: calls.append("rollback"))

    async def compensation():
        calls.append("compensate")

    async def failing():
        raise PersistenceWriteFailedError("Failed to create new travel gallery")

    async def succeeding():
        return None

    await runner.run("done", succeeding, use_transaction=True, on_failure=compensation)
    assert calls == []

    await runner.run("done", failing, use_transaction=True, on_failure=compensation)
    assert calls == ["rollback", "compensate"]


@pytest.mark.asyncio
async def test_rollback_error_does_not_escape(gateway):
    """A rollback that raises is logged; the caller still gets the action's failure."""
    gateway.rollback_transaction = AsyncMock(side_effect=ConnectionError("server closed the connection"))
    runner = ActionRunner(gateway)
    compensation = AsyncMock()

    async def action():
        raise PersistenceWriteFailedError("Failed to delete transaction")

    outcome = await runner.run("done", action, use_transaction=True, on_failure=compensation)

    assert outcome.ok is False
    assert outcome.message == "Failed to delete transaction"
    compensation.assert_awaited_once()


@pytest.mark.asyncio
async def test_compensation_error_does_not_escape(gateway):
    runner = ActionRunner(gateway)

    async def action():
        raise CapacityExceededError(5)

    async def compensation():
        raise OSError("read-only file system")

    outcome = await runner.run("done", action, use_transaction=True, on_failure=compensation)

    assert outcome.ok is False
    assert outcome.message == "The amount of travel galleries has exceeded capacity (max 5 items)"
