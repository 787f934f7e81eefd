"""Action runner: executes one unit of back-office work and reports an outcome."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..core.exceptions import PersistenceWriteFailedError, ProblemDetailsException, error_message
from ..core.observability import get_logger, metrics_collector
from .persistence import PersistenceGateway

logger = get_logger(__name__)

Action = Callable[[], Awaitable[None]]

COMMIT_FAILED = "Failed to save changes"


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a runner-wrapped action."""
    ok: bool
    message: str


class ActionRunner:
    """
    Run a mutation closure and translate its result into an ``Outcome``.

    With ``use_transaction`` the closure runs inside one database
    transaction: it is committed exactly once when the closure returns and
    rolled back exactly once when it raises. A commit that fails discards
    the unit on its own and reports ``failure_message``. Any exception
    raised by the closure becomes a failed outcome carrying its message;
    nothing propagates past the runner.

    ``on_failure`` undoes side effects outside the database, such as files
    written by the closure. It runs after the unit was discarded.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def run(
        self,
        success_message: str,
        action: Action,
        use_transaction: bool = False,
        operation: str = "action",
        failure_message: Optional[str] = None,
        on_failure: Optional[Action] = None,
    ) -> Outcome:
        committing = False
        try:
            if use_transaction:
                await self.gateway.begin_transaction()

            await action()

            if use_transaction:
                committing = True
                result = await self.gateway.commit_transaction()
                if not result.ok:
                    raise PersistenceWriteFailedError(
                        failure_message or COMMIT_FAILED, reason=result.failure.value
                    )
        except Exception as e:
            if use_transaction and not committing:
                await self._rollback(operation)
            if on_failure is not None:
                await self._compensate(on_failure, operation)

            message = error_message(e)
            if isinstance(e, ProblemDetailsException):
                logger.warning("Action failed", operation=operation, error=message)
            else:
                logger.error("Action failed unexpectedly", operation=operation, error=message, exc_info=True)
            metrics_collector.record_action(operation, ok=False)
            return Outcome(ok=False, message=message)

        logger.info("Action succeeded", operation=operation, transactional=use_transaction)
        metrics_collector.record_action(operation, ok=True)
        return Outcome(ok=True, message=success_message)

    async def _rollback(self, operation: str) -> None:
        try:
            await self.gateway.rollback_transaction()
        except Exception as e:
            logger.error("Rollback failed", operation=operation, error=str(e), exc_info=True)

    async def _compensate(self, on_failure: Action, operation: str) -> None:
        try:
            await on_failure()
        except Exception as e:
            logger.error("Compensation failed", operation=operation, error=str(e), exc_info=True)
