"""
CircuitBreaker -- process-wide pause gate in front of every payout.

Responsibility:
    Persists the ``paused`` flag on the singleton payroll state row and lets
    the HR authority engage or release it.  SettlementService consults it
    before any balance-affecting work.

Invariants enforced:
    - Only the HR authority toggles the flag.
    - pause() on a paused payroll and unpause() on a running one are
      rejected rather than silently accepted.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - UnauthorizedError: caller is not the HR authority.
    - PausedError: pause() while paused, or ensure_not_paused() while paused.
    - NotPausedError: unpause() while running.
"""

from sqlalchemy.orm import Session

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.address import normalize_address
from payroll_kernel.domain.events import EventBuffer, PayrollPaused, PayrollUnpaused
from payroll_kernel.exceptions import NotPausedError, PausedError, UnauthorizedError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.ledger_service import LedgerService

logger = get_logger("services.circuit_breaker")


class CircuitBreaker(BaseService):
    """Pausable gate backed by ``PayrollState.paused``."""

    def __init__(
        self,
        session: Session,
        config: PayrollConfig,
        ledger: LedgerService,
        events: EventBuffer,
    ):
        super().__init__(session)
        self._config = config
        self._ledger = ledger
        self._events = events

    def is_paused(self) -> bool:
        return self._ledger.load_state().paused

    def ensure_not_paused(self, action: str) -> None:
        if self.is_paused():
            logger.warning("payroll_paused_rejection", extra={"action": action})
            raise PausedError(action)

    def pause(self, caller: str) -> None:
        if not self._config.is_hr_authority(caller):
            raise UnauthorizedError(caller, "pause payroll")
        state = self._ledger.load_state(for_update=True)
        if state.paused:
            raise PausedError("pause payroll")
        state.paused = True
        self.session.flush()

        actor = normalize_address(caller)
        self._events.record(PayrollPaused(actor=actor))
        logger.warning("payroll_paused", extra={"actor": actor})

    def unpause(self, caller: str) -> None:
        if not self._config.is_hr_authority(caller):
            raise UnauthorizedError(caller, "unpause payroll")
        state = self._ledger.load_state(for_update=True)
        if not state.paused:
            raise NotPausedError()
        state.paused = False
        self.session.flush()

        actor = normalize_address(caller)
        self._events.record(PayrollUnpaused(actor=actor))
        logger.info("payroll_unpaused", extra={"actor": actor})
