"""
LedgerService -- employee registration lifecycle and ledger queries.

Responsibility:
    Owns the employee records and the active-count aggregate.  Registers and
    terminates employees on behalf of the HR authority and answers the
    read-only queries (info, active count, preference, accrued salary).

Architecture position:
    Kernel > Services -- imperative shell.
    Called by PayrollEngine for HR operations and by SettlementService to
    load the record being settled.

Invariants enforced:
    - Only the configured HR authority may register or terminate.
    - At most one active record per address; re-registration of a
      terminated address overwrites the record in place.
    - active_employee_count changes only here: +1 on register, -1 on
      terminate.
    - Absent employees read as zero, never as an error.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - UnauthorizedError: caller is not the HR authority.
    - InvalidEmployeeError: null address.
    - InvalidSalaryError: weekly rate is not positive.
    - AlreadyRegisteredError: address already has an active record.
    - NotRegisteredError: terminate on an absent or terminated record.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.accrual import accrued
from payroll_kernel.domain.address import is_null_address, normalize_address
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.currency import PaymentCurrency
from payroll_kernel.domain.dtos import EmployeeInfo, EmployeeSnapshot
from payroll_kernel.domain.events import EmployeeRegistered, EmployeeTerminated, EventBuffer
from payroll_kernel.exceptions import (
    AlreadyRegisteredError,
    InvalidEmployeeError,
    InvalidSalaryError,
    NotRegisteredError,
    UnauthorizedError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.employee import EmployeeRecord
from payroll_kernel.models.payroll_state import PAYROLL_STATE_ID, PayrollState
from payroll_kernel.services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService):
    """
    Service for the employee ledger.

    Contract:
        Write methods take the caller identity explicitly and check it
        against ``config.hr_authority`` by value.  Query methods are total.

    Non-goals:
        - Does NOT pay anyone; see SettlementService.
    """

    def __init__(
        self,
        session: Session,
        config: PayrollConfig,
        events: EventBuffer,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._config = config
        self._events = events
        self._clock = clock or SystemClock()

    # -----------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------

    def load_record(
        self, employee: str, for_update: bool = False
    ) -> EmployeeRecord | None:
        """Fetch the ORM row for ``employee`` (optionally row-locked)."""
        stmt = select(EmployeeRecord).where(
            EmployeeRecord.address == normalize_address(employee)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def load_state(self, for_update: bool = False) -> PayrollState:
        """Fetch the singleton payroll state row."""
        stmt = select(PayrollState).where(PayrollState.id == PAYROLL_STATE_ID)
        if for_update:
            stmt = stmt.with_for_update()
        state = self.session.execute(stmt).scalar_one_or_none()
        if state is None:
            raise RuntimeError("payroll_state row missing. Call create_tables() first.")
        return state

    def snapshot(self, employee: str) -> EmployeeSnapshot:
        record = self.load_record(employee)
        if record is None:
            return EmployeeSnapshot.absent(normalize_address(employee))
        return record.snapshot()

    # -----------------------------------------------------------------
    # HR operations
    # -----------------------------------------------------------------

    def _require_hr(self, caller: str, action: str) -> None:
        if not self._config.is_hr_authority(caller):
            logger.warning(
                "hr_authorization_rejected",
                extra={"caller": caller, "action": action},
            )
            raise UnauthorizedError(caller, action)

    def register(self, caller: str, employee: str, weekly_rate: int) -> EmployeeInfo:
        """
        Register ``employee`` at ``weekly_rate`` (accounting precision).

        Postconditions:
            - Record is active with employed_since == last_settled_at == now,
              preference STABLE.
            - active_employee_count incremented by one.
            - EmployeeRegistered staged for publication.
        """
        self._require_hr(caller, "register employees")
        if is_null_address(employee):
            raise InvalidEmployeeError(employee)
        if weekly_rate <= 0:
            raise InvalidSalaryError(employee, weekly_rate)

        address = normalize_address(employee)
        record = self.load_record(address, for_update=True)
        if record is not None and record.is_active:
            logger.warning(
                "employee_already_registered",
                extra={"employee": address},
            )
            raise AlreadyRegisteredError(address)

        now = self._clock.timestamp()
        state = self.load_state(for_update=True)

        if record is None:
            record = EmployeeRecord(address=address)
            record.reset(weekly_rate, now)
            self.session.add(record)
            rehire = False
        else:
            record.reset(weekly_rate, now)
            rehire = True

        state.active_employee_count += 1
        self.session.flush()

        self._events.record(EmployeeRegistered(employee=address, weekly_rate=weekly_rate))
        logger.info(
            "employee_registered",
            extra={
                "employee": address,
                "weekly_rate": str(weekly_rate),
                "employed_since": now,
                "rehire": rehire,
                "active_employee_count": state.active_employee_count,
            },
        )
        return record.info()

    def terminate(self, caller: str, employee: str) -> EmployeeInfo:
        """
        Terminate ``employee`` at the current time.

        Postconditions:
            - terminated_at == now; accrual frozen from here on.
            - active_employee_count decremented by one.
            - EmployeeTerminated staged for publication.
        """
        self._require_hr(caller, "terminate employees")

        address = normalize_address(employee)
        record = self.load_record(address, for_update=True)
        if record is None or not record.is_active:
            logger.warning(
                "employee_not_registered",
                extra={"employee": address},
            )
            raise NotRegisteredError(address)

        now = self._clock.timestamp()
        state = self.load_state(for_update=True)

        record.terminated_at = now
        state.active_employee_count -= 1
        self.session.flush()

        self._events.record(EmployeeTerminated(employee=address))
        logger.info(
            "employee_terminated",
            extra={
                "employee": address,
                "terminated_at": now,
                "active_employee_count": state.active_employee_count,
            },
        )
        return record.info()

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def info(self, employee: str) -> EmployeeInfo:
        """(weekly_rate, employed_since, terminated_at); zeros when absent."""
        record = self.load_record(employee)
        if record is None:
            return EmployeeInfo()
        return record.info()

    def active_count(self) -> int:
        return self.load_state().active_employee_count

    def preferred_currency(self, employee: str) -> PaymentCurrency:
        return self.snapshot(employee).preferred_currency

    def accrued_salary(self, employee: str) -> int:
        """Amount withdrawable right now, accounting precision."""
        return accrued(self.snapshot(employee), self._clock.timestamp())
