"""
Module: payroll_kernel.models.employee
Responsibility: ORM persistence for employee payroll records -- one row per
    address, created on first registration and overwritten on
    re-registration.  Rows are never deleted.
Architecture position: Kernel > Models.  May import from db/ and domain/ only.

Invariants enforced:
    - address is unique (uq_employee_address) and stored normalized.
    - weekly_rate > 0 for every persisted row (checked by LedgerService
      before insert).
    - terminated_at == 0 means active; once set it is only cleared by
      ``reset()`` (full re-registration).
    - last_settled_at <= terminated_at when terminated.

Failure modes:
    - IntegrityError on a duplicate address insert.
"""

from sqlalchemy import BigInteger, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base
from payroll_kernel.db.types import FixedPointInt
from payroll_kernel.domain.currency import PaymentCurrency
from payroll_kernel.domain.dtos import EmployeeInfo, EmployeeSnapshot


class EmployeeRecord(Base):
    """
    Payroll state of a single employee.

    Contract:
        Timestamps are UNIX seconds.  ``weekly_rate`` is in the accounting
        precision (18 decimals in the reference deployment).

    Non-goals:
        - Does NOT compute accrual; see domain/accrual.py via ``snapshot()``.
    """

    __tablename__ = "employees"

    __table_args__ = (
        UniqueConstraint("address", name="uq_employee_address"),
        Index("idx_employee_terminated_at", "terminated_at"),
    )

    address: Mapped[str] = mapped_column(String(42), nullable=False)

    weekly_rate: Mapped[int] = mapped_column(FixedPointInt(), nullable=False)

    employed_since: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # 0 = not terminated
    terminated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    last_settled_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    preferred_currency: Mapped[PaymentCurrency] = mapped_column(
        String(16),
        nullable=False,
        default=PaymentCurrency.STABLE,
    )

    def __repr__(self) -> str:
        state = "active" if self.is_active else f"terminated@{self.terminated_at}"
        return f"<EmployeeRecord {self.address}: {state}>"

    @property
    def is_active(self) -> bool:
        return self.weekly_rate != 0 and self.terminated_at == 0

    @property
    def currency(self) -> PaymentCurrency:
        # String column; normalize whatever the driver hands back
        return PaymentCurrency(self.preferred_currency)

    def reset(self, weekly_rate: int, now: int) -> None:
        """Overwrite the record as a fresh registration at ``now``."""
        self.weekly_rate = weekly_rate
        self.employed_since = now
        self.terminated_at = 0
        self.last_settled_at = now
        self.preferred_currency = PaymentCurrency.STABLE

    def snapshot(self) -> EmployeeSnapshot:
        return EmployeeSnapshot(
            address=self.address,
            weekly_rate=self.weekly_rate,
            employed_since=self.employed_since,
            terminated_at=self.terminated_at,
            last_settled_at=self.last_settled_at,
            preferred_currency=self.currency,
        )

    def info(self) -> EmployeeInfo:
        return EmployeeInfo(
            weekly_rate=self.weekly_rate,
            employed_since=self.employed_since,
            terminated_at=self.terminated_at,
        )
