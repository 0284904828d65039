"""
Module: payroll_kernel.models.payroll_state
Responsibility: The process-wide scalars of the payroll: the active employee
    count and the circuit-breaker flag.  Exactly one row exists, seeded by
    ``create_tables()``.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - active_employee_count >= 0 and equals the number of employee rows
      with weekly_rate != 0 and terminated_at == 0.  Changed only by
      register (+1) and terminate (-1).
"""

from uuid import UUID

from sqlalchemy import BigInteger, Boolean, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base

# Fixed key of the singleton row
PAYROLL_STATE_ID = UUID("00000000-0000-0000-0000-000000000001")


class PayrollState(Base):
    """Singleton row with the active count and pause flag."""

    __tablename__ = "payroll_state"

    __table_args__ = (
        CheckConstraint("active_employee_count >= 0", name="ck_active_count_non_negative"),
    )

    active_employee_count: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<PayrollState active={self.active_employee_count} paused={self.paused}>"

    @classmethod
    def initial(cls) -> "PayrollState":
        return cls(id=PAYROLL_STATE_ID, active_employee_count=0, paused=False)
