"""
Accrual -- pro-rata salary earned since the last settlement checkpoint.

Responsibility:
    Pure function of an ``EmployeeSnapshot`` and the current time.  The
    settlement service calls ``settlement_window()`` once per operation and
    advances the checkpoint to exactly the ``end_time`` it returns, so the
    amount paid and the checkpoint always describe the same window.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Absent employees (weekly_rate == 0) accrue nothing.
    - Accrual never extends past ``terminated_at``.
    - A window that is empty or inverted (clock skew, double settlement)
      accrues nothing.
    - Integer division truncates toward zero.
"""

from payroll_kernel.domain.dtos import AccrualQuote, EmployeeSnapshot

SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def effective_end_time(record: EmployeeSnapshot, now: int) -> int:
    """``terminated_at`` for terminated employees, otherwise ``now``."""
    return record.terminated_at if record.terminated_at != 0 else now


def settlement_window(record: EmployeeSnapshot, now: int) -> AccrualQuote:
    """
    Amount owed for ``record`` at ``now`` and the end of the accrual window.

    Postconditions:
        - ``amount >= 0``.
        - ``end_time`` is the checkpoint the caller must persist when it
          pays ``amount``.  For an empty window it is ``last_settled_at``.
    """
    if not record.exists:
        return AccrualQuote(amount=0, end_time=0)

    end_time = effective_end_time(record, now)
    if end_time <= record.last_settled_at:
        return AccrualQuote(amount=0, end_time=record.last_settled_at)

    elapsed = end_time - record.last_settled_at
    amount = record.weekly_rate * elapsed // SECONDS_PER_WEEK
    return AccrualQuote(amount=amount, end_time=end_time)


def accrued(record: EmployeeSnapshot, now: int) -> int:
    """Accounting-precision amount earned but not yet withdrawn."""
    return settlement_window(record, now).amount
