"""ORM models for the payroll kernel."""

from payroll_kernel.models.employee import EmployeeRecord
from payroll_kernel.models.payroll_state import PAYROLL_STATE_ID, PayrollState

__all__ = [
    "EmployeeRecord",
    "PayrollState",
    "PAYROLL_STATE_ID",
]
