"""Pure domain layer: accrual math, rescaling, value objects and ports."""

from payroll_kernel.domain.accrual import (
    SECONDS_PER_WEEK,
    accrued,
    effective_end_time,
    settlement_window,
)
from payroll_kernel.domain.address import NULL_ADDRESS, is_null_address, normalize_address
from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.currency import PaymentCurrency, Precision
from payroll_kernel.domain.dtos import (
    AccrualQuote,
    CurrencySwitchResult,
    EmployeeInfo,
    EmployeeSnapshot,
    PriceQuote,
    SettlementReceipt,
    SwapRequest,
)
from payroll_kernel.domain.rescale import rescale

__all__ = [
    "SECONDS_PER_WEEK",
    "accrued",
    "effective_end_time",
    "settlement_window",
    "NULL_ADDRESS",
    "is_null_address",
    "normalize_address",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "PaymentCurrency",
    "Precision",
    "AccrualQuote",
    "CurrencySwitchResult",
    "EmployeeInfo",
    "EmployeeSnapshot",
    "PriceQuote",
    "SettlementReceipt",
    "SwapRequest",
    "rescale",
]
