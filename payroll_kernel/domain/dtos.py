"""
Data Transfer Objects -- immutable values crossing service boundaries.

Responsibility:
    Services never hand ORM rows to callers or to the pure accrual
    calculator.  They convert rows to the frozen dataclasses below.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
"""

from dataclasses import dataclass

from payroll_kernel.domain.currency import PaymentCurrency


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Point-in-time copy of an employee record used for accrual math.

    A snapshot with ``weekly_rate == 0`` represents an absent employee.
    """

    address: str
    weekly_rate: int = 0
    employed_since: int = 0
    terminated_at: int = 0
    last_settled_at: int = 0
    preferred_currency: PaymentCurrency = PaymentCurrency.STABLE

    @classmethod
    def absent(cls, address: str) -> "EmployeeSnapshot":
        return cls(address=address)

    @property
    def exists(self) -> bool:
        return self.weekly_rate != 0

    @property
    def is_active(self) -> bool:
        return self.exists and self.terminated_at == 0

    @property
    def is_terminated(self) -> bool:
        return self.exists and self.terminated_at != 0


@dataclass(frozen=True)
class EmployeeInfo:
    """Public view of an employee: (weekly_rate, employed_since, terminated_at)."""

    weekly_rate: int = 0
    employed_since: int = 0
    terminated_at: int = 0

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.weekly_rate, self.employed_since, self.terminated_at)


@dataclass(frozen=True)
class AccrualQuote:
    """Amount owed and the end of the window it was computed over.

    ``end_time`` is the value the settlement checkpoint advances to.
    """

    amount: int
    end_time: int


@dataclass(frozen=True)
class PriceQuote:
    """Oracle answer: ``price`` accounting units per native unit, scaled by 10**decimals."""

    price: int
    decimals: int
    updated_at: int = 0


@dataclass(frozen=True)
class SwapRequest:
    """Parameters of a single-pool exact-input swap."""

    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int


@dataclass(frozen=True)
class SettlementReceipt:
    """Outcome of a withdrawal-class operation.

    ``amount_paid`` is in the payout currency's own precision.  A receipt
    with ``settled == False`` means nothing was owed and nothing moved.
    """

    employee: str
    currency: PaymentCurrency
    accrued: int
    amount_paid: int
    settled_through: int
    settled: bool = True


@dataclass(frozen=True)
class CurrencySwitchResult:
    """Outcome of a currency switch: the settlement it forced and the new preference."""

    settlement: SettlementReceipt
    new_currency: PaymentCurrency
