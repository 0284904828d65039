"""
Payroll events -- what the ledger announces after a committed operation.

Events are buffered for the duration of an operation and handed to an
``EventSink`` only after the enclosing transaction commits.  A failed
operation publishes nothing.
"""

from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

from payroll_kernel.domain.currency import PaymentCurrency


@dataclass(frozen=True)
class EmployeeRegistered:
    employee: str
    weekly_rate: int


@dataclass(frozen=True)
class EmployeeTerminated:
    employee: str


@dataclass(frozen=True)
class SalaryWithdrawn:
    employee: str
    currency: PaymentCurrency
    amount_paid: int


@dataclass(frozen=True)
class CurrencySwitched:
    employee: str
    new_currency: PaymentCurrency


@dataclass(frozen=True)
class PayrollPaused:
    actor: str


@dataclass(frozen=True)
class PayrollUnpaused:
    actor: str


PayrollEvent = Union[
    EmployeeRegistered,
    EmployeeTerminated,
    SalaryWithdrawn,
    CurrencySwitched,
    PayrollPaused,
    PayrollUnpaused,
]


@runtime_checkable
class EventSink(Protocol):
    """Receiver of committed payroll events."""

    def publish(self, event: PayrollEvent) -> None: ...


@dataclass
class InMemoryEventSink:
    """EventSink that keeps every published event in order."""

    events: list[PayrollEvent] = field(default_factory=list)

    def publish(self, event: PayrollEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[PayrollEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()


class EventBuffer:
    """Per-operation staging area between the services and the sink."""

    def __init__(self) -> None:
        self._pending: list[PayrollEvent] = []

    def record(self, event: PayrollEvent) -> None:
        self._pending.append(event)

    def drain(self) -> list[PayrollEvent]:
        pending, self._pending = self._pending, []
        return pending

    def discard(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
