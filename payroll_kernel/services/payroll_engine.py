"""
PayrollEngine -- transactional facade over the payroll kernel services.

Responsibility:
    The sole public entry point.  Each public method is one atomic
    operation: it serializes against every other operation, opens a
    session, builds the services over it, commits on success and rolls
    back on any exception, and only then publishes the events the
    operation staged.

Architecture position:
    Kernel > Services -- outermost shell.  Composes LedgerService,
    CircuitBreaker and SettlementService; owns the ReentrancyGuard and the
    collaborator adapters for its whole lifetime.

Invariants enforced:
    - Operations are serialized under a process-wide RLock; no two
      operations interleave.
    - All-or-nothing: a failed operation leaves the database untouched and
      publishes nothing.
    - No engine call is accepted while a settlement is in flight (a
      collaborator calling back in gets ReentrantCallError).

Usage::

    engine = PayrollEngine(
        session_factory=get_session_factory(),
        config=PayrollConfig.from_yaml(Path("payroll.yaml")),
        stable_token=usdc, native_transfer=wallet, price_feed=feed,
        swap_router=router, unwrapper=weth, event_sink=sink,
    )
    engine.register(hr, "0xabc...", 1000 * 10**18)
    receipt = engine.withdraw("0xabc...")
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.currency import PaymentCurrency
from payroll_kernel.domain.dtos import CurrencySwitchResult, EmployeeInfo, SettlementReceipt
from payroll_kernel.domain.events import EventBuffer, EventSink, InMemoryEventSink
from payroll_kernel.domain.ports import (
    NativeAssetTransfer,
    NativeUnwrapper,
    PriceFeed,
    StableAssetTransfer,
    SwapRouter,
)
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.circuit_breaker import CircuitBreaker
from payroll_kernel.services.exchange_adapter import ExchangeAdapter
from payroll_kernel.services.ledger_service import LedgerService
from payroll_kernel.services.oracle_adapter import PriceOracleAdapter
from payroll_kernel.services.reentrancy import ReentrancyGuard
from payroll_kernel.services.settlement_service import SettlementService

logger = get_logger("services.engine")

T = TypeVar("T")


@dataclass
class _Unit:
    """Services bound to one session for one operation."""

    session: Session
    ledger: LedgerService
    breaker: CircuitBreaker
    settlement: SettlementService


class PayrollEngine:
    """
    Payroll ledger and settlement engine.

    Contract:
        Every write takes the caller identity as its first argument.
        Queries never fail for unknown employees.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: PayrollConfig,
        stable_token: StableAssetTransfer,
        native_transfer: NativeAssetTransfer,
        price_feed: PriceFeed,
        swap_router: SwapRouter,
        unwrapper: NativeUnwrapper,
        event_sink: EventSink | None = None,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._config = config
        self._clock = clock or SystemClock()
        self._stable_token = stable_token
        self._native_transfer = native_transfer
        self._unwrapper = unwrapper
        self._oracle = PriceOracleAdapter(price_feed)
        self._exchange = ExchangeAdapter(swap_router, config, clock=self._clock)
        self._guard = ReentrancyGuard()
        self._lock = threading.RLock()
        self.event_sink = event_sink if event_sink is not None else InMemoryEventSink()

    @property
    def config(self) -> PayrollConfig:
        return self._config

    # -----------------------------------------------------------------
    # Transaction plumbing
    # -----------------------------------------------------------------

    def _build_unit(self, session: Session, events: EventBuffer) -> _Unit:
        ledger = LedgerService(session, self._config, events, clock=self._clock)
        breaker = CircuitBreaker(session, self._config, ledger, events)
        settlement = SettlementService(
            session,
            self._config,
            ledger=ledger,
            breaker=breaker,
            guard=self._guard,
            oracle=self._oracle,
            exchange=self._exchange,
            stable_token=self._stable_token,
            native_transfer=self._native_transfer,
            unwrapper=self._unwrapper,
            events=events,
            clock=self._clock,
        )
        return _Unit(session=session, ledger=ledger, breaker=breaker, settlement=settlement)

    @contextmanager
    def _operation(self, name: str, caller: str | None) -> Iterator[_Unit]:
        with self._lock:
            # Settlement holds the guard itself; everything else must find it idle
            if name not in ("withdraw", "switch_currency"):
                self._guard.ensure_idle(name)

            events = EventBuffer()
            session = self._session_factory()
            correlation_id = str(uuid4())
            with LogContext.bind(
                correlation_id=correlation_id, actor_id=caller, operation=name
            ):
                try:
                    yield self._build_unit(session, events)
                    session.commit()
                except PayrollKernelError as exc:
                    session.rollback()
                    events.discard()
                    logger.warning(
                        "operation_failed",
                        extra={"error_code": exc.code, "error": str(exc)},
                    )
                    raise
                except Exception:
                    session.rollback()
                    events.discard()
                    logger.error("operation_error", exc_info=True)
                    raise
                finally:
                    session.close()

                published = events.drain()
                for event in published:
                    self.event_sink.publish(event)
                logger.info(
                    "operation_committed",
                    extra={"events_published": len(published)},
                )

    def _query(self, fn: Callable[[LedgerService], T]) -> T:
        with self._lock:
            self._guard.ensure_idle("query")
            session = self._session_factory()
            try:
                return fn(LedgerService(session, self._config, EventBuffer(), clock=self._clock))
            finally:
                session.rollback()
                session.close()

    # -----------------------------------------------------------------
    # HR operations
    # -----------------------------------------------------------------

    def register(self, caller: str, employee: str, weekly_rate: int) -> EmployeeInfo:
        with self._operation("register", caller) as unit:
            return unit.ledger.register(caller, employee, weekly_rate)

    def terminate(self, caller: str, employee: str) -> EmployeeInfo:
        with self._operation("terminate", caller) as unit:
            return unit.ledger.terminate(caller, employee)

    def pause(self, caller: str) -> None:
        with self._operation("pause", caller) as unit:
            unit.breaker.pause(caller)

    def unpause(self, caller: str) -> None:
        with self._operation("unpause", caller) as unit:
            unit.breaker.unpause(caller)

    # -----------------------------------------------------------------
    # Employee operations
    # -----------------------------------------------------------------

    def withdraw(self, caller: str) -> SettlementReceipt:
        with self._operation("withdraw", caller) as unit:
            return unit.settlement.withdraw(caller)

    def switch_currency(self, caller: str) -> CurrencySwitchResult:
        with self._operation("switch_currency", caller) as unit:
            return unit.settlement.switch_currency(caller)

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def info(self, employee: str) -> EmployeeInfo:
        return self._query(lambda ledger: ledger.info(employee))

    def active_count(self) -> int:
        return self._query(lambda ledger: ledger.active_count())

    def accrued_salary(self, employee: str) -> int:
        return self._query(lambda ledger: ledger.accrued_salary(employee))

    def preferred_currency(self, employee: str) -> PaymentCurrency:
        return self._query(lambda ledger: ledger.preferred_currency(employee))

    def is_paused(self) -> bool:
        return self._query(lambda ledger: ledger.load_state().paused)
