"""
SettlementService -- accrual -> conversion -> transfer -> checkpoint.

Responsibility:
    Pays employees what they have accrued, in their preferred currency, and
    changes that preference.  Both ``withdraw`` and ``switch_currency`` run
    the same withdrawal state machine:

        1. Guard       re-entrancy flag, employee exists, not paused
        2. Quote       owed = accrued(record, now), computed once; nothing
                       owed settles nothing (or fails, strict policy)
        3. Checkpoint  last_settled_at = end of the quoted window, flushed
        4. Payout      STABLE: rescale + transfer
                       NATIVE: oracle price -> min out -> swap -> unwrap -> send
        5. Emit        SalaryWithdrawn(employee, currency, amount_paid)

    ``switch_currency`` then flips the preference and emits
    CurrencySwitched.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by PayrollEngine inside a transaction it owns.

Invariants enforced:
    - Checkpoint before payout: the accrual checkpoint is advanced and
      flushed before any external call moves funds, so a re-entrant caller
      sees nothing owed.
    - The checkpoint advances to exactly the window end used for the quote.
    - All scale conversions go through ``rescale`` with precisions taken
      from PayrollConfig.
    - Minimum swap output is ``expected * slippage_tolerance // 100``.
    - Flush-only: the enclosing transaction is committed or rolled back by
      the caller, so a failure leaves the ledger unchanged.

Failure modes:
    - ReentrantCallError: settlement already in flight.
    - UnauthorizedError: caller has no record; or switch by a terminated
      employee.
    - PausedError: circuit breaker engaged.
    - NothingToWithdrawError: nothing owed, when the config selects the
      strict policy.  The default settles nothing and carries on.
    - TransferFailedError, OracleUnavailableError, OraclePriceInvalidError,
      ExchangeUnavailableError, SlippageExceededError, DeadlineExpiredError
      from the payout leg.
"""

from sqlalchemy.orm import Session

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.accrual import settlement_window
from payroll_kernel.domain.address import normalize_address
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.currency import PaymentCurrency
from payroll_kernel.domain.dtos import CurrencySwitchResult, PriceQuote, SettlementReceipt
from payroll_kernel.domain.events import CurrencySwitched, EventBuffer, SalaryWithdrawn
from payroll_kernel.domain.ports import NativeAssetTransfer, NativeUnwrapper, StableAssetTransfer
from payroll_kernel.domain.rescale import rescale
from payroll_kernel.exceptions import (
    NothingToWithdrawError,
    PayrollKernelError,
    TransferFailedError,
    UnauthorizedError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.models.employee import EmployeeRecord
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.circuit_breaker import CircuitBreaker
from payroll_kernel.services.exchange_adapter import ExchangeAdapter
from payroll_kernel.services.ledger_service import LedgerService
from payroll_kernel.services.oracle_adapter import PriceOracleAdapter
from payroll_kernel.services.reentrancy import ReentrancyGuard

logger = get_logger("services.settlement")


def native_swap_terms(
    owed: int,
    quote: PriceQuote,
    config: PayrollConfig,
) -> tuple[int, int, int]:
    """
    Swap parameters for paying ``owed`` (accounting precision) in native.

    Returns:
        (amount_in, expected_out, min_out) where ``amount_in`` is in stable
        precision and the outputs are in native precision.
    """
    precision = config.precision
    amount_in = rescale(owed, precision.accounting, precision.stable)
    owed_native_scale = rescale(owed, precision.accounting, precision.native)
    expected_out = owed_native_scale * 10**quote.decimals // quote.price
    min_out = expected_out * config.slippage_tolerance // 100
    return amount_in, expected_out, min_out


class SettlementService(BaseService):
    """
    Withdrawal-class operations for a single caller.

    Contract:
        The caller identity is the employee being paid.  The service reads
        the clock once per operation and uses that instant for both the
        quote and the checkpoint.

    Non-goals:
        - Does NOT commit; PayrollEngine owns the transaction.
        - Does NOT retry failed payouts.
    """

    def __init__(
        self,
        session: Session,
        config: PayrollConfig,
        ledger: LedgerService,
        breaker: CircuitBreaker,
        guard: ReentrancyGuard,
        oracle: PriceOracleAdapter,
        exchange: ExchangeAdapter,
        stable_token: StableAssetTransfer,
        native_transfer: NativeAssetTransfer,
        unwrapper: NativeUnwrapper,
        events: EventBuffer,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._config = config
        self._ledger = ledger
        self._breaker = breaker
        self._guard = guard
        self._oracle = oracle
        self._exchange = exchange
        self._stable_token = stable_token
        self._native_transfer = native_transfer
        self._unwrapper = unwrapper
        self._events = events
        self._clock = clock or SystemClock()

    # -----------------------------------------------------------------
    # Public operations
    # -----------------------------------------------------------------

    def withdraw(self, caller: str) -> SettlementReceipt:
        """Pay ``caller`` everything accrued up to now."""
        with self._guard.hold("withdraw"):
            employee = normalize_address(caller)
            with LogContext.bind(employee=employee, operation="withdraw"):
                record = self._authorize(employee, "withdraw salary")
                now = self._clock.timestamp()
                return self._settle(record, now)

    def switch_currency(self, caller: str) -> CurrencySwitchResult:
        """Settle ``caller`` in the current currency, then flip the preference."""
        with self._guard.hold("switch_currency"):
            employee = normalize_address(caller)
            with LogContext.bind(employee=employee, operation="switch_currency"):
                record = self._authorize(employee, "switch currency")
                if record.terminated_at != 0:
                    # Terminated employees keep withdrawal rights, not preferences
                    logger.warning(
                        "switch_rejected_terminated",
                        extra={"terminated_at": record.terminated_at},
                    )
                    raise UnauthorizedError(employee, "switch currency after termination")

                now = self._clock.timestamp()
                receipt = self._settle(record, now)

                new_currency = record.currency.other()
                record.preferred_currency = new_currency
                self.session.flush()

                self._events.record(
                    CurrencySwitched(employee=employee, new_currency=new_currency)
                )
                logger.info(
                    "currency_switched",
                    extra={
                        "previous_currency": receipt.currency,
                        "new_currency": new_currency,
                    },
                )
                return CurrencySwitchResult(settlement=receipt, new_currency=new_currency)

    # -----------------------------------------------------------------
    # State machine steps
    # -----------------------------------------------------------------

    def _authorize(self, employee: str, action: str) -> EmployeeRecord:
        record = self._ledger.load_record(employee, for_update=True)
        if record is None or record.weekly_rate == 0:
            logger.warning("settlement_rejected_unknown_employee")
            raise UnauthorizedError(employee, action)
        self._breaker.ensure_not_paused(action)
        return record

    def _settle(self, record: EmployeeRecord, now: int) -> SettlementReceipt:
        currency = record.currency
        window = settlement_window(record.snapshot(), now)

        if window.amount == 0:
            if self._config.reject_zero_withdrawal:
                logger.warning("nothing_to_withdraw")
                raise NothingToWithdrawError(record.address)
            logger.info("settlement_skipped_nothing_owed")
            return SettlementReceipt(
                employee=record.address,
                currency=currency,
                accrued=0,
                amount_paid=0,
                settled_through=record.last_settled_at,
                settled=False,
            )

        # Checkpoint before any funds move
        record.last_settled_at = window.end_time
        self.session.flush()
        logger.info(
            "settlement_checkpointed",
            extra={
                "owed": str(window.amount),
                "settled_through": window.end_time,
                "currency": currency,
            },
        )

        if currency is PaymentCurrency.STABLE:
            amount_paid = self._pay_stable(record.address, window.amount)
        else:
            amount_paid = self._pay_native(record.address, window.amount, now)

        self._events.record(
            SalaryWithdrawn(
                employee=record.address,
                currency=currency,
                amount_paid=amount_paid,
            )
        )
        logger.info(
            "salary_withdrawn",
            extra={
                "currency": currency,
                "owed": str(window.amount),
                "amount_paid": str(amount_paid),
            },
        )
        return SettlementReceipt(
            employee=record.address,
            currency=currency,
            accrued=window.amount,
            amount_paid=amount_paid,
            settled_through=window.end_time,
        )

    # -----------------------------------------------------------------
    # Payout legs
    # -----------------------------------------------------------------

    def _pay_stable(self, employee: str, owed: int) -> int:
        precision = self._config.precision
        amount = rescale(owed, precision.accounting, precision.stable)
        self._transfer(
            lambda: self._stable_token.transfer(employee, amount),
            employee,
            amount,
            PaymentCurrency.STABLE,
        )
        return amount

    def _pay_native(self, employee: str, owed: int, now: int) -> int:
        quote = self._oracle.latest_price()
        amount_in, expected_out, min_out = native_swap_terms(owed, quote, self._config)
        deadline = now + self._config.swap_deadline_seconds

        logger.info(
            "native_swap_quoted",
            extra={
                "price": str(quote.price),
                "price_decimals": quote.decimals,
                "amount_in": str(amount_in),
                "expected_out": str(expected_out),
                "min_out": str(min_out),
                "deadline": deadline,
            },
        )

        amount_out = self._exchange.swap(amount_in, min_out, deadline)

        try:
            self._unwrapper.withdraw(amount_out)
        except PayrollKernelError:
            raise
        except Exception as exc:
            logger.warning("unwrap_failed", extra={"error": str(exc)})
            raise TransferFailedError(employee, amount_out, PaymentCurrency.NATIVE.value) from exc

        self._transfer(
            lambda: self._native_transfer.send(employee, amount_out),
            employee,
            amount_out,
            PaymentCurrency.NATIVE,
        )
        return amount_out

    def _transfer(
        self,
        send,
        recipient: str,
        amount: int,
        currency: PaymentCurrency,
    ) -> None:
        try:
            accepted = send()
        except PayrollKernelError:
            raise
        except Exception as exc:
            logger.warning(
                "transfer_failed",
                extra={"currency": currency, "amount": str(amount), "error": str(exc)},
            )
            raise TransferFailedError(recipient, amount, currency.value) from exc

        if not accepted:
            logger.warning(
                "transfer_rejected",
                extra={"currency": currency, "amount": str(amount)},
            )
            raise TransferFailedError(recipient, amount, currency.value)
