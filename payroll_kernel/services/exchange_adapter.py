"""
ExchangeAdapter -- bounded, slippage-checked access to the swap router.

Responsibility:
    Submits a single exact-input swap of the stable asset for wrapped native
    and enforces the caller-supplied minimum output and deadline.  Computing
    the minimum is the caller's job (SettlementService); this adapter only
    holds the router to it.

Invariants enforced:
    - No swap is submitted after its deadline.
    - A returned amount is always >= the requested minimum.
    - Router failures surface as ExchangeUnavailableError with the original
      exception chained.

Failure modes:
    - DeadlineExpiredError: clock is past the deadline before submission.
    - ExchangeUnavailableError: the router raised.
    - SlippageExceededError: realized output below minimum.
"""

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import SwapRequest
from payroll_kernel.domain.ports import SwapRouter
from payroll_kernel.exceptions import (
    DeadlineExpiredError,
    ExchangeUnavailableError,
    PayrollKernelError,
    SlippageExceededError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.exchange")


class ExchangeAdapter:
    """Swaps stable asset into wrapped native on behalf of the treasury."""

    def __init__(
        self,
        router: SwapRouter,
        config: PayrollConfig,
        clock: Clock | None = None,
    ):
        self._router = router
        self._config = config
        self._clock = clock or SystemClock()

    def swap(self, amount_in: int, min_amount_out: int, deadline: int) -> int:
        """
        Swap ``amount_in`` (stable precision) for at least ``min_amount_out``
        wrapped native, delivered to the treasury.

        Returns:
            Realized output amount (native precision).
        """
        now = self._clock.timestamp()
        if now > deadline:
            logger.warning(
                "swap_deadline_expired",
                extra={"deadline": deadline, "now": now},
            )
            raise DeadlineExpiredError(deadline, now)

        request = SwapRequest(
            token_in=self._config.stable_asset,
            token_out=self._config.wrapped_native_asset,
            fee=self._config.pool_fee,
            recipient=self._config.treasury,
            deadline=deadline,
            amount_in=amount_in,
            amount_out_minimum=min_amount_out,
        )

        try:
            amount_out = self._router.exact_input_single(request)
        except PayrollKernelError:
            raise
        except Exception as exc:
            logger.warning("exchange_unavailable", extra={"error": str(exc)})
            raise ExchangeUnavailableError(str(exc)) from exc

        if amount_out < min_amount_out:
            logger.warning(
                "swap_slippage_exceeded",
                extra={
                    "amount_in": str(amount_in),
                    "amount_out": str(amount_out),
                    "min_amount_out": str(min_amount_out),
                },
            )
            raise SlippageExceededError(amount_out, min_amount_out)

        logger.info(
            "swap_executed",
            extra={
                "amount_in": str(amount_in),
                "amount_out": str(amount_out),
                "min_amount_out": str(min_amount_out),
                "deadline": deadline,
            },
        )
        return amount_out
