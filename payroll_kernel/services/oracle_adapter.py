"""
PriceOracleAdapter -- validated reads from the external price feed.

Responsibility:
    Turns a raw ``latest_round_data()`` answer into a validated
    ``PriceQuote``.  Every native payout re-queries the feed; nothing is
    cached.

Invariants enforced:
    - A returned quote always has ``price > 0``.
    - Feed failures surface as OracleUnavailableError with the original
      exception chained.

Known limitation:
    Staleness is not checked here.  ``updated_at`` is carried on the quote
    for logging only; freshness is whatever the feed itself guarantees.

Failure modes:
    - OracleUnavailableError: the feed raised.
    - OraclePriceInvalidError: the feed answered zero or a negative price.
"""

from payroll_kernel.domain.dtos import PriceQuote
from payroll_kernel.domain.ports import PriceFeed
from payroll_kernel.exceptions import (
    OraclePriceInvalidError,
    OracleUnavailableError,
    PayrollKernelError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.oracle")


class PriceOracleAdapter:
    """Validated access to a ``PriceFeed``."""

    def __init__(self, feed: PriceFeed):
        self._feed = feed
        self._decimals: int | None = None

    @property
    def decimals(self) -> int:
        """Feed precision, read from the feed on first use."""
        if self._decimals is None:
            try:
                self._decimals = int(self._feed.decimals())
            except PayrollKernelError:
                raise
            except Exception as exc:
                logger.warning(
                    "oracle_unavailable",
                    extra={"error": str(exc), "call": "decimals"},
                )
                raise OracleUnavailableError(f"decimals() failed: {exc}") from exc
        return self._decimals

    def latest_price(self) -> PriceQuote:
        try:
            _round_id, answer, _started_at, updated_at, _answered = (
                self._feed.latest_round_data()
            )
        except PayrollKernelError:
            raise
        except Exception as exc:
            logger.warning(
                "oracle_unavailable",
                extra={"error": str(exc), "call": "latest_round_data"},
            )
            raise OracleUnavailableError(str(exc)) from exc

        if answer <= 0:
            logger.warning("oracle_price_invalid", extra={"price": str(answer)})
            raise OraclePriceInvalidError(answer)

        quote = PriceQuote(price=answer, decimals=self.decimals, updated_at=updated_at)
        logger.debug(
            "oracle_price_read",
            extra={
                "price": str(quote.price),
                "decimals": quote.decimals,
                "updated_at": quote.updated_at,
            },
        )
        return quote
