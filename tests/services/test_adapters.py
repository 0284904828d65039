"""
Tests for the price oracle and exchange adapters in isolation.
"""

import pytest

from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.exceptions import (
    DeadlineExpiredError,
    ExchangeUnavailableError,
    OraclePriceInvalidError,
    OracleUnavailableError,
    SlippageExceededError,
)
from payroll_kernel.services.exchange_adapter import ExchangeAdapter
from payroll_kernel.services.oracle_adapter import PriceOracleAdapter
from tests.conftest import START_TIME, TREASURY, USDC, WETH
from tests.fakes import FakePriceFeed, FakeSwapRouter


class TestPriceOracleAdapter:
    def test_valid_quote(self):
        feed = FakePriceFeed(answer=1850 * 10**8, updated_at=1_700_000_000)
        quote = PriceOracleAdapter(feed).latest_price()

        assert quote.price == 1850 * 10**8
        assert quote.decimals == 8
        assert quote.updated_at == 1_700_000_000

    def test_requeried_on_every_call(self):
        feed = FakePriceFeed()
        oracle = PriceOracleAdapter(feed)
        oracle.latest_price()
        feed.answer = 1900 * 10**8

        assert oracle.latest_price().price == 1900 * 10**8
        assert feed.reads == 2

    @pytest.mark.parametrize("answer", [0, -1])
    def test_non_positive_price_rejected(self, answer):
        with pytest.raises(OraclePriceInvalidError) as exc_info:
            PriceOracleAdapter(FakePriceFeed(answer=answer)).latest_price()
        assert exc_info.value.code == "ORACLE_PRICE_INVALID"

    def test_feed_failure_wrapped(self):
        feed = FakePriceFeed(error=TimeoutError("no round"))
        with pytest.raises(OracleUnavailableError) as exc_info:
            PriceOracleAdapter(feed).latest_price()
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    def test_decimals_read_from_feed(self):
        assert PriceOracleAdapter(FakePriceFeed(feed_decimals=18)).decimals == 18

    @pytest.mark.parametrize("failing", ["decimals_error", "error"])
    def test_feed_failures_logged_alike(self, failing, captured_logs):
        feed = FakePriceFeed(**{failing: ConnectionError("rpc down")})

        with pytest.raises(OracleUnavailableError) as exc_info:
            PriceOracleAdapter(feed).latest_price()

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        (warning,) = [r for r in captured_logs() if r["message"] == "oracle_unavailable"]
        assert warning["level"] == "WARNING"
        assert warning["error"] == "rpc down"

    def test_kernel_error_from_decimals_not_rewrapped(self):
        feed = FakePriceFeed(decimals_error=OraclePriceInvalidError(-1))
        with pytest.raises(OraclePriceInvalidError):
            PriceOracleAdapter(feed).latest_price()


class TestExchangeAdapter:
    @pytest.fixture
    def clock(self):
        return DeterministicClock(START_TIME)

    @pytest.fixture
    def router(self):
        return FakeSwapRouter()

    @pytest.fixture
    def adapter(self, router, config, clock):
        return ExchangeAdapter(router, config, clock=clock)

    def test_request_shape(self, adapter, router, clock, config):
        deadline = clock.timestamp() + 300
        adapter.swap(1_000_000, 490_000_000_000_000, deadline)

        (request,) = router.requests
        assert (request.token_in, request.token_out) == (USDC, WETH)
        assert request.recipient == TREASURY
        assert request.fee == config.pool_fee
        assert request.deadline == deadline
        assert request.amount_in == 1_000_000
        assert request.amount_out_minimum == 490_000_000_000_000

    def test_output_at_minimum_accepted(self, adapter, clock):
        assert adapter.swap(10, 500, clock.timestamp()) == 500

    def test_output_above_minimum_accepted(self, adapter, router, clock):
        router.amount_out = 600
        assert adapter.swap(10, 500, clock.timestamp()) == 600

    def test_output_below_minimum_rejected(self, adapter, router, clock):
        router.amount_out = 499
        with pytest.raises(SlippageExceededError) as exc_info:
            adapter.swap(10, 500, clock.timestamp())
        assert (exc_info.value.amount_out, exc_info.value.min_amount_out) == (499, 500)

    def test_expired_deadline_never_reaches_router(self, adapter, router, clock):
        deadline = clock.timestamp()
        clock.advance(1)

        with pytest.raises(DeadlineExpiredError):
            adapter.swap(10, 500, deadline)
        assert router.requests == []

    def test_router_failure_wrapped(self, adapter, router, clock):
        router.error = RuntimeError("insufficient liquidity")
        with pytest.raises(ExchangeUnavailableError) as exc_info:
            adapter.swap(10, 500, clock.timestamp())
        assert "insufficient liquidity" in str(exc_info.value)
