"""
Property-based tests for the native payout slippage bound.

The router fills at k% of the oracle-implied output.  With the default
tolerance of 98 a fill of at least 98% is accepted and anything less is
rejected before funds move.
"""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from payroll_kernel.config import PayrollConfig
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.domain.dtos import PriceQuote
from payroll_kernel.exceptions import SlippageExceededError
from payroll_kernel.services.exchange_adapter import ExchangeAdapter
from payroll_kernel.services.settlement_service import native_swap_terms
from tests.conftest import HR, START_TIME, TREASURY, USDC, WETH
from tests.fakes import FakeSwapRouter

CONFIG = PayrollConfig(
    hr_authority=HR,
    treasury=TREASURY,
    stable_asset=USDC,
    wrapped_native_asset=WETH,
)

owed_amounts = st.integers(min_value=10**12, max_value=10**30)
prices = st.integers(min_value=10**6, max_value=10**14)
fill_percents = st.integers(min_value=0, max_value=100)


def _swap_at(fill_percent: int, owed: int, price: int) -> tuple[int, FakeSwapRouter]:
    quote = PriceQuote(price=price, decimals=8)
    amount_in, expected_out, min_out = native_swap_terms(owed, quote, CONFIG)
    router = FakeSwapRouter(amount_out=expected_out * fill_percent // 100)
    clock = DeterministicClock(START_TIME)
    adapter = ExchangeAdapter(router, CONFIG, clock=clock)
    deadline = clock.timestamp() + CONFIG.swap_deadline_seconds
    return adapter.swap(amount_in, min_out, deadline), router


class TestSlippageBound:
    @given(owed=owed_amounts, price=prices, fill_percent=st.integers(min_value=98, max_value=100))
    @settings(max_examples=300)
    def test_fill_within_tolerance_accepted(self, owed, price, fill_percent):
        amount_out, router = _swap_at(fill_percent, owed, price)
        assert amount_out == router.amount_out

    @given(owed=owed_amounts, price=prices, fill_percent=st.integers(min_value=0, max_value=97))
    @settings(max_examples=300)
    def test_fill_beyond_tolerance_rejected(self, owed, price, fill_percent):
        quote = PriceQuote(price=price, decimals=8)
        _, expected_out, _ = native_swap_terms(owed, quote, CONFIG)
        # Below 100 units, integer percentages of the output collapse together
        assume(expected_out >= 100)

        with pytest.raises(SlippageExceededError):
            _swap_at(fill_percent, owed, price)

    @given(owed=owed_amounts, price=prices, fill_percent=fill_percents)
    @settings(max_examples=300)
    def test_acceptance_matches_minimum(self, owed, price, fill_percent):
        quote = PriceQuote(price=price, decimals=8)
        _, expected_out, min_out = native_swap_terms(owed, quote, CONFIG)
        filled = expected_out * fill_percent // 100

        try:
            _swap_at(fill_percent, owed, price)
            accepted = True
        except SlippageExceededError:
            accepted = False

        assert accepted == (filled >= min_out)
