"""
Re-entrancy and race safety for settlement.

A collaborator that calls back into the engine mid-payout must be turned
away, and concurrent withdrawals for the same employee must pay exactly
once.

Run with: pytest tests/concurrency -v
Skip with: pytest -m "not slow_locks"
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest

from payroll_kernel.exceptions import ReentrantCallError, TransferFailedError
from tests.conftest import ALICE, BOB, HR, ONE_DAY, WEEKLY_RATE


class TestReentrantCallback:
    def test_token_callback_into_withdraw_rejected(self, registered, clock, stable_token):
        rejected: list[ReentrantCallError] = []

        def reenter(to, amount):
            try:
                registered.withdraw(ALICE)
            except ReentrantCallError as exc:
                rejected.append(exc)

        stable_token.on_call = reenter
        clock.advance(2 * ONE_DAY)

        receipt = registered.withdraw(ALICE)

        assert len(rejected) == 1
        assert rejected[0].active_operation == "withdraw"
        assert stable_token.transfers == [(ALICE, receipt.amount_paid)]
        assert registered.accrued_salary(ALICE) == 0

    def test_router_callback_into_switch_rejected(self, registered, clock, swap_router, native_wallet):
        registered.switch_currency(ALICE)
        rejected: list[ReentrantCallError] = []

        def reenter(request):
            try:
                registered.switch_currency(ALICE)
            except ReentrantCallError as exc:
                rejected.append(exc)

        swap_router.on_call = reenter
        clock.advance(ONE_DAY)

        registered.withdraw(ALICE)

        assert len(rejected) == 1
        assert len(native_wallet.sends) == 1

    @pytest.mark.parametrize(
        "call",
        [
            lambda engine: engine.info(ALICE),
            lambda engine: engine.accrued_salary(ALICE),
            lambda engine: engine.register(HR, BOB, WEEKLY_RATE),
            lambda engine: engine.pause(HR),
        ],
        ids=["info", "accrued_salary", "register", "pause"],
    )
    def test_any_engine_call_rejected_mid_payout(self, registered, clock, stable_token, call):
        rejected: list[ReentrantCallError] = []

        def reenter(to, amount):
            try:
                call(registered)
            except ReentrantCallError as exc:
                rejected.append(exc)

        stable_token.on_call = reenter
        clock.advance(ONE_DAY)
        registered.withdraw(ALICE)

        assert len(rejected) == 1
        assert registered.is_paused() is False
        assert registered.active_count() == 1

    def test_unhandled_reentry_aborts_outer_withdrawal(self, registered, clock, stable_token):
        stable_token.on_call = lambda to, amount: registered.withdraw(ALICE)
        clock.advance(ONE_DAY)
        owed = registered.accrued_salary(ALICE)

        with pytest.raises(ReentrantCallError):
            registered.withdraw(ALICE)

        assert stable_token.transfers == []
        assert registered.accrued_salary(ALICE) == owed

    def test_guard_released_after_failure(self, registered, clock, stable_token):
        clock.advance(ONE_DAY)
        stable_token.reject = True
        with pytest.raises(TransferFailedError):
            registered.withdraw(ALICE)

        stable_token.reject = False
        assert registered.withdraw(ALICE).settled is True
        assert registered.info(ALICE).weekly_rate == WEEKLY_RATE


@pytest.mark.slow_locks
class TestConcurrentWithdrawals:
    def test_parallel_withdrawals_pay_once(self, registered, clock, stable_token):
        clock.advance(3 * ONE_DAY)
        workers = 8
        barrier = Barrier(workers)

        def attempt():
            barrier.wait()
            return registered.withdraw(ALICE)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda _: attempt(), range(workers)))

        paid = [o for o in outcomes if o.settled]
        skipped = [o for o in outcomes if not o.settled]
        assert len(paid) == 1
        assert len(skipped) == workers - 1
        assert all(o.amount_paid == 0 for o in skipped)
        assert stable_token.transfers == [(ALICE, paid[0].amount_paid)]

    def test_parallel_register_and_withdraw(self, registered, clock, stable_token):
        clock.advance(ONE_DAY)
        barrier = Barrier(2)

        def hire():
            barrier.wait()
            return registered.register(HR, BOB, WEEKLY_RATE)

        def pay():
            barrier.wait()
            return registered.withdraw(ALICE)

        with ThreadPoolExecutor(max_workers=2) as pool:
            hired = pool.submit(hire)
            paid = pool.submit(pay)
            hired.result()
            receipt = paid.result()

        assert registered.active_count() == 2
        assert stable_token.transfers == [(ALICE, receipt.amount_paid)]
