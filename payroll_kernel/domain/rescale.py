"""
Rescale -- conversion of fixed-point integers between decimal precisions.

Responsibility:
    The ONLY place an amount changes scale.  The settlement path converts
    accrued pay from the accounting precision to the stable-asset precision
    (direct payout and swap input) and to the native precision (oracle
    quote); every one of those conversions goes through ``rescale()``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Up-scaling is exact: multiply by 10**(to - from).
    - Down-scaling rounds half up: add half the divisor, then floor-divide.
    - Equal precisions return the amount unchanged.

Failure modes:
    - ValueError on negative amounts or negative decimal counts.  These are
      programming errors; ledger amounts are never negative.
"""


def rescale(amount: int, from_decimals: int, to_decimals: int) -> int:
    """
    Convert ``amount`` from ``from_decimals`` to ``to_decimals`` precision.

    Examples:
        rescale(1_500_000, 6, 18)              -> 1_500_000_000_000_000_000
        rescale(1_234_567_500_000_000_000, 18, 6) -> 1_234_568   (half up)
        rescale(1_234_567_499_999_999_999, 18, 6) -> 1_234_567
    """
    if amount < 0:
        raise ValueError(f"Cannot rescale negative amount {amount}")
    if from_decimals < 0 or to_decimals < 0:
        raise ValueError(
            f"Decimals must be non-negative, got {from_decimals} -> {to_decimals}"
        )

    if from_decimals == to_decimals:
        return amount
    if from_decimals < to_decimals:
        return amount * 10 ** (to_decimals - from_decimals)

    divisor = 10 ** (from_decimals - to_decimals)
    return (amount + divisor // 2) // divisor
