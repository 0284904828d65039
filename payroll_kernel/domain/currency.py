"""Currency -- payout currencies and their fixed-point precisions."""

from dataclasses import dataclass
from enum import Enum

# Fixed-point precisions of the reference deployment.  These are defaults for
# PayrollConfig; services read precisions from configuration, never from here.
ACCOUNTING_DECIMALS = 18
STABLE_DECIMALS = 6
NATIVE_DECIMALS = 18


class PaymentCurrency(str, Enum):
    """Currency an employee is paid in.

    Contract: Exactly two cases today.  New assets are added as new members,
    never as flags on existing ones.
    """

    STABLE = "stable"
    NATIVE = "native"

    def other(self) -> "PaymentCurrency":
        """The currency a switch moves to."""
        if self is PaymentCurrency.STABLE:
            return PaymentCurrency.NATIVE
        return PaymentCurrency.STABLE


@dataclass(frozen=True)
class Precision:
    """The three fixed-point scales the settlement path converts between."""

    accounting: int = ACCOUNTING_DECIMALS
    stable: int = STABLE_DECIMALS
    native: int = NATIVE_DECIMALS

    def __post_init__(self) -> None:
        for name in ("accounting", "stable", "native"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} decimals cannot be negative")
