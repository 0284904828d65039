"""
Payroll Configuration Schema.

Defines the settlement parameters and the fixed HR-authority identity.
Values are supplied at construction (or loaded from a YAML file) and never
change for the lifetime of an engine.

Usage::

    config = PayrollConfig.from_yaml(Path("payroll.yaml"))

    # or
    config = PayrollConfig(
        hr_authority="0xhr...",
        treasury="0xtreasury...",
        stable_asset="0xusdc...",
        wrapped_native_asset="0xweth...",
    )
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Self

import yaml

from payroll_kernel.domain.address import is_null_address, normalize_address
from payroll_kernel.domain.currency import (
    ACCOUNTING_DECIMALS,
    NATIVE_DECIMALS,
    STABLE_DECIMALS,
    Precision,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("config")

# Uniswap-v3 style fee tiers, in hundredths of a basis point
VALID_POOL_FEES = {100, 500, 3000, 10000}


@dataclass(frozen=True)
class PayrollConfig:
    """
    Configuration schema for the payroll kernel.

    ``slippage_tolerance`` is the percentage of the oracle-implied output the
    swap must at least return: 98 allows at most 2% slippage.
    """

    # Identities (required - no sensible default)
    hr_authority: str
    treasury: str
    stable_asset: str
    wrapped_native_asset: str

    # Fixed-point precisions
    accounting_decimals: int = ACCOUNTING_DECIMALS
    stable_decimals: int = STABLE_DECIMALS
    native_decimals: int = NATIVE_DECIMALS

    # Native payout conversion
    slippage_tolerance: int = 98
    swap_deadline_seconds: int = 300
    pool_fee: int = 3000

    # Nothing owed on withdraw or switch: no-op (False) or NothingToWithdrawError (True)
    reject_zero_withdrawal: bool = False

    def __post_init__(self):
        for name in ("hr_authority", "treasury", "stable_asset", "wrapped_native_asset"):
            value = getattr(self, name)
            if is_null_address(value):
                raise ValueError(f"{name} must be a non-null address")
            # frozen dataclass: normalize through object.__setattr__
            object.__setattr__(self, name, normalize_address(value))

        for name in ("accounting_decimals", "stable_decimals", "native_decimals"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

        if not 1 <= self.slippage_tolerance <= 100:
            raise ValueError(
                f"slippage_tolerance must be between 1 and 100, got {self.slippage_tolerance}"
            )
        if self.swap_deadline_seconds <= 0:
            raise ValueError("swap_deadline_seconds must be positive")
        if self.pool_fee not in VALID_POOL_FEES:
            raise ValueError(
                f"pool_fee must be one of {sorted(VALID_POOL_FEES)}, got {self.pool_fee}"
            )

        logger.info(
            "payroll_config_initialized",
            extra={
                "hr_authority": self.hr_authority,
                "treasury": self.treasury,
                "accounting_decimals": self.accounting_decimals,
                "stable_decimals": self.stable_decimals,
                "native_decimals": self.native_decimals,
                "slippage_tolerance": self.slippage_tolerance,
                "swap_deadline_seconds": self.swap_deadline_seconds,
                "pool_fee": self.pool_fee,
                "reject_zero_withdrawal": self.reject_zero_withdrawal,
            },
        )

    @property
    def precision(self) -> Precision:
        return Precision(
            accounting=self.accounting_decimals,
            stable=self.stable_decimals,
            native=self.native_decimals,
        )

    def is_hr_authority(self, caller: str) -> bool:
        return normalize_address(caller) == self.hr_authority

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown payroll config keys: {unknown}")
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """
        Load config from a YAML file whose top-level key is ``payroll``.

        Raises:
            FileNotFoundError: if the file does not exist.
            yaml.YAMLError: if the file contains invalid YAML.
            KeyError: if the ``payroll`` section is missing.
        """
        with open(path) as f:
            document = yaml.safe_load(f) or {}
        return cls.from_dict(document["payroll"])
