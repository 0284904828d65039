"""
Ports -- the narrow contracts the kernel requires from external collaborators.

Responsibility:
    Declares, as ``typing.Protocol`` classes, everything the settlement path
    calls outside the process: the stable-asset token, native value
    transfers, the price feed, the swap router and the wrapped-native
    unwrapper.  The kernel never depends on a concrete client.

Architecture position:
    Kernel > Domain -- interface declarations only.  Adapters in services/
    wrap these with validation and typed errors.
"""

from typing import Protocol, runtime_checkable

from payroll_kernel.domain.dtos import SwapRequest


@runtime_checkable
class StableAssetTransfer(Protocol):
    """Stable-asset token.  Amounts in the token's own precision."""

    def transfer(self, to: str, amount: int) -> bool: ...


@runtime_checkable
class NativeAssetTransfer(Protocol):
    """Plain value transfer of the native asset."""

    def send(self, to: str, amount: int) -> bool: ...


@runtime_checkable
class PriceFeed(Protocol):
    """Aggregator-style feed.

    ``latest_round_data`` returns
    ``(round_id, answer, started_at, updated_at, answered_in_round)``;
    only ``answer`` and ``updated_at`` are consumed.
    """

    def decimals(self) -> int: ...

    def latest_round_data(self) -> tuple[int, int, int, int, int]: ...


@runtime_checkable
class SwapRouter(Protocol):
    """Single-pool exact-input swap; returns the realized output amount."""

    def exact_input_single(self, request: SwapRequest) -> int: ...


@runtime_checkable
class NativeUnwrapper(Protocol):
    """Converts wrapped native held by the treasury into native, 1:1."""

    def withdraw(self, amount: int) -> None: ...
