"""
ReentrancyGuard -- single-writer flag around withdrawal-class operations.

Responsibility:
    Rejects any call into the payroll while a settlement is in flight in the
    same thread, i.e. a callback from a collaborator (token, router,
    unwrapper) back into the engine.  Other threads never observe the flag:
    ``PayrollEngine`` serializes operations under its own lock before
    consulting the guard.

Invariants enforced:
    - The flag is released on every exit path, normal or exceptional.
    - Combined with checkpoint-before-payout ordering in SettlementService:
      even a caller that bypassed the guard would find nothing owed.
"""

from contextlib import contextmanager
from typing import Iterator

from payroll_kernel.exceptions import ReentrantCallError
from payroll_kernel.logging_config import get_logger

logger = get_logger("services.reentrancy")


class ReentrancyGuard:
    """Scoped mutual-exclusion flag."""

    def __init__(self) -> None:
        self._active_operation: str | None = None

    @property
    def active(self) -> bool:
        return self._active_operation is not None

    def ensure_idle(self, operation: str) -> None:
        """Raise ReentrantCallError if a guarded operation is running."""
        if self._active_operation is not None:
            logger.warning(
                "reentrant_call_rejected",
                extra={
                    "operation": operation,
                    "active_operation": self._active_operation,
                },
            )
            raise ReentrantCallError(operation, self._active_operation)

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        """Hold the guard for the duration of ``operation``."""
        self.ensure_idle(operation)
        self._active_operation = operation
        try:
            yield
        finally:
            self._active_operation = None
