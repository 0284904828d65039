"""
Module: payroll_kernel.db.types
Responsibility: Column types for fixed-point amounts and epoch timestamps.
    Centralizes how integer amounts wider than 64 bits are persisted so that
    every model stores them identically.
Architecture position: Kernel > DB.  May be imported by models/.  MUST NOT
    import from models/, services/ or domain/.

Invariants enforced:
    - Amounts are Python ints end to end.  They are stored as their exact
      decimal string so no backend ever routes them through a float NUMERIC
      (SQLite) or a 64-bit integer (an 18-decimal weekly rate of 1000 units
      is already 10**21).
    - Amounts are non-negative; binding a negative value is a programming
      error and raises ValueError.

Failure modes:
    - ValueError on binding a negative amount or a non-int value.
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

# Maximum digits in a 256-bit unsigned integer
_MAX_AMOUNT_DIGITS = 78


class FixedPointInt(TypeDecorator):
    """
    Non-negative integer stored as a decimal string.

    Contract:
        Transparently converts between Python ``int`` and its base-10 string
        representation.

    Guarantees:
        - process_bind_param: int -> str on INSERT/UPDATE.
        - process_result_value: str -> int on SELECT.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = String(_MAX_AMOUNT_DIGITS)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"FixedPointInt expects int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"FixedPointInt cannot store negative value {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is not None:
            return int(value)
        return None

