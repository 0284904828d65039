"""Database layer - engine, base classes and column types."""

from payroll_kernel.db.base import UUID, Base, UUIDString
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from payroll_kernel.db.types import FixedPointInt

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "UUIDString",
    "UUID",
    "FixedPointInt",
]
