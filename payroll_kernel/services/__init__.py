"""Services for the payroll kernel (write side and adapters)."""

from payroll_kernel.services.circuit_breaker import CircuitBreaker
from payroll_kernel.services.exchange_adapter import ExchangeAdapter
from payroll_kernel.services.ledger_service import LedgerService
from payroll_kernel.services.oracle_adapter import PriceOracleAdapter
from payroll_kernel.services.payroll_engine import PayrollEngine
from payroll_kernel.services.reentrancy import ReentrancyGuard
from payroll_kernel.services.settlement_service import SettlementService, native_swap_terms

__all__ = [
    "CircuitBreaker",
    "ExchangeAdapter",
    "LedgerService",
    "PayrollEngine",
    "PriceOracleAdapter",
    "ReentrancyGuard",
    "SettlementService",
    "native_swap_terms",
]
