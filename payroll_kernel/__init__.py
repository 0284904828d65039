"""
Payroll Kernel

A payroll ledger and settlement engine with:
- Continuous pro-rata salary accrual
- Dual-currency settlement (direct stable transfer or oracle-priced swap)
- Explicit fixed-point rescaling between three precisions
- Checkpoint-before-payout ordering and a re-entrancy guard
- All-or-nothing operations backed by database transactions
"""

__version__ = "0.1.0"
