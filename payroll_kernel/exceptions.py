"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Settlement failures must be distinguishable by the caller without parsing
message strings.  Every error therefore has:
  1. Its own exception CLASS (catch by type, not message)
  2. A class-level CODE attribute (machine-readable, API-safe)
  3. Structured DATA as instance attributes (employee, amounts, deadlines)

Example - WRONG way to handle errors:
    try:
        engine.withdraw(caller)
    except Exception as e:
        if "slippage" in str(e):  # FRAGILE
            retry_later()

Example - RIGHT way:
    try:
        engine.withdraw(caller)
    except SlippageExceededError as e:
        log.warning("swap short", extra={"min_out": e.min_amount_out})
        api_response(code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- AccessError
    |   +-- UnauthorizedError
    |   +-- PausedError
    |   +-- NotPausedError
    |   +-- ReentrantCallError
    |
    +-- LedgerError
    |   +-- AlreadyRegisteredError
    |   +-- NotRegisteredError
    |   +-- InvalidEmployeeError
    |   +-- InvalidSalaryError
    |
    +-- SettlementError
    |   +-- NothingToWithdrawError
    |   +-- TransferFailedError
    |
    +-- ConversionError
        +-- OracleUnavailableError
        +-- OraclePriceInvalidError
        +-- ExchangeUnavailableError
        +-- SlippageExceededError
        +-- DeadlineExpiredError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                  | When Raised
-------------|-----------------------|------------------------------------------
Access       | UNAUTHORIZED          | Caller lacks HR authority / employee status
             | PAUSED                | Circuit breaker engaged
             | NOT_PAUSED            | Unpause requested while running
             | REENTRANT_CALL        | Settlement entered while already settling
-------------|-----------------------|------------------------------------------
Ledger       | ALREADY_REGISTERED    | Registering an active employee
             | NOT_REGISTERED        | Terminating an absent/terminated employee
             | INVALID_EMPLOYEE      | Null address
             | INVALID_SALARY        | Weekly rate is not positive
-------------|-----------------------|------------------------------------------
Settlement   | NOTHING_TO_WITHDRAW   | Accrued amount is zero
             | TRANSFER_FAILED       | Payout transfer rejected
-------------|-----------------------|------------------------------------------
Conversion   | ORACLE_UNAVAILABLE    | Price feed unreachable
             | ORACLE_PRICE_INVALID  | Price feed returned a non-positive price
             | EXCHANGE_UNAVAILABLE  | Swap router failed
             | SLIPPAGE_EXCEEDED     | Realized output below the minimum
             | DEADLINE_EXPIRED      | Swap attempted after its deadline

None of these are retried inside the kernel.  Every operation is
all-or-nothing: when one of these is raised the enclosing transaction is
rolled back and no event is published.
===============================================================================
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Access-related exceptions


class AccessError(PayrollKernelError):
    """Base exception for authorization and gating errors."""

    code: str = "ACCESS_ERROR"


class UnauthorizedError(AccessError):
    """Caller lacks the role or employee status the operation requires."""

    code: str = "UNAUTHORIZED"

    def __init__(self, caller: str, action: str):
        self.caller = caller
        self.action = action
        super().__init__(f"{caller} is not authorized to {action}")


class PausedError(AccessError):
    """The payroll circuit breaker is engaged."""

    code: str = "PAUSED"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Payroll is paused; cannot {action}")


class NotPausedError(AccessError):
    """Unpause requested while the circuit breaker is not engaged."""

    code: str = "NOT_PAUSED"

    def __init__(self):
        super().__init__("Payroll is not paused")


class ReentrantCallError(AccessError):
    """A settlement operation was entered while another one is in flight."""

    code: str = "REENTRANT_CALL"

    def __init__(self, operation: str, active_operation: str | None):
        self.operation = operation
        self.active_operation = active_operation
        super().__init__(
            f"Re-entrant call to {operation} while {active_operation} is running"
        )


# Ledger-related exceptions


class LedgerError(PayrollKernelError):
    """Base exception for employee ledger errors."""

    code: str = "LEDGER_ERROR"


class AlreadyRegisteredError(LedgerError):
    """Employee already has an active record."""

    code: str = "ALREADY_REGISTERED"

    def __init__(self, employee: str):
        self.employee = employee
        super().__init__(f"Employee already registered: {employee}")


class NotRegisteredError(LedgerError):
    """Employee record is absent or already terminated."""

    code: str = "NOT_REGISTERED"

    def __init__(self, employee: str):
        self.employee = employee
        super().__init__(f"Employee not registered or already terminated: {employee}")


class InvalidEmployeeError(LedgerError):
    """Employee identity is the null address."""

    code: str = "INVALID_EMPLOYEE"

    def __init__(self, employee: str):
        self.employee = employee
        super().__init__(f"Invalid employee address: {employee!r}")


class InvalidSalaryError(LedgerError):
    """Weekly rate must be strictly positive."""

    code: str = "INVALID_SALARY"

    def __init__(self, employee: str, weekly_rate: int):
        self.employee = employee
        self.weekly_rate = weekly_rate
        super().__init__(f"Invalid weekly rate {weekly_rate} for {employee}")


# Settlement-related exceptions


class SettlementError(PayrollKernelError):
    """Base exception for settlement (payout) errors."""

    code: str = "SETTLEMENT_ERROR"


class NothingToWithdrawError(SettlementError):
    """No salary has accrued since the last settlement checkpoint."""

    code: str = "NOTHING_TO_WITHDRAW"

    def __init__(self, employee: str):
        self.employee = employee
        super().__init__(f"Nothing to withdraw for {employee}")


class TransferFailedError(SettlementError):
    """The payout transfer was rejected by the asset collaborator."""

    code: str = "TRANSFER_FAILED"

    def __init__(self, recipient: str, amount: int, currency: str):
        self.recipient = recipient
        self.amount = amount
        self.currency = currency
        super().__init__(f"Transfer of {amount} {currency} to {recipient} failed")


# Conversion-related exceptions


class ConversionError(PayrollKernelError):
    """Base exception for oracle and exchange errors."""

    code: str = "CONVERSION_ERROR"


class OracleUnavailableError(ConversionError):
    """The price feed could not be queried."""

    code: str = "ORACLE_UNAVAILABLE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Price oracle unavailable: {reason}")


class OraclePriceInvalidError(ConversionError):
    """The price feed returned a zero or negative price."""

    code: str = "ORACLE_PRICE_INVALID"

    def __init__(self, price: int):
        self.price = price
        super().__init__(f"Oracle returned invalid price: {price}")


class ExchangeUnavailableError(ConversionError):
    """The swap router failed to execute the swap."""

    code: str = "EXCHANGE_UNAVAILABLE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Exchange unavailable: {reason}")


class SlippageExceededError(ConversionError):
    """Realized swap output fell below the minimum acceptable amount."""

    code: str = "SLIPPAGE_EXCEEDED"

    def __init__(self, amount_out: int, min_amount_out: int):
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out
        super().__init__(
            f"Slippage exceeded: received {amount_out}, minimum {min_amount_out}"
        )


class DeadlineExpiredError(ConversionError):
    """Swap invoked after its deadline."""

    code: str = "DEADLINE_EXPIRED"

    def __init__(self, deadline: int, now: int):
        self.deadline = deadline
        self.now = now
        super().__init__(f"Swap deadline {deadline} expired at {now}")
