"""
Domain models.

Exports the deposit dataclasses and enums for easy imports.
"""

from depositor.models.deposit import (
    TERMINAL_STATES,
    TRANSITIONS,
    Amount,
    BalanceReport,
    BalanceSnapshot,
    DepositAttempt,
    DepositResult,
    DepositState,
    Ledger,
    TransactionRecord,
    TransactionStatus,
)


__all__ = [
    "TERMINAL_STATES",
    "TRANSITIONS",
    "Amount",
    "BalanceReport",
    "BalanceSnapshot",
    "DepositAttempt",
    "DepositResult",
    "DepositState",
    "Ledger",
    "TransactionRecord",
    "TransactionStatus",
]
