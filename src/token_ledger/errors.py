"""Error taxonomy for the token ledger."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class; ``kind`` is the stable name surfaced in result values."""

    kind = "LedgerError"
    default_message = "Ledger operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class NotInitialized(LedgerError):
    kind = "NotInitialized"
    default_message = "Token not initialized."


class AlreadyInitialized(LedgerError):
    kind = "AlreadyInitialized"
    default_message = "Token already initialized."


class InsufficientBalance(LedgerError):
    kind = "InsufficientBalance"
    default_message = "Insufficient balance."


class NotAuthorized(LedgerError):
    kind = "NotAuthorized"
    default_message = "Caller is not authorized to mint."


class NotOwner(LedgerError):
    kind = "NotOwner"
    default_message = "Only the owner can add minters."


class InvalidAmount(LedgerError):
    kind = "InvalidAmount"
    default_message = "Amount must be an integer between 0 and 2**64 - 1."


class AmountOverflow(LedgerError):
    kind = "AmountOverflow"
    default_message = "Operation would overflow a 64-bit counter."
