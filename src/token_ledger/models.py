"""Value types shared by the ledger, the service and the tool layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidAmount

U64_MAX = 2**64 - 1
U8_MAX = 2**8 - 1

TRANSFER_REASON_BURNT = "Cycles were burnt due to transfer fees or maintenance costs."
TRANSFER_REASON_NO_BURN = "No cycles were burnt as no transfer fees applied."
MINT_REASON = "Minting operation has no cycle burn cost."


def require_u64(value: Any, what: str = "amount") -> int:
    # bool is an int subclass; reject it so True never means 1 token
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{what} must be an integer, got {type(value).__name__}.")
    if value < 0 or value > U64_MAX:
        raise InvalidAmount(f"{what} must be between 0 and {U64_MAX}, got {value}.")
    return value


def require_u8(value: Any, what: str = "decimals") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U8_MAX:
        raise InvalidAmount(f"{what} must be an integer between 0 and {U8_MAX}, got {value!r}.")
    return value


@dataclass(frozen=True)
class TransactionRecord:
    """One audit-trail entry, written by transfer and mint."""

    from_: str
    to: str
    amount: int
    post_balance_from: int
    post_balance_to: int
    cycles_burnt: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_,
            "to": self.to,
            "amount": self.amount,
            "post_balance_from": self.post_balance_from,
            "post_balance_to": self.post_balance_to,
            "cycles_burnt": self.cycles_burnt,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TokenMetadata:
    owner: str
    name: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class LedgerResult:
    """Explicit outcome of an update operation; failures never raise past the service."""

    ok: bool
    operation: str
    error: Optional[str] = None
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, operation: str, message: str = "", **data: Any) -> "LedgerResult":
        return cls(ok=True, operation=operation, message=message, data=data)

    @classmethod
    def failure(cls, operation: str, error: str, message: str) -> "LedgerResult":
        return cls(ok=False, operation=operation, error=error, message=message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": self.ok, "operation": self.operation}
        if self.error:
            payload["error"] = self.error
        if self.message:
            payload["message"] = self.message
        if self.data:
            payload["data"] = self.data
        return payload
