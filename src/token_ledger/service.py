"""Process-wide ledger container bound to the host's caller identity."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from src.utils.telemetry import ensure_trace_id, span

from .config import REINIT_POLICIES
from .errors import AlreadyInitialized, LedgerError, NotInitialized
from .ledger import TokenLedger
from .models import LedgerResult, TransactionRecord

logger = logging.getLogger(__name__)


class LedgerService:
    """Owns the single ``TokenLedger`` of this process and serializes access to it.

    The ledger slot is ``None`` until ``initialize`` succeeds. Queries against an
    empty slot answer with zero values; updates fail with ``NotInitialized``.
    Every update takes the caller identity the host attested and returns a
    ``LedgerResult`` instead of raising.
    """

    def __init__(self, reinit_policy: str = "reject"):
        if reinit_policy not in REINIT_POLICIES:
            raise ValueError(f"Unknown re-initialization policy: {reinit_policy!r}")
        self.reinit_policy = reinit_policy
        self._ledger: Optional[TokenLedger] = None
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._ledger is not None

    def _require_ledger(self) -> TokenLedger:
        if self._ledger is None:
            raise NotInitialized()
        return self._ledger

    async def _update(self, operation: str, caller: Optional[str], apply: Callable[[TokenLedger], Dict[str, Any]]) -> LedgerResult:
        with span(f"ledger:{operation}", {"trace_id": ensure_trace_id(), "caller": caller}):
            async with self._lock:
                try:
                    data = apply(self._require_ledger())
                except LedgerError as exc:
                    logger.warning(
                        "%s rejected caller=%s error=%s: %s",
                        operation,
                        caller,
                        exc.kind,
                        exc,
                        extra={"operation": operation, "caller": caller, "error": exc.kind},
                    )
                    return LedgerResult.failure(operation, exc.kind, str(exc))
            return LedgerResult.success(operation, **data)

    async def _query(self, operation: str, read: Callable[[TokenLedger], Any], default: Any) -> Any:
        logger.debug("%s", operation, extra={"operation": operation})
        async with self._lock:
            if self._ledger is None:
                return default
            return read(self._ledger)

    # ---------- lifecycle ----------
    async def initialize(self, caller: str, symbol: str, name: str, total_supply: int, decimals: int) -> LedgerResult:
        logger.info(
            "initialize caller=%s symbol=%s supply=%s decimals=%s",
            caller,
            symbol,
            total_supply,
            decimals,
            extra={"operation": "initialize", "caller": caller},
        )
        with span("ledger:initialize", {"trace_id": ensure_trace_id(), "caller": caller}):
            async with self._lock:
                previous = self._ledger
                try:
                    if previous is not None:
                        if self.reinit_policy == "reject":
                            raise AlreadyInitialized(f"Token {previous.symbol} is already initialized.")
                        if self.reinit_policy == "ignore":
                            logger.info("initialize ignored; token %s already initialized", previous.symbol)
                            return LedgerResult.success("initialize", "Token already initialized; call ignored.", owner=previous.owner)
                    ledger = TokenLedger(caller, total_supply, decimals, name, symbol)
                except LedgerError as exc:
                    logger.warning(
                        "initialize rejected caller=%s error=%s: %s",
                        caller,
                        exc.kind,
                        exc,
                        extra={"operation": "initialize", "caller": caller, "error": exc.kind},
                    )
                    return LedgerResult.failure("initialize", exc.kind, str(exc))
                if previous is not None:
                    logger.warning(
                        "initialize replaced token %s; discarded %d history records",
                        previous.symbol,
                        len(previous.transaction_history()),
                    )
                self._ledger = ledger
        return LedgerResult.success("initialize", owner=caller)

    # ---------- updates ----------
    async def add_minter(self, caller: str, minter: str) -> LedgerResult:
        def apply(ledger: TokenLedger) -> Dict[str, Any]:
            ledger.add_minter(caller, minter)
            return {"minter": minter}

        return await self._update("add_minter", caller, apply)

    async def mint(self, caller: str, to: str, amount: int) -> LedgerResult:
        def apply(ledger: TokenLedger) -> Dict[str, Any]:
            return {"record": ledger.mint(caller, to, amount).to_dict()}

        return await self._update("mint", caller, apply)

    async def approve(self, caller: str, spender: str, amount: int) -> LedgerResult:
        def apply(ledger: TokenLedger) -> Dict[str, Any]:
            ledger.approve(caller, spender, amount)
            return {"owner": caller, "spender": spender, "amount": amount}

        return await self._update("approve", caller, apply)

    async def transfer(self, caller: str, to: str, amount: int) -> LedgerResult:
        # the debit source is always the attested caller
        def apply(ledger: TokenLedger) -> Dict[str, Any]:
            return {"record": ledger.transfer(caller, caller, to, amount).to_dict()}

        return await self._update("transfer", caller, apply)

    async def burn_cycles(self, amount: int) -> LedgerResult:
        def apply(ledger: TokenLedger) -> Dict[str, Any]:
            ledger.burn_cycles(amount)
            return {"burnt_cycles": ledger.burnt_cycles}

        return await self._update("burn_cycles", None, apply)

    # ---------- queries ----------
    async def balance_of(self, identity: str) -> int:
        return await self._query("balance_of", lambda ledger: ledger.balance_of(identity), 0)

    async def allowance(self, owner: str, spender: str) -> int:
        return await self._query("allowance", lambda ledger: ledger.allowance(owner, spender), 0)

    async def total_supply(self) -> int:
        return await self._query("total_supply", lambda ledger: ledger.total_supply, 0)

    async def symbol(self) -> str:
        return await self._query("symbol", lambda ledger: ledger.symbol, "")

    async def name(self) -> str:
        return await self._query("name", lambda ledger: ledger.name, "")

    async def decimals(self) -> int:
        return await self._query("decimals", lambda ledger: ledger.decimals, 0)

    async def owner(self) -> str:
        return await self._query("owner", lambda ledger: ledger.owner, "")

    async def burnt_cycles(self) -> int:
        return await self._query("burnt_cycles", lambda ledger: ledger.burnt_cycles, 0)

    async def transaction_history(self) -> List[TransactionRecord]:
        return await self._query("transaction_history", lambda ledger: ledger.transaction_history(), [])
