"""In-memory single-token ledger: balances, allowances, minters and audit trail."""

from __future__ import annotations

import logging
from typing import Dict, List, Set

from .errors import AmountOverflow, InsufficientBalance, NotAuthorized, NotOwner
from .models import (
    MINT_REASON,
    TRANSFER_REASON_BURNT,
    TRANSFER_REASON_NO_BURN,
    U64_MAX,
    TokenMetadata,
    TransactionRecord,
    require_u8,
    require_u64,
)

logger = logging.getLogger(__name__)


class TokenLedger:
    """Authoritative state of one fungible token.

    Every method runs to completion without awaiting, and every failure is
    raised before any field is written, so a rejected call leaves the ledger
    exactly as it was. Callers running on more than one thread must hold a
    single lock around each mutating call.
    """

    def __init__(self, owner: str, total_supply: int, decimals: int, name: str, symbol: str):
        require_u64(total_supply, "total_supply")
        require_u8(decimals)
        self._metadata = TokenMetadata(owner=owner, name=name, symbol=symbol, decimals=decimals)
        self._balances: Dict[str, int] = {owner: total_supply}
        self._allowances: Dict[str, Dict[str, int]] = {}
        self._minters: Set[str] = {owner}
        self._total_supply = total_supply
        self._burnt_cycles = 0
        self._history: List[TransactionRecord] = []
        logger.info("ledger created owner=%s symbol=%s supply=%s decimals=%s", owner, symbol, total_supply, decimals)

    # ---------- queries ----------
    @property
    def metadata(self) -> TokenMetadata:
        return self._metadata

    @property
    def owner(self) -> str:
        return self._metadata.owner

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def symbol(self) -> str:
        return self._metadata.symbol

    @property
    def decimals(self) -> int:
        return self._metadata.decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def burnt_cycles(self) -> int:
        return self._burnt_cycles

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(owner, {}).get(spender, 0)

    def is_minter(self, identity: str) -> bool:
        return identity in self._minters

    def transaction_history(self) -> List[TransactionRecord]:
        return list(self._history)

    # ---------- updates ----------
    def transfer(self, caller: str, from_: str, to: str, amount: int) -> TransactionRecord:
        """Move ``amount`` from ``from_`` to ``to`` and log it.

        ``caller`` is not compared with ``from_`` here; binding the debit
        source to the authenticated caller is the service's job.
        """
        require_u64(amount)
        from_balance = self.balance_of(from_)
        if from_balance < amount:
            raise InsufficientBalance(f"Insufficient balance: {from_} holds {from_balance}, needs {amount}.")

        self._balances[from_] = from_balance - amount
        self._balances[to] = self.balance_of(to) + amount

        # cumulative ledger-wide counter, not a per-transfer fee
        cycles_burnt = self._burnt_cycles
        reason = TRANSFER_REASON_BURNT if cycles_burnt > 0 else TRANSFER_REASON_NO_BURN
        record = TransactionRecord(
            from_=from_,
            to=to,
            amount=amount,
            post_balance_from=self.balance_of(from_),
            post_balance_to=self.balance_of(to),
            cycles_burnt=cycles_burnt,
            reason=reason,
        )
        self._history.append(record)
        logger.info("transfer caller=%s from=%s to=%s amount=%s", caller, from_, to, amount)
        return record

    def approve(self, owner: str, spender: str, amount: int) -> None:
        require_u64(amount)
        self._allowances.setdefault(owner, {})[spender] = amount
        logger.info("approve owner=%s spender=%s amount=%s", owner, spender, amount)

    def add_minter(self, requester: str, new_minter: str) -> None:
        if requester != self.owner:
            raise NotOwner(f"Only the owner can add minters; {requester} is not the owner.")
        self._minters.add(new_minter)
        logger.info("add_minter requester=%s minter=%s", requester, new_minter)

    def mint(self, requester: str, to: str, amount: int) -> TransactionRecord:
        require_u64(amount)
        if requester not in self._minters:
            raise NotAuthorized(f"Caller {requester} is not authorized to mint.")
        if self._total_supply + amount > U64_MAX:
            raise AmountOverflow(f"Minting {amount} would overflow total supply {self._total_supply}.")

        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        record = TransactionRecord(
            from_=requester,
            to=to,
            amount=amount,
            post_balance_from=0,
            post_balance_to=self.balance_of(to),
            cycles_burnt=0,
            reason=MINT_REASON,
        )
        self._history.append(record)
        logger.info("mint requester=%s to=%s amount=%s supply=%s", requester, to, amount, self._total_supply)
        return record

    def burn_cycles(self, amount: int) -> None:
        require_u64(amount, "cycles")
        if self._burnt_cycles + amount > U64_MAX:
            raise AmountOverflow(f"Burning {amount} cycles would overflow the counter {self._burnt_cycles}.")
        self._burnt_cycles += amount
        logger.debug("burn_cycles amount=%s total=%s", amount, self._burnt_cycles)
