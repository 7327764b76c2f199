"""
Token ledger smoke run against a live MCP server.

Usage:
    python scripts/smoke_ledger_tools.py [--verbose]

Spawns the server over stdio (override with MCP_SERVER_CMD or MCP_SERVER_URL),
then walks the owner/minter scenario: initialize, transfer, a rejected
transfer, add_minter, mint, and checks balances, supply and history after
each step. All steps share one session, so a stdio server keeps its ledger
for the whole run. Against an SSE server the token must not already exist.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from mcp.client.session import ClientSession  # noqa: E402

from src.mcp_client.client import LedgerToolClient, make_ledger_client  # noqa: E402

OWNER, ALICE, BOB, MINTER = "owner-o", "alice", "bob", "minter-m"


# (label, tool_name, kwargs, check)
STEPS: List[Tuple[str, str, Dict[str, Any], Callable[[Any], bool]]] = [
    ("initialize", "initialize", {"symbol": "TOK", "name": "Token", "total_supply": 1000, "decimals": 2, "caller": OWNER},
     lambda r: r["ok"]),
    ("owner balance", "balance_of", {"identity": OWNER}, lambda r: r == 1000),
    ("transfer O->A 300", "transfer", {"to": ALICE, "amount": 300, "caller": OWNER}, lambda r: r["ok"]),
    ("owner balance after transfer", "balance_of", {"identity": OWNER}, lambda r: r == 700),
    ("alice balance after transfer", "balance_of", {"identity": ALICE}, lambda r: r == 300),
    ("transfer A->B 500 rejected", "transfer", {"to": BOB, "amount": 500, "caller": ALICE},
     lambda r: not r["ok"] and r["error"] == "InsufficientBalance"),
    ("history after rejected transfer", "get_transaction_history", {}, lambda r: isinstance(r, list) and len(r) == 1),
    ("add_minter M", "add_minter", {"minter": MINTER, "caller": OWNER}, lambda r: r["ok"]),
    ("mint M->A 200", "mint", {"to": ALICE, "amount": 200, "caller": MINTER}, lambda r: r["ok"]),
    ("total supply", "total_supply", {}, lambda r: r == 1200),
    ("alice balance after mint", "balance_of", {"identity": ALICE}, lambda r: r == 500),
    ("history after mint", "get_transaction_history", {}, lambda r: isinstance(r, list) and len(r) == 2),
]


@dataclass
class SmokeReport:
    passed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)


async def run_steps(client: LedgerToolClient, session: ClientSession, verbose: bool = False) -> SmokeReport:
    report = SmokeReport()
    for label, tool, params, check in STEPS:
        try:
            result = await client.call_in_session(session, tool, **params)
        except Exception as exc:  # noqa: BLE001
            ok, detail = False, f"{type(exc).__name__}: {exc}"
        else:
            ok = check(result)
            detail = repr(result) if ok else f"unexpected result: {result!r}"
        if ok:
            report.passed.append(label)
            if verbose:
                print(f"  [PASS] {label}: {detail[:200]}")
        else:
            report.failed.append((label, detail))
            print(f"  [FAIL] {label}: {detail[:200]}")
    return report


async def run_smoke(client: LedgerToolClient, verbose: bool = False) -> SmokeReport:
    async with client.session() as session:
        return await run_steps(client, session, verbose)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    os.environ.setdefault("MCP_SERVER_CMD", "python -m src.token_ledger.server")
    client = make_ledger_client()
    print(f"[info] MCP_SERVER_CMD={os.environ.get('MCP_SERVER_CMD')} MCP_SERVER_URL={os.environ.get('MCP_SERVER_URL')}")

    report = asyncio.run(run_smoke(client, args.verbose))
    print(f"\n{len(report.passed)} passed, {len(report.failed)} failed")
    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
