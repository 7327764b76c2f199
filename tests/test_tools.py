"""
Tool layer tests: argument binding, default caller and wire shapes.
"""

import asyncio

from src.token_ledger.config import Settings
from src.token_ledger.server import build_server

EXPECTED_TOOLS = {
    "initialize",
    "add_minter",
    "mint",
    "balance_of",
    "total_supply",
    "symbol",
    "name",
    "decimals",
    "owner",
    "allowance",
    "approve",
    "transfer",
    "burn_cycles",
    "burnt_cycles",
    "get_transaction_history",
}


def run(coro):
    return asyncio.run(coro)


def test_every_operation_is_registered(tools):
    assert set(tools) == EXPECTED_TOOLS


def test_build_server_lists_all_tools():
    mcp = build_server(Settings())
    listed = run(mcp.list_tools())
    assert {tool.name for tool in listed} == EXPECTED_TOOLS


def test_initialize_uses_default_caller(tools):
    async def scenario():
        result = await tools["initialize"](symbol="TOK", name="Token", total_supply=1000, decimals=2)
        return result, await tools["owner"](), await tools["balance_of"](identity="owner-o")

    result, owner, balance = run(scenario())
    assert result == {"ok": True, "operation": "initialize", "data": {"owner": "owner-o"}}
    assert (owner, balance) == ("owner-o", 1000)


def test_metadata_tools(tools):
    async def scenario():
        await tools["initialize"](symbol="TOK", name="Token", total_supply=1000, decimals=2)
        return (
            await tools["symbol"](),
            await tools["name"](),
            await tools["decimals"](),
            await tools["total_supply"](),
        )

    assert run(scenario()) == ("TOK", "Token", 2, 1000)


def test_explicit_caller_overrides_default(tools):
    async def scenario():
        await tools["initialize"](symbol="TOK", name="Token", total_supply=1000, decimals=2)
        await tools["transfer"](to="alice", amount=300)
        rejected = await tools["transfer"](to="bob", amount=500, caller="alice")
        approved = await tools["approve"](spender="bob", amount=25, caller="alice")
        return rejected, approved, await tools["allowance"](owner="alice", spender="bob")

    rejected, approved, allowance = run(scenario())
    assert rejected["ok"] is False
    assert rejected["error"] == "InsufficientBalance"
    assert approved["ok"] is True
    assert allowance == 25


def test_mint_flow_and_history(tools):
    async def scenario():
        await tools["initialize"](symbol="TOK", name="Token", total_supply=1000, decimals=2)
        await tools["burn_cycles"](amount=3)
        await tools["transfer"](to="alice", amount=300)
        denied = await tools["mint"](to="alice", amount=1, caller="minter-m")
        await tools["add_minter"](minter="minter-m")
        minted = await tools["mint"](to="alice", amount=200, caller="minter-m")
        return denied, minted, await tools["get_transaction_history"](), await tools["burnt_cycles"]()

    denied, minted, history, burnt = run(scenario())
    assert denied["error"] == "NotAuthorized"
    assert minted["data"]["record"]["post_balance_to"] == 500
    assert [h["from"] for h in history] == ["owner-o", "minter-m"]
    assert history[0]["cycles_burnt"] == 3
    assert history[1]["cycles_burnt"] == 0
    assert burnt == 3


def test_negative_amount_is_a_failed_result(tools):
    async def scenario():
        await tools["initialize"](symbol="TOK", name="Token", total_supply=1000, decimals=2)
        return await tools["burn_cycles"](amount=-1)

    result = run(scenario())
    assert result["ok"] is False
    assert result["error"] == "InvalidAmount"
