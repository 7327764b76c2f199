from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def burn_cycles(amount: int) -> Dict[str, Any]:
        """Add to the ledger-wide burnt-cycle counter."""
        result = await service.burn_cycles(amount)
        return result.to_dict()

    @mcp.tool()
    async def burnt_cycles() -> int:
        """Cumulative cycles burnt by the ledger."""
        return await service.burnt_cycles()
