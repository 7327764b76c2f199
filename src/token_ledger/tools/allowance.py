from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def allowance(owner: str, spender: str) -> int:
        """Allowance an owner has granted a spender; 0 when none."""
        return await service.allowance(owner, spender)
