from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def balance_of(identity: str) -> int:
        """Token balance of an identity; 0 when unknown."""
        return await service.balance_of(identity)
