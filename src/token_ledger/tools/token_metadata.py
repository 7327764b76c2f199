from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def total_supply() -> int:
        """Total number of tokens in existence."""
        return await service.total_supply()

    @mcp.tool()
    async def symbol() -> str:
        """Ticker symbol of the token."""
        return await service.symbol()

    @mcp.tool()
    async def name() -> str:
        """Human-readable token name."""
        return await service.name()

    @mcp.tool()
    async def decimals() -> int:
        """Display precision of the token."""
        return await service.decimals()

    @mcp.tool()
    async def owner() -> str:
        """Identity that created the token."""
        return await service.owner()
