from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def initialize(symbol: str, name: str, total_supply: int, decimals: int, caller: Optional[str] = None) -> Dict[str, Any]:
        """Create the token; the calling identity becomes its owner and first minter."""
        result = await service.initialize(caller or settings.default_caller, symbol, name, total_supply, decimals)
        return result.to_dict()
