from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def add_minter(minter: str, caller: Optional[str] = None) -> Dict[str, Any]:
        """Authorize another identity to mint. Owner only."""
        result = await service.add_minter(caller or settings.default_caller, minter)
        return result.to_dict()
