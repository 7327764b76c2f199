from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def approve(spender: str, amount: int, caller: Optional[str] = None) -> Dict[str, Any]:
        """Set (not add to) the allowance the calling identity grants a spender."""
        result = await service.approve(caller or settings.default_caller, spender, amount)
        return result.to_dict()
