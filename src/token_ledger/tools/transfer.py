from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def transfer(to: str, amount: int, caller: Optional[str] = None) -> Dict[str, Any]:
        """Send tokens from the calling identity to another identity."""
        result = await service.transfer(caller or settings.default_caller, to, amount)
        return result.to_dict()
