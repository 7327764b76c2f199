from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def mint(to: str, amount: int, caller: Optional[str] = None) -> Dict[str, Any]:
        """Create new tokens for an identity. Minters only."""
        result = await service.mint(caller or settings.default_caller, to, amount)
        return result.to_dict()
