from typing import Any, Dict, List

from mcp.server.fastmcp import FastMCP

from src.token_ledger.config import Settings
from src.token_ledger.service import LedgerService


def register(mcp: FastMCP, service: LedgerService, settings: Settings) -> None:
    @mcp.tool()
    async def get_transaction_history() -> List[Dict[str, Any]]:
        """Every transfer and mint, oldest first."""
        return [record.to_dict() for record in await service.transaction_history()]
