from importlib import import_module

import pytest

from src.token_ledger.config import Settings
from src.token_ledger.server import TOOL_MODULES
from src.token_ledger.service import LedgerService


class CapturingMCP:
    """Stands in for FastMCP: keeps each decorated tool function by name."""

    def __init__(self):
        self.tools = {}

    def tool(self):
        def decorator(fn):
            self.tools[fn.__name__] = fn
            return fn

        return decorator


@pytest.fixture
def settings():
    return Settings(default_caller="owner-o")


@pytest.fixture
def tools(settings):
    mcp = CapturingMCP()
    service = LedgerService(reinit_policy=settings.reinit_policy)
    for module_path in TOOL_MODULES:
        import_module(module_path).register(mcp, service, settings)
    return mcp.tools
