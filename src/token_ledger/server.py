"""MCP server wiring: one token ledger, one tool module per operation group."""

from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from importlib import import_module
from typing import List, Optional

import logging
from mcp.server.fastmcp import FastMCP

from src.utils.telemetry import configure_logging, configure_otel

from .config import Settings
from .service import LedgerService

# Tool modules (one file per operation group for easy add/remove)
TOOL_MODULES: List[str] = [
    "src.token_ledger.tools.initialize",
    "src.token_ledger.tools.add_minter",
    "src.token_ledger.tools.mint",
    "src.token_ledger.tools.balance_of",
    "src.token_ledger.tools.token_metadata",
    "src.token_ledger.tools.allowance",
    "src.token_ledger.tools.approve",
    "src.token_ledger.tools.transfer",
    "src.token_ledger.tools.burn_cycles",
    "src.token_ledger.tools.get_transaction_history",
]


logger = logging.getLogger(__name__)


def start_health_server(host: str, port: int, ready_flag: dict, service: LedgerService) -> threading.Thread:
    """Start a lightweight HTTP server for health/readiness probes.

    Ready means the MCP server is up; the token itself may still be uninitialized,
    which is reported in the payload rather than as a failure.
    """

    class Handler(BaseHTTPRequestHandler):
        def log_message(self, format, *args):  # noqa: D401
            # Silence default stdout logging
            return

        def _reply(self, status: int, payload: bytes) -> None:
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(payload)

        def do_GET(self):  # noqa: N802
            if self.path in ("/healthz", "/livez"):
                self._reply(200, b'{"status":"ok"}')
                return
            if self.path in ("/readyz", "/ready"):
                if not ready_flag.get("ready"):
                    self._reply(503, b'{"status":"not-ready"}')
                    return
                token = b"true" if service.initialized else b"false"
                self._reply(200, b'{"status":"ready","token_initialized":' + token + b"}")
                return
            self.send_response(404)
            self.end_headers()

    httpd = HTTPServer((host, port), Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    logger.info("Health server started on http://%s:%s (healthz/readyz)", host, port)
    ready_flag["server"] = httpd
    return thread


def build_server(settings: Optional[Settings] = None, service: Optional[LedgerService] = None) -> FastMCP:
    settings = settings or Settings()
    service = service or LedgerService(reinit_policy=settings.reinit_policy)
    logger.info("Building MCP server with token ledger and %d tool modules", len(TOOL_MODULES))
    mcp = FastMCP(
        "token-ledger",
        host=settings.host,
        port=settings.port,
        sse_path=settings.sse_path,
    )

    for module_path in TOOL_MODULES:
        module = import_module(module_path)
        if hasattr(module, "register"):
            module.register(mcp, service, settings)
            logger.info("Registered tool module: %s", module_path)
        else:
            logger.warning("Module %s missing register()", module_path)

    return mcp


def run():
    """Entry point for the token ledger server."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    if settings.otel_enabled:
        configure_otel("token-ledger")
    ready_flag: dict = {"ready": False}

    service = LedgerService(reinit_policy=settings.reinit_policy)
    start_health_server(settings.health_host, settings.health_port, ready_flag, service)

    mcp = build_server(settings, service)
    logger.info(
        "Starting MCP server... transport=%s host=%s port=%s sse_path=%s reinit_policy=%s",
        settings.transport,
        settings.host,
        settings.port,
        settings.sse_path,
        settings.reinit_policy,
    )
    ready_flag["ready"] = True

    if settings.transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=settings.transport)


if __name__ == "__main__":
    run()
