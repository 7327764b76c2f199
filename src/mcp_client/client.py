"""MCP client helper to connect to the token ledger server and call its tools."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shlex
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from mcp.client.session import ClientSession
from mcp.client.sse import sse_client
from mcp.client.stdio import StdioServerParameters, stdio_client

from src.utils.telemetry import get_trace_id, span

logger = logging.getLogger(__name__)

# Only these are retried: repeating a timed-out transfer or mint could apply it twice.
READ_ONLY_TOOLS = frozenset(
    {
        "balance_of",
        "allowance",
        "total_supply",
        "symbol",
        "name",
        "decimals",
        "owner",
        "burnt_cycles",
        "get_transaction_history",
    }
)


def unpack_content(content: List[Any]) -> Any:
    """Turn MCP content blocks back into Python values.

    Fallback for servers that send no structured content. Text blocks holding
    JSON are decoded, so string results that look like JSON lose their type.
    A single block yields its value, several blocks (list results) yield a list.
    """
    values = []
    for item in content:
        if hasattr(item, "text"):
            try:
                values.append(json.loads(item.text))
            except json.JSONDecodeError:
                values.append(item.text)
        elif hasattr(item, "data"):
            values.append(item.data)
        else:
            values.append(item.model_dump())  # fallback for unknown content types
    if len(values) == 1:
        return values[0]
    return values


def unpack_result(resp: Any) -> Any:
    """Python value of a ``CallToolResult``, preferring its structured content.

    FastMCP wraps scalar and list returns as ``{"result": value}`` and sends
    dict returns as they are.
    """
    structured = getattr(resp, "structuredContent", None)
    if structured is None:
        return unpack_content(resp.content)
    if isinstance(structured, dict) and set(structured) == {"result"}:
        return structured["result"]
    return structured


class LedgerToolClient:
    """Thin wrapper around an MCP client session for ledger tool calls with timeout/retry.

    ``call_tool`` opens a session per call. To run several calls against the
    same server process (a stdio server keeps its ledger only while its
    session lives) open ``session()`` once and use ``call_in_session``.
    """

    def __init__(
        self,
        server_cmd: Optional[str] = None,
        server_url: Optional[str] = None,
        server_headers: Optional[Dict[str, str]] = None,
        timeout_seconds: float = 15.0,
        retries: int = 1,
    ):
        self.server_cmd = server_cmd
        self.server_url = server_url
        self.server_headers = server_headers or {}
        self.timeout_seconds = timeout_seconds
        self.retries = max(retries, 1)

    @property
    def transport(self) -> str:
        return "sse" if self.server_url else "stdio"

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ClientSession]:
        if not self.server_cmd and not self.server_url:
            raise RuntimeError("MCP_SERVER_CMD or MCP_SERVER_URL is not set; cannot call tools.")
        if self.server_url:
            logger.info("MCP SSE connect, url=%s", self.server_url, extra={"trace_id": get_trace_id()})
            transport = sse_client(self.server_url, headers=self.server_headers)
        else:
            cmd_parts = shlex.split(self.server_cmd or "")
            if not cmd_parts:
                raise ValueError("MCP_SERVER_CMD is empty.")
            command, args = cmd_parts[0], cmd_parts[1:]
            logger.info("MCP stdio connect, cmd=%s args=%s", command, args, extra={"trace_id": get_trace_id()})
            transport = stdio_client(StdioServerParameters(command=command, args=args, env=os.environ.copy(), cwd=os.getcwd()))
        async with transport as (read_stream, write_stream):
            # ClientSession must run as a context manager to start the receive loop.
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                yield session

    async def call_in_session(self, session: ClientSession, name: str, **kwargs) -> Any:
        """Call one tool on an open session; errors are logged and raised."""
        resp_tools = await session.list_tools()
        tools = {tool.name for tool in resp_tools.tools}
        logger.debug("MCP available tools: %s", sorted(tools))
        if name not in tools:
            raise ValueError(f"Tool {name} not found in MCP registry.")

        max_attempts = self.retries if name in READ_ONLY_TOOLS else 1
        attempt = 0
        while True:
            attempt += 1
            try:
                with span(f"tool_call:{name}", {"trace_id": get_trace_id(), "transport": self.transport, "attempt": attempt}):
                    logger.info(
                        "MCP call_tool start: %s args=%s attempt=%s", name, kwargs, attempt, extra={"trace_id": get_trace_id(), "tool": name}
                    )
                    resp = await asyncio.wait_for(session.call_tool(name, kwargs), timeout=self.timeout_seconds)
                break
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "MCP call_tool error attempt=%s/%s name=%s err=%s", attempt, max_attempts, name, exc, extra={"trace_id": get_trace_id(), "tool": name}
                )
                if attempt >= max_attempts:
                    raise
        if resp.isError:
            raise RuntimeError(f"Tool {name} failed: {unpack_content(resp.content)}")
        result = unpack_result(resp)
        logger.info("MCP call_tool done: %s result=%s", name, result, extra={"trace_id": get_trace_id(), "tool": name})
        return result

    async def call_tool_async(self, name: str, **kwargs) -> Any:
        """Open a fresh session, call one tool, close the session."""
        async with self.session() as session:
            return await self.call_in_session(session, name, **kwargs)

    def call_tool(self, name: str, **kwargs) -> Any:
        """
        Synchronous wrapper; uses asyncio.run when no running loop is present.
        RuntimeError is not silenced so stack traces stay loud.
        """
        try:
            logger.debug("Using asyncio.run for tool %s", name)
            return asyncio.run(self.call_tool_async(name, **kwargs))
        except RuntimeError:
            logger.exception("call_tool failed for %s; inside an active event loop use call_tool_async instead.", name)
            raise


def make_ledger_client() -> LedgerToolClient:
    server_cmd = os.getenv("MCP_SERVER_CMD")
    server_url = os.getenv("MCP_SERVER_URL")
    timeout = float(os.getenv("TOOL_CALL_TIMEOUT", "15"))
    retries = int(os.getenv("TOOL_CALL_RETRIES", "1"))
    headers_env = os.getenv("MCP_SERVER_HEADERS")
    server_headers: Dict[str, str] = {}
    if headers_env:
        try:
            server_headers = json.loads(headers_env)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse MCP_SERVER_HEADERS: %s", exc)
    return LedgerToolClient(
        server_cmd=server_cmd,
        server_url=server_url,
        server_headers=server_headers,
        timeout_seconds=timeout,
        retries=retries,
    )
