"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

REINIT_POLICIES = ("reject", "ignore", "allow")
TRANSPORTS = ("stdio", "sse", "streamable-http")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 8001
    sse_path: str = "/sse"
    health_host: str = "0.0.0.0"
    health_port: int = 8081
    log_level: str = "WARNING"
    otel_enabled: bool = False
    default_caller: str = "anonymous"
    reinit_policy: str = "reject"

    def __post_init__(self) -> None:
        if self.transport not in TRANSPORTS:
            raise ValueError(f"MCP_TRANSPORT must be one of {TRANSPORTS}, got {self.transport!r}.")
        if self.reinit_policy not in REINIT_POLICIES:
            raise ValueError(f"LEDGER_REINIT_POLICY must be one of {REINIT_POLICIES}, got {self.reinit_policy!r}.")
        if not self.default_caller:
            raise ValueError("LEDGER_DEFAULT_CALLER must not be empty.")

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        return cls(
            transport=os.getenv("MCP_TRANSPORT", "stdio").lower(),
            host=os.getenv("MCP_HOST", "0.0.0.0"),
            port=int(os.getenv("MCP_PORT", "8001")),
            sse_path=os.getenv("MCP_SSE_PATH", "/sse"),
            health_host=os.getenv("HEALTH_HOST", "0.0.0.0"),
            health_port=int(os.getenv("HEALTH_PORT", "8081")),
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
            otel_enabled=_env_bool("OTEL_ENABLED", False),
            default_caller=os.getenv("LEDGER_DEFAULT_CALLER", "anonymous"),
            reinit_policy=os.getenv("LEDGER_REINIT_POLICY", "reject").lower(),
        )
