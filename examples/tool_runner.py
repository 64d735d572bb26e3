"""
Shared helper for running chuk-mcp-los MCP tools directly from Python.

Registers every tool against a minimal stand-in for the MCP server and
sets up an in-memory artifact store, so demo scripts can call tools as
plain async functions without a transport layer.

Usage:
    from tool_runner import ToolRunner

    async def main():
        runner = ToolRunner()
        result = await runner.run("grid_locate", lat=41.06, lon=28.87)
        print(result)
"""

from __future__ import annotations

import json
import os
from typing import Any

from chuk_mcp_los.core.coverage_engine import CoverageConfig
from chuk_mcp_los.core.los_manager import LOSManager
from chuk_mcp_los.tools.coverage import register_coverage_tools
from chuk_mcp_los.tools.discovery import register_discovery_tools
from chuk_mcp_los.tools.elevation import register_elevation_tools
from chuk_mcp_los.tools.grid import register_grid_tools


class _MiniMCP:
    """Minimal MCP server that captures tools registered via @mcp.tool."""

    def __init__(self) -> None:
        self._tools: dict[str, Any] = {}

    def tool(self) -> Any:
        def decorator(fn: Any) -> Any:
            self._tools[fn.__name__] = fn
            return fn

        return decorator

    def get_tool(self, name: str) -> Any:
        return self._tools[name]


def _init_artifact_store() -> None:
    """Initialize an in-memory artifact store for demo use."""
    os.environ.setdefault("CHUK_ARTIFACTS_PROVIDER", "memory")

    from chuk_artifacts import ArtifactStore
    from chuk_mcp_server import set_global_artifact_store

    set_global_artifact_store(ArtifactStore(storage_provider="memory", session_provider="memory"))


class ToolRunner:
    """
    Run chuk-mcp-los MCP tools directly from Python.

    Returns parsed JSON by default; use run_text() for human-readable
    output. Coverage geometry can be overridden with a CoverageConfig,
    otherwise LOS_* environment variables apply.
    """

    def __init__(self, config: CoverageConfig | None = None) -> None:
        _init_artifact_store()
        self._mcp = _MiniMCP()
        self.manager = LOSManager(config=config or CoverageConfig.from_env())
        register_discovery_tools(self._mcp, self.manager)
        register_grid_tools(self._mcp, self.manager)
        register_elevation_tools(self._mcp, self.manager)
        register_coverage_tools(self._mcp, self.manager)

    @property
    def tool_names(self) -> list[str]:
        return list(self._mcp._tools.keys())

    async def run(self, tool_name: str, **kwargs: Any) -> dict[str, Any]:
        """Call a tool by name and return parsed JSON."""
        raw = await self._mcp.get_tool(tool_name)(**kwargs)
        return json.loads(raw)

    async def run_text(self, tool_name: str, **kwargs: Any) -> str:
        """Call a tool by name with output_mode='text'."""
        return await self._mcp.get_tool(tool_name)(output_mode="text", **kwargs)

    def close(self) -> None:
        self.manager.close()
