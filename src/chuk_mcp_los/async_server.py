#!/usr/bin/env python3
"""
Async LOS MCP Server using chuk-mcp-server

Maidenhead grid locator conversion and radio line-of-sight coverage.
Terrain heights come from a batch elevation lookup service; completed
coverage results are stored in chuk-artifacts.

Coverage geometry and elevation-service limits are read from LOS_*
environment variables when the module is imported.
"""

import logging

from chuk_mcp_server import ChukMCPServer

from .constants import ServerConfig
from .core.coverage_engine import CoverageConfig
from .core.los_manager import LOSManager
from .tools.coverage import register_coverage_tools
from .tools.discovery import register_discovery_tools
from .tools.elevation import register_elevation_tools
from .tools.grid import register_grid_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer(ServerConfig.NAME)

# Create LOS manager instance
manager = LOSManager(config=CoverageConfig.from_env())

# Register all tool modules
register_discovery_tools(mcp, manager)
register_grid_tools(mcp, manager)
register_elevation_tools(mcp, manager)
register_coverage_tools(mcp, manager)

# Run the server
if __name__ == "__main__":
    logger.info(f"Starting {ServerConfig.NAME}...")
    logger.info(f"Elevation API: {manager.config.elevation_api_url}")
    mcp.run(stdio=True)
