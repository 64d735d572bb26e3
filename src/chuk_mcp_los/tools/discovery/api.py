"""
Discovery tools — server status and capabilities.

These tools require no network I/O and report the server's configuration
and the state of the coverage engine.
"""

import logging
import math
import os

from ...constants import (
    COVERAGE_TOOLS,
    DEFAULT_PRECISION,
    ELEVATION_TOOLS,
    GRID_PRECISIONS,
    GRID_TOOLS,
    EnvVar,
    ServerConfig,
    StorageProvider,
)
from ...models.responses import (
    CapabilitiesResponse,
    ErrorResponse,
    StatusResponse,
    format_response,
)

logger = logging.getLogger(__name__)

DISCOVERY_TOOLS = ["los_status", "los_capabilities"]


def register_discovery_tools(mcp, manager):
    """Register discovery tools with the MCP server."""

    @mcp.tool()
    async def los_status(output_mode: str = "json") -> str:
        """Get server status including version, coverage engine state, and storage configuration.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Server status information
        """
        try:
            provider = os.environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)

            store_available = False
            try:
                manager._get_store()
                store_available = True
            except Exception:
                pass

            response = StatusResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                engine_state=manager.engine.state.value,
                elevation_api_url=manager.config.elevation_api_url,
                storage_provider=provider,
                artifact_store_available=store_available,
                retained_coverages=len(manager.list_results()),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"los_status failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def los_capabilities(output_mode: str = "json") -> str:
        """Get full server capabilities: grid precisions, coverage geometry,
        elevation batching limits, and the available tools.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Complete server capabilities
        """
        try:
            config = manager.config
            tools = DISCOVERY_TOOLS + GRID_TOOLS + ELEVATION_TOOLS + COVERAGE_TOOLS

            response = CapabilitiesResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                grid_precisions=GRID_PRECISIONS,
                default_precision=DEFAULT_PRECISION,
                num_radials=config.num_radials,
                max_distance_km=config.max_distance_km,
                sample_interval_km=config.sample_interval_km,
                k_factor=None if math.isinf(config.k_factor) else config.k_factor,
                batch_size=config.batch_size,
                max_concurrent=config.max_concurrent,
                tools=tools,
                tool_count=len(tools),
                llm_guidance=(
                    "Use grid_locate to turn coordinates into a Maidenhead locator and "
                    "grid_bounds to turn a locator back into its square. "
                    "Use elevation_point for terrain height at a point. "
                    "Use coverage_calculate with lat/lon or a locator to compute radio "
                    "line-of-sight in every direction; it can take a minute because "
                    "tens of thousands of elevations are fetched. "
                    "For long runs use coverage_start, poll coverage_status, and "
                    "coverage_cancel to stop."
                ),
                message=f"{ServerConfig.NAME} v{ServerConfig.VERSION} capabilities",
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"los_capabilities failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
