"""MCP tool modules for chuk-mcp-los."""
