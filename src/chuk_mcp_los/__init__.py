"""
chuk-mcp-los: Maidenhead Grid Locator & Radio Line-of-Sight Coverage MCP Server

Converts between coordinates and Maidenhead grid squares, fetches terrain
elevation from a batch lookup service, and computes 360° radio line-of-sight
coverage from an observer. Full coverage results are stored in chuk-artifacts.
"""
