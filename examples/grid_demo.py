#!/usr/bin/env python3
"""
Grid Locator Demo -- chuk-mcp-los

Converts a few well-known stations to Maidenhead locators, decodes a
locator back to its square, and lists the squares covering a region.
No network access needed.

Usage:
    python examples/grid_demo.py
"""

import asyncio

from tool_runner import ToolRunner

STATIONS = {
    "W1AW (Newington, CT)": (41.714775, -72.727260),
    "Istanbul": (41.0082, 28.9784),
    "Sydney Opera House": (-33.8568, 151.2153),
}


async def main() -> None:
    runner = ToolRunner()

    print("=" * 60)
    print("chuk-mcp-los -- Maidenhead Grid")
    print("=" * 60)

    print("\nStations:")
    for name, (lat, lon) in STATIONS.items():
        result = await runner.run("grid_locate", lat=lat, lon=lon, precision=6)
        print(f"  {name:24s} {result['locator']}  (8 chars: {result['all_precisions']['extended']})")

    print("\nDecoding KN41kb:")
    print(await runner.run_text("grid_bounds", locator="KN41kb"))

    print("\nSquares covering the Sea of Marmara:")
    squares = await runner.run("grid_squares", bbox=[26.5, 40.2, 30.0, 41.2], precision=4)
    print(f"  {squares['count']} squares: {', '.join(squares['locators'])}")

    print("\nInvalid input is reported, not raised:")
    error = await runner.run("grid_bounds", locator="ZZ99")
    print(f"  {error['error']}")

    runner.close()


if __name__ == "__main__":
    asyncio.run(main())
