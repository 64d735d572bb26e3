#!/usr/bin/env python3
"""
Coverage Demo -- chuk-mcp-los

Computes radio line-of-sight coverage from a grid square center and plots
the furthest visible distance on each bearing as a polar chart.

Runs in the background (coverage_start) and polls coverage_status, the
way an MCP client would for a full 360-radial computation.

Usage:
    python examples/coverage_demo.py [LOCATOR] [ANTENNA_HEIGHT_M]

Output:
    examples/output/coverage_<locator>.png

Requirements:
    pip install "chuk-mcp-los[examples]"
    (Requires network access to the elevation lookup service)
"""

import asyncio
import math
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from chuk_mcp_los.core.coverage_engine import CoverageConfig
from tool_runner import ToolRunner

# -- Configuration -----------------------------------------------------------

LOCATOR = sys.argv[1] if len(sys.argv) > 1 else "KN41kb"
ANTENNA_HEIGHT_M = float(sys.argv[2]) if len(sys.argv) > 2 else 15.0

# 72 radials to 100 km keeps the demo to about 72 elevation requests
CONFIG = CoverageConfig(num_radials=72, max_distance_km=100.0, sample_interval_km=1.0)
POLL_INTERVAL_S = 1.0
OUTPUT_DIR = Path(__file__).parent / "output"


async def main() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    runner = ToolRunner(CONFIG)

    print("=" * 60)
    print(f"Line-of-sight coverage from {LOCATOR}")
    print("=" * 60)

    started = await runner.run("coverage_start", locator=LOCATOR, antenna_height_m=ANTENNA_HEIGHT_M)
    if "error" in started:
        print(f"  ERROR: {started['error']}")
        sys.exit(1)
    print(f"  {started['message']}")

    while True:
        status = await runner.run("coverage_status")
        # Completed runs show up once the collector has retained the result
        recorded = status["last_outcome"] != "completed" or status["last_result_id"]
        if status["state"] != "calculating" and recorded:
            break
        progress = status["progress"]
        if progress and progress["total_units"]:
            print(f"  {progress['percent']:5.1f}% ({progress['completed_units']}/{progress['total_units']})")
        await asyncio.sleep(POLL_INTERVAL_S)

    if status["last_outcome"] != "completed":
        print(f"  Coverage ended {status['last_outcome']}: {status.get('error')}")
        sys.exit(1)

    coverage = await runner.run("coverage_get")
    summary = coverage["summary"]
    print(f"\n  Ground elevation: {coverage['observer_elevation_m']:.0f} m")
    print(f"  Mean LOS: {summary['mean_distance_km']:.1f} km")
    print(f"  Max LOS: {summary['max_distance_km']:.1f} km at {summary['farthest_bearing_deg']}°")
    print(f"  Artifact: {coverage['artifact_ref']}")

    rays = coverage["rays"]
    bearings = np.radians([r["bearing_deg"] for r in rays] + [rays[0]["bearing_deg"]])
    distances = [r["max_visible_distance_km"] for r in rays] + [rays[0]["max_visible_distance_km"]]

    fig, ax = plt.subplots(subplot_kw={"projection": "polar"}, figsize=(8, 8))
    ax.set_theta_zero_location("N")
    ax.set_theta_direction(-1)
    ax.fill(bearings, distances, alpha=0.3, color="tab:green")
    ax.plot(bearings, distances, color="tab:green", lw=1.5)
    ax.set_rmax(coverage["max_range_km"])
    ax.set_title(
        f"{coverage['grid_label']} LOS coverage, antenna {ANTENNA_HEIGHT_M:.0f} m\n"
        f"mean {summary['mean_distance_km']:.1f} km, "
        f"radio horizon {math.sqrt(2 * 6371 * 4 / 3 * ANTENNA_HEIGHT_M / 1000):.1f} km",
        fontsize=12,
    )

    output_path = OUTPUT_DIR / f"coverage_{coverage['grid_label']}.png"
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"\nOutput: {output_path}")

    runner.close()


if __name__ == "__main__":
    asyncio.run(main())
