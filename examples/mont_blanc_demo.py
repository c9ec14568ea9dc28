#!/usr/bin/env python3
"""
Mont Blanc Heightmap -- ign-heightmap Demo

Demonstrates the full extraction pipeline around the Mont Blanc summit:
    build grid -> fetch elevations in batches -> write HDF5 -> render PNG

The HDF5 file is then read back and a few statistics are printed.

Usage:
    python examples/mont_blanc_demo.py

Output:
    examples/output/mont_blanc.h5
    examples/output/mont_blanc.png

Requirements:
    pip install ign-heightmap
    (Requires network access to the IGN altimetry service)
"""

import logging
from pathlib import Path

import numpy as np

from ign_heightmap.cli import run
from ign_heightmap.core.dataset_io import read_output
from ign_heightmap.models import MapRequest, format_response

# -- Configuration -----------------------------------------------------------

CENTER = (45.8326, 6.8652)  # Mont Blanc summit
SIZE_M = 2000.0
RESOLUTION_M = 100.0
OUTPUT_DIR = Path(__file__).parent / "output"


# -- Main pipeline -----------------------------------------------------------


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("Mont Blanc -- Heightmap Extraction")
    print("=" * 60)

    request = MapRequest(
        latitude=CENTER[0],
        longitude=CENTER[1],
        size_m=SIZE_M,
        resolution_m=RESOLUTION_M,
        output=str(OUTPUT_DIR / "mont_blanc.h5"),
        image=str(OUTPUT_DIR / "mont_blanc.png"),
        fill_missing=True,
    )
    print(f"\nGrid: {request.map_size}x{request.map_size} samples")

    summary = run(request)
    print()
    print(format_response(summary))

    # Read the dataset back
    data = read_output(request.output)
    heights = data.heights[data.valid] if data.valid is not None else data.heights
    if heights.size:
        peak = int(np.nanargmax(data.heights))
        lon, lat = data.positions[peak]
        print(f"\nHighest sample: {data.heights[peak]:.1f}m at ({lat:.5f}, {lon:.5f})")
        print(f"Mean elevation: {float(np.mean(heights)):.1f}m")
    print(f"Resolution: {data.resolution:.0f}m, positions: {len(data.positions)}")


if __name__ == "__main__":
    main()
