#!/usr/bin/env python3
"""Write a sample state snapshot for trying the topology CLI and server.

The sample well has a bore and an A annulus in two intervals, a closed
safety valve and a packer at the interval boundary, and a perforation in
the lower interval, so the failure routes through the bore and the
annulus are held by different barrier elements.

Usage:
    python -m wellgraph.scripts.generate_sample_snapshot sample_snapshot.json
    python -m wellgraph.analysis.analyze_topology sample_snapshot.json
"""

import argparse
import json
from pathlib import Path
from typing import Any


def bore_layer(radius: float = 2.0) -> dict[str, Any]:
    return {"role": "core", "material": "wellbore", "innerRadius": 0.0, "outerRadius": radius}


def annulus_layer(
    slot_index: int,
    inner_radius: float,
    outer_radius: float,
    material: str = "fluid",
    row_id: str | None = None,
) -> dict[str, Any]:
    layer = {
        "role": "annulus",
        "material": material,
        "innerRadius": inner_radius,
        "outerRadius": outer_radius,
        "slotIndex": slot_index,
        "source": {},
    }
    if row_id:
        layer["source"]["rowId"] = row_id
    return layer


def build_sample_snapshot(boundary_depth: float = 100.0, total_depth: float = 200.0) -> dict[str, Any]:
    stack = [bore_layer(), annulus_layer(0, 2.5, 4.0)]
    return {
        "casingData": [
            {"rowId": "csg-prod", "label": "Production casing", "top": 0, "bottom": total_depth, "od": 9.625, "id": 8.5},
        ],
        "tubingData": [],
        "equipmentData": [
            {"rowId": "sv-1", "type": "Safety Valve", "depth": boundary_depth},
            {"rowId": "pk-1", "type": "Packer", "depth": boundary_depth},
        ],
        "markers": [
            {"rowId": "perf-1", "type": "Perforation", "top": 150, "bottom": 180},
        ],
        "annulusFluids": [],
        "topologySources": [],
        "config": {},
        "physics": {
            "intervals": [
                {"top": 0, "bottom": boundary_depth, "boundaryReasons": ["surface"], "stack": stack},
                {"top": boundary_depth, "bottom": total_depth, "boundaryReasons": ["equipment"], "stack": stack},
            ]
        },
    }


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Write a sample topology state snapshot.")
    parser.add_argument("output", type=Path, help="path of the JSON file to write")
    parser.add_argument("--well-id", default="sample-well", help="well id stored with the snapshot")
    args = parser.parse_args(argv)

    payload = {"state_snapshot": build_sample_snapshot(), "well_id": args.well_id}
    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w") as f:
        json.dump(payload, f, indent=2)
    print(f"✓ wrote sample snapshot to {args.output}")


if __name__ == "__main__":
    main()
