#!/usr/bin/env python3
"""CLI script to build and summarize the topology of a snapshot file.

Usage:
    python -m wellgraph.analysis.analyze_topology <snapshot.json>

    # with JSON output
    python -m wellgraph.analysis.analyze_topology <snapshot.json> --json

    # list the edges on the minimum failure path
    python -m wellgraph.analysis.analyze_topology <snapshot.json> --scope min_path
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from wellgraph.analysis.topology_inspector import EdgeRow, create_edge_rows
from wellgraph.analysis.topology_summary import TopologySummary, summarize_topology
from wellgraph.config import configure_logging
from wellgraph.models.topology_types import InspectorScope
from wellgraph.topology.topology_core import build_topology_model


def load_snapshot(snapshot_file: Path) -> tuple[dict[str, Any], str | None]:
    """Load a snapshot file.

    Accepts either a bare state snapshot or a worker payload of the form
    ``{"state_snapshot": {...}, "well_id": "..."}``.

    Returns:
        (state snapshot dict, well id or None)
    """
    with open(snapshot_file) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("snapshot file must contain a JSON object")

    for key in ("state_snapshot", "stateSnapshot"):
        if isinstance(data.get(key), dict):
            return data[key], data.get("well_id") or data.get("wellId")
    return data, None


def format_summary(summary: TopologySummary, edge_rows: list[EdgeRow] | None = None) -> str:
    """Format topology summary for human-readable output."""
    lines = []
    lines.append("=" * 60)
    lines.append("TOPOLOGY SUMMARY")
    lines.append("=" * 60)
    lines.append("")

    lines.append(f"Well ID:      {summary.well_id or '-'}")
    lines.append(f"Request ID:   {summary.request_id if summary.request_id is not None else '-'}")
    lines.append(f"Nodes:        {summary.node_count}")
    lines.append(f"Edges:        {summary.edge_count}")
    lines.append("")

    lines.append("-" * 40)
    lines.append("GRAPH")
    lines.append("-" * 40)
    for kind, count in summary.nodes_by_kind.items():
        lines.append(f"  • {kind}: {count} nodes")
    for kind, count in summary.edges_by_kind.items():
        lines.append(f"  • {kind}: {count} edges")
    lines.append("")

    lines.append("-" * 40)
    lines.append("SOURCES")
    lines.append("-" * 40)
    lines.append(f"  Policy:            {summary.source_policy_mode}")
    lines.append(f"  Source entities:   {summary.source_count}")
    lines.append(f"  Active flow nodes: {summary.active_flow_node_count}")
    lines.append("")

    lines.append("-" * 40)
    lines.append("FAILURE PATH")
    lines.append("-" * 40)
    if summary.surface_reachable:
        lines.append(f"  Minimum failures to surface: {summary.min_failure_cost_to_surface}")
        lines.append(f"  Path edges:                  {summary.min_path_edge_count}")
        lines.append(f"  Single points of failure:    {summary.spof_count}")
    else:
        lines.append("  (surface not reachable from any source)")
    lines.append(f"  Envelope: {summary.independence_heuristic}")
    for element in summary.barrier_elements:
        routes = []
        if element.on_primary:
            routes.append("primary")
        if element.on_secondary:
            routes.append("secondary")
        types = ", ".join(element.equipment_types) or "unknown"
        lines.append(f"  • {element.element_id} [{types}] {'/'.join(routes) or 'off-path'}")
    lines.append("")

    if edge_rows is not None:
        lines.append("-" * 40)
        lines.append(f"EDGES ({len(edge_rows)})")
        lines.append("-" * 40)
        for row in edge_rows:
            flags = []
            if row.is_on_min_path:
                flags.append("min-path")
            if row.is_spof:
                flags.append("SPOF")
            flag_str = f" [{', '.join(flags)}]" if flags else ""
            cost = "-" if row.cost is None else row.cost
            lines.append(f"  {row.from_node_id} → {row.to_node_id} ({row.kind}, cost {cost}){flag_str}")
            if row.reason_summary:
                lines.append(f"    {row.reason_summary}")
        lines.append("")

    if summary.warnings_by_code:
        lines.append("-" * 40)
        lines.append("WARNINGS")
        lines.append("-" * 40)
        for category, count in summary.warnings_by_category.items():
            lines.append(f"  {category}: {count}")
        for code, count in summary.warnings_by_code.items():
            lines.append(f"    • {code} ({count}x)")
        lines.append("")
    else:
        lines.append("-" * 40)
        lines.append("✓ No warnings")
        lines.append("-" * 40)
        lines.append("")

    return "\n".join(lines)


def summary_to_dict(summary: TopologySummary, edge_rows: list[EdgeRow] | None = None) -> dict:
    """Convert TopologySummary to a JSON-serializable dict."""
    d = asdict(summary)
    d["surface_reachable"] = summary.surface_reachable
    if edge_rows is not None:
        d["edges"] = [asdict(row) for row in edge_rows]
    return d


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Build the well topology for a snapshot and output summary statistics."
    )
    parser.add_argument(
        "snapshot_file",
        type=Path,
        help="path to the JSON state snapshot",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="output summary as JSON instead of human-readable format",
    )
    parser.add_argument(
        "--scope",
        choices=[scope.value for scope in InspectorScope if scope != InspectorScope.selected_barrier],
        default=None,
        help="also list the edges visible under this inspector scope",
    )
    parser.add_argument(
        "--well-id",
        default=None,
        help="well id to stamp on the result (overrides the file's)",
    )

    args = parser.parse_args(argv)
    configure_logging()

    if not args.snapshot_file.exists():
        print(f"Error: snapshot file not found: {args.snapshot_file}", file=sys.stderr)
        sys.exit(1)

    try:
        snapshot, well_id = load_snapshot(args.snapshot_file)
        result = build_topology_model(snapshot, well_id=args.well_id or well_id)
    except ValueError as e:
        print(f"Error: could not build topology: {e}", file=sys.stderr)
        sys.exit(1)

    summary = summarize_topology(result)
    edge_rows = create_edge_rows(result, args.scope) if args.scope else None

    if args.json:
        print(json.dumps(summary_to_dict(summary, edge_rows), indent=2))
    else:
        print(format_summary(summary, edge_rows))


if __name__ == "__main__":
    main()
