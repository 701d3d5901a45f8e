"""Shared fixtures for wellgraph tests."""

import json
from pathlib import Path

import pytest

from wellgraph.topology.topology_core import build_topology_model

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


def layer_stack(*annuli: dict, bore: bool = True) -> list[dict]:
    """Radial stack with an optional bore and the given annulus layers."""
    stack = []
    if bore:
        stack.append({"role": "core", "material": "wellbore", "innerRadius": 0, "outerRadius": 2})
    stack.extend(annuli)
    return stack


def annulus(slot_index: int, material: str = "fluid", is_formation: bool = False, row_id: str | None = None) -> dict:
    inner = 2.5 + slot_index * 2
    layer = {
        "role": "annulus",
        "material": material,
        "innerRadius": inner,
        "outerRadius": inner + 1.5,
        "slotIndex": slot_index,
        "isFormation": is_formation,
        "source": {},
    }
    if row_id:
        layer["source"]["rowId"] = row_id
    return layer


def snapshot_with_intervals(*intervals: tuple[float, float, list[dict]], **sections) -> dict:
    """Snapshot whose physics section holds the given (top, bottom, stack) intervals."""
    snapshot = {
        "physics": {
            "intervals": [
                {"top": top, "bottom": bottom, "stack": stack} for top, bottom, stack in intervals
            ]
        }
    }
    snapshot.update(sections)
    return snapshot


@pytest.fixture
def open_hole_snapshot() -> dict:
    return load_fixture("open_hole_perforation.json")


@pytest.fixture
def cemented_snapshot() -> dict:
    return load_fixture("cemented_annulus.json")


@pytest.fixture
def dual_barrier_snapshot() -> dict:
    return load_fixture("dual_barrier_completion.json")


@pytest.fixture
def explicit_snapshot() -> dict:
    return load_fixture("explicit_scenario_sources.json")


@pytest.fixture
def dual_barrier_result(dual_barrier_snapshot):
    return build_topology_model(dual_barrier_snapshot, request_id=7, well_id="well-1")


@pytest.fixture
def cemented_result(cemented_snapshot):
    return build_topology_model(cemented_snapshot, request_id=3, well_id="well-2")
