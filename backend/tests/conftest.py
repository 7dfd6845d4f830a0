"""
conftest.py — Shared pytest fixtures for the wall estimator test suite.

No network or LLM fixtures are defined here. Async collaborators (composition
detector, perspective generator) are replaced by in-memory stubs so every
test runs offline and deterministically.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``app.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any app imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Stub collaborators
# ---------------------------------------------------------------------------

class StubDetector:
    """Returns a fixed composition, or raises ``error`` when one is given."""

    def __init__(self, composition=None, error=None):
        self.composition = composition
        self.error = error
        self.calls = 0

    async def detect(self, rooms, total_area):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.composition


class StubPerspectiveGenerator:
    def __init__(self, perspectives=None, error=None):
        self.perspectives = perspectives or []
        self.error = error
        self.calls = 0

    async def generate_perspectives(self, tier, total_area, materials):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.perspectives)


def make_material(**fields):
    from app.models.wall_schema import Material
    return Material.model_validate(fields)


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def red_brick():
    """Standard 9x4x3 clay brick, load-bearing, price 10."""
    return make_material(
        id="lb-red", name="Red Clay Brick", category="Wall", subCategory="Load Bearing",
        type="Brick", dimensions="9 x 4 x 3", pricePerUnit=10, unit="nos",
    )


@pytest.fixture
def catalog():
    """
    A small but complete catalog:
      load-bearing: 5, 10, 15
      partition:    AAC 3" block (7), hollow block (12)
      cement:       380, 420 per bag
      sand:         river sand per ton, M-sand per cft
    """
    return [
        make_material(id="lb-5", name="Fly Ash Brick", category="Wall", subCategory="LoadBearing",
                      type="Brick", dimensions="9x4x3", pricePerUnit="5", unit="nos"),
        make_material(id="lb-10", name="Red Clay Brick", category="Wall", subCategory="Load Bearing",
                      type="Brick", dimensions="9x4x3", pricePerUnit=10, unit="nos"),
        make_material(id="lb-15", name="Wire-cut Facing Brick", category="Wall", subCategory="Load Bearing",
                      type="Brick", dimensions="9x4x3", pricePerUnit=15, unit="nos",
                      requiresPlastering=False, finishRoughness="low"),
        make_material(id="pt-aac", name="AAC Block 3 inch", category="Wall", subCategory="Partition Wall",
                      type="Block", dimensions="24x3x8", pricePerUnit=7, unit="nos",
                      finishRoughness="medium"),
        make_material(id="pt-hollow", name="Hollow Concrete Block", category="Wall",
                      subCategory="Non-Load Bearing", type="Block", dimensions="16x4x8",
                      pricePerUnit=12, unit="nos", finishRoughness="high"),
        make_material(id="cem-380", name="OPC 43 Cement", category="Cement", type="Cement",
                      pricePerUnit=380, unit="bag"),
        make_material(id="cem-420", name="OPC 53 Cement", category="Cement", type="Cement",
                      pricePerUnit=420, unit="bag"),
        make_material(id="sand-ton", name="River Sand", category="Sand", type="Sand",
                      pricePerUnit=1200, unit="Ton"),
        make_material(id="sand-cft", name="M-Sand", category="Sand", type="Sand",
                      pricePerUnit=45, unit="cft"),
    ]


@pytest.fixture
def rooms():
    """Two rooms with wall metadata; running length = 2*(12+10) + 2*(10+8) = 80 ft."""
    from app.models.wall_schema import Room
    return [
        Room.model_validate({
            "name": "Bedroom", "roomType": "bedroom", "length": 12, "width": 10,
            "openingPercentage": 20,
            "wallMetadata": {"mainWallRatio": 0.6, "partitionWallRatio": 0.4},
        }),
        Room.model_validate({
            "name": "Kitchen", "roomType": "kitchen", "length": "10", "width": "8",
            "openingPercentage": 15,
            "wallMetadata": {"mainWallRatio": 0.7, "partitionWallRatio": 0.3},
        }),
    ]


@pytest.fixture
def perspective():
    from app.models.wall_schema import Perspective
    return Perspective.model_validate({
        "id": "B",
        "title": "Economy Aesthetic",
        "loadBearingBrickId": "lb-15",
        "partitionBrickId": "pt-aac",
        "cementId": "cem-420",
        "sandId": "sand-cft",
        "finishType": "Exposed",
        "reasoning": "AAC partitions need far less mortar.",
    })


@pytest.fixture(scope="session")
def costing_engine():
    """WallCostingEngine with default tier budgets and finishing rates."""
    from app.services.wall_costing_engine import WallCostingEngine
    return WallCostingEngine()
