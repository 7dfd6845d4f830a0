"""
test_quantity_engine.py — brick and mortar quantities.

Tests cover:
  - Running length from rooms and the no-room heuristic
  - Layer count and the 9x4x3 / 100 sqft reference quantity
  - Zero results for non-positive height / thickness or missing materials
  - Monotonicity in area and (near-)linearity of mortar in area
  - compute_quantities end-to-end with a resolved composition
"""

import math
import pytest

from conftest import make_material

from app.models.wall_schema import CalculationInputs
from app.services.composition_resolver import CompositionResolution
from app.services.quantity_engine import (
    CalculationResult,
    brick_quantity,
    compute_quantities,
    layers_for,
    mortar_quantity,
    mortar_volume_m3,
    running_length_ft,
)

_BREAKAGE = 1.05
_JOINT_IN = 0.375
_HALF_SPLIT = CompositionResolution(main_ratio=0.5, partition_ratio=0.5)


@pytest.fixture
def hollow_block():
    return make_material(id="hb", category="Wall", subCategory="Partition", dimensions="16x4x8", pricePerUnit=12)


class TestRunningLength:

    def test_sum_of_room_perimeters(self, rooms):
        assert running_length_ft(rooms, 5000) == 80.0

    def test_minimum_without_rooms(self):
        assert running_length_ft([], 1000) == 200.0

    def test_sqrt_heuristic_for_large_area(self):
        assert math.isclose(running_length_ft([], 10_000), 400.0)

    def test_non_positive_area_uses_fallback(self):
        assert running_length_ft([], 0) == 200.0
        assert running_length_ft([], -50) == 200.0


class TestBrickQuantity:

    def test_reference_quantity(self, red_brick):
        """
        9x4x3 brick, 0.375" joint, 9" wall, 100 sqft:
            layers = round(9 / 4) = 2
            unit   = 9.375 * 3.375 / 144 = 0.2197 sqft
            qty    = ceil(100 / 0.2197 * 2 * 1.05) = 956
        """
        assert layers_for(red_brick, 9) == 2
        assert brick_quantity(red_brick, 100, 9, _JOINT_IN) == 956

    def test_single_layer_minimum(self, red_brick):
        assert layers_for(red_brick, 1) == 1

    @pytest.mark.parametrize("area,thickness", [(0, 9), (-10, 9), (100, 0), (100, -4.5)])
    def test_zero_for_non_positive_inputs(self, red_brick, area, thickness):
        assert brick_quantity(red_brick, area, thickness, _JOINT_IN) == 0

    def test_missing_material(self):
        assert brick_quantity(None, 100, 9, _JOINT_IN) == 0

    def test_malformed_dimensions_use_default_brick(self):
        odd = make_material(id="odd", dimensions="nine by four")
        assert brick_quantity(odd, 100, 9, _JOINT_IN) == 956

    def test_monotone_in_area(self, red_brick):
        quantities = [brick_quantity(red_brick, area, 9, _JOINT_IN) for area in (10, 50, 100, 250, 1000)]
        assert quantities == sorted(quantities)

    def test_zero_joint_needs_more_bricks(self, red_brick):
        assert brick_quantity(red_brick, 100, 9, 0) > brick_quantity(red_brick, 100, 9, _JOINT_IN)


class TestMortar:

    def test_volume_linear_in_area(self, red_brick):
        v100 = mortar_volume_m3(red_brick, 100, 9, _JOINT_IN)
        v300 = mortar_volume_m3(red_brick, 300, 9, _JOINT_IN)
        assert v100 > 0
        assert math.isclose(v300, 3 * v100, rel_tol=1e-9)

    def test_quantities_scale_with_area(self, red_brick):
        cement_1, sand_1 = mortar_quantity(red_brick, 100, 9, _JOINT_IN)
        cement_10, sand_10 = mortar_quantity(red_brick, 1000, 9, _JOINT_IN)
        # Ceiling per call: at most one unit of drift per call
        assert abs(cement_10 - 10 * cement_1) <= 10
        assert abs(sand_10 - 10 * sand_1) <= 10

    def test_zero_joint_defaults_for_mortar(self, red_brick):
        assert mortar_volume_m3(red_brick, 100, 9, 0) == mortar_volume_m3(red_brick, 100, 9, _JOINT_IN)

    def test_zero_area_gives_no_mortar(self, red_brick):
        assert mortar_quantity(red_brick, 0, 9, _JOINT_IN) == (0, 0)


class TestComputeQuantities:

    def _inputs(self, rooms, **overrides):
        fields = dict(rooms=rooms, height=10, wall_thickness=9, joint_thickness=_JOINT_IN)
        fields.update(overrides)
        return CalculationInputs(**fields)

    def test_end_to_end(self, rooms, red_brick, hollow_block):
        """80 ft running length x 10 ft = 800 sqft, half load-bearing."""
        result = compute_quantities(self._inputs(rooms), red_brick, hollow_block, _HALF_SPLIT)
        assert result.load_bearing_qty == brick_quantity(red_brick, 400, 9, _JOINT_IN)
        assert result.partition_qty == brick_quantity(hollow_block, 400, 4.5, _JOINT_IN)
        lb_cement, lb_sand = mortar_quantity(red_brick, 400, 9, _JOINT_IN)
        pt_cement, pt_sand = mortar_quantity(hollow_block, 400, 4.5, _JOINT_IN)
        assert result.cement_qty == lb_cement + pt_cement
        assert result.sand_qty == lb_sand + pt_sand

    def test_openings_reduce_quantity(self, rooms, red_brick):
        full = compute_quantities(self._inputs(rooms), red_brick, None, _HALF_SPLIT)
        holed = compute_quantities(self._inputs(rooms, opening_deduction=20), red_brick, None, _HALF_SPLIT)
        assert holed.load_bearing_qty < full.load_bearing_qty
        assert holed.partition_qty == 0

    @pytest.mark.parametrize("overrides", [{"height": 0}, {"height": -3}, {"wall_thickness": 0}])
    def test_zero_for_non_positive_dimensions(self, rooms, red_brick, overrides):
        result = compute_quantities(self._inputs(rooms, **overrides), red_brick, red_brick, _HALF_SPLIT)
        assert result == CalculationResult()

    def test_zero_without_materials(self, rooms):
        assert compute_quantities(self._inputs(rooms), None, None, _HALF_SPLIT) == CalculationResult()

    def test_results_are_non_negative_ints(self, rooms, red_brick):
        result = compute_quantities(self._inputs(rooms), red_brick, red_brick, _HALF_SPLIT)
        for value in result.to_dict().values():
            assert isinstance(value, int)
            assert value >= 0
