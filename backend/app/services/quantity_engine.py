"""
quantity_engine.py — brick and mortar quantities for masonry walls.

Geometry:
  running length (ft) = Σ 2 × (length + width) over rooms
                        (or max(200, 4 × √area) without rooms)
  net wall area (sqft) = running length × height × (1 − opening% / 100)
  role face area       = net area × role ratio

Bricks (per role):
  layers = max(1, round(target thickness / brick width))
  qty    = ⌈ face area / ((L + j)(H + j) in ft²) × layers × 1.05 ⌉

Mortar (per role, 1:6 cement:sand by volume):
  void fraction = (V_unit − V_brick) / V_unit
  dry m³        = face area × thickness_ft × layers × void × 1.33 × 1.15 / 35.3147
  cement bags   = ⌈ dry m³ / 7 × 28.8 ⌉
  sand kg       = ⌈ dry m³ × 6/7 × 1600 ⌉

Every function is total: bad or missing inputs produce zero, never a
negative number, NaN or an exception.
"""
import math
from dataclasses import asdict, dataclass
from typing import Optional, Sequence, Tuple

from app.models.wall_schema import CalculationInputs, Material, Room
from app.services.composition_resolver import CompositionResolution
from app.services.wall_constants import (
    BRICK_BREAKAGE_FACTOR,
    CEMENT_BAGS_PER_M3,
    CFT_PER_M3,
    DEFAULT_JOINT_IN,
    DRY_VOL_MULTIPLIER,
    FALLBACK_TOTAL_AREA_SQFT,
    IN_TO_FT,
    MIN_RUNNING_LENGTH_FT,
    MORTAR_CEMENT_PARTS,
    MORTAR_SAND_PARTS,
    MORTAR_WASTAGE_FACTOR,
    SAND_DENSITY_KG_M3,
)
from app.services.wall_units import brick_dimensions, round_half_up


@dataclass(frozen=True)
class CalculationResult:
    load_bearing_qty: int = 0
    partition_qty: int = 0
    cement_qty: int = 0     # 50 kg bags
    sand_qty: int = 0       # kg

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WallAreas:
    running_length_ft: float
    net_area_sqft: float
    load_bearing_sqft: float
    partition_sqft: float


def running_length_ft(rooms: Sequence[Room], total_area: float) -> float:
    """Sum of room perimeters; internal shared walls are not subtracted."""
    if rooms:
        return sum(2.0 * (r.length + r.width) for r in rooms)
    area = total_area if total_area > 0 else FALLBACK_TOTAL_AREA_SQFT
    return max(MIN_RUNNING_LENGTH_FT, 4.0 * math.sqrt(area))


def wall_areas(inputs: CalculationInputs, main_ratio: float, partition_ratio: float) -> WallAreas:
    running = running_length_ft(inputs.rooms, inputs.total_area)
    height = max(inputs.height, 0.0)
    net = running * height * (1.0 - inputs.opening_deduction / 100.0)
    return WallAreas(
        running_length_ft=running,
        net_area_sqft=net,
        load_bearing_sqft=net * main_ratio,
        partition_sqft=net * partition_ratio,
    )


def layers_for(material: Material, target_thickness_in: float) -> int:
    """Number of brick widths needed to reach the target wall thickness."""
    _, width, _ = brick_dimensions(material.dimensions)
    return max(1, round_half_up(target_thickness_in / width))


def brick_quantity(
    material: Optional[Material],
    face_area_sqft: float,
    thickness_in: float,
    joint_in: float,
) -> int:
    if material is None or face_area_sqft <= 0 or thickness_in <= 0:
        return 0
    length, _, height = brick_dimensions(material.dimensions)
    joint = max(joint_in, 0.0)
    layers = layers_for(material, thickness_in)
    unit_area_sqft = (length + joint) * IN_TO_FT * (height + joint) * IN_TO_FT
    return math.ceil(face_area_sqft / unit_area_sqft * layers * BRICK_BREAKAGE_FACTOR)


def mortar_volume_m3(
    material: Optional[Material],
    face_area_sqft: float,
    thickness_in: float,
    joint_in: float,
) -> float:
    """Dry mortar volume (m³) including wastage for one wall role."""
    if material is None or face_area_sqft <= 0 or thickness_in <= 0:
        return 0.0
    length, width, height = brick_dimensions(material.dimensions)
    joint = joint_in if joint_in > 0 else DEFAULT_JOINT_IN
    layers = layers_for(material, thickness_in)

    brick_vol = (length * IN_TO_FT) * (width * IN_TO_FT) * (height * IN_TO_FT)
    unit_vol = (
        ((length + joint) * IN_TO_FT)
        * ((width + joint) * IN_TO_FT)
        * ((height + joint) * IN_TO_FT)
    )
    void_fraction = (unit_vol - brick_vol) / unit_vol
    wall_vol_ft3 = face_area_sqft * (thickness_in * IN_TO_FT) * layers
    return wall_vol_ft3 * void_fraction * DRY_VOL_MULTIPLIER * MORTAR_WASTAGE_FACTOR / CFT_PER_M3


def mortar_quantity(
    material: Optional[Material],
    face_area_sqft: float,
    thickness_in: float,
    joint_in: float,
) -> Tuple[int, int]:
    """(cement bags, sand kg) for one wall role."""
    volume = mortar_volume_m3(material, face_area_sqft, thickness_in, joint_in)
    if volume <= 0:
        return 0, 0
    total_parts = MORTAR_CEMENT_PARTS + MORTAR_SAND_PARTS
    cement_bags = math.ceil(volume * MORTAR_CEMENT_PARTS / total_parts * CEMENT_BAGS_PER_M3)
    sand_kg = math.ceil(volume * MORTAR_SAND_PARTS / total_parts * SAND_DENSITY_KG_M3)
    return cement_bags, sand_kg


def compute_quantities(
    inputs: CalculationInputs,
    load_bearing: Optional[Material],
    partition: Optional[Material],
    composition: CompositionResolution,
) -> CalculationResult:
    """Brick counts per role and summed mortar for the whole building."""
    if inputs.height <= 0 or inputs.wall_thickness <= 0:
        return CalculationResult()
    if load_bearing is None and partition is None:
        return CalculationResult()

    areas = wall_areas(inputs, composition.main_ratio, composition.partition_ratio)
    joint = inputs.joint_thickness

    lb_cement, lb_sand = mortar_quantity(load_bearing, areas.load_bearing_sqft, inputs.wall_thickness, joint)
    pb_cement, pb_sand = mortar_quantity(
        partition, areas.partition_sqft, inputs.partition_wall_thickness, joint
    )

    return CalculationResult(
        load_bearing_qty=brick_quantity(load_bearing, areas.load_bearing_sqft, inputs.wall_thickness, joint),
        partition_qty=brick_quantity(partition, areas.partition_sqft, inputs.partition_wall_thickness, joint),
        cement_qty=lb_cement + pb_cement,
        sand_qty=lb_sand + pb_sand,
    )
