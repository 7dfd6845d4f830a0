"""
WallCostingEngine — prices wall material selections.

Covers:
  - Per-role system cost (bricks + optional plastering surcharge)
  - Budget-violation flags against fixed per-tier budgets
  - Priced cost summary (bricks, cement bags, sand in the sand's own unit)

All monetary values are in the catalog currency (INR in production data).
"""
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional

from app.models.wall_schema import CalculationInputs, Material
from app.services.composition_resolver import CompositionResolution
from app.services.material_selector import BRICK_ROLES, MaterialSelection
from app.services.quantity_engine import (
    CalculationResult,
    brick_quantity,
    layers_for,
    wall_areas,
)
from app.services.wall_constants import (
    BUDGET_DIFFERENCE_SCALE,
    BUDGET_VIOLATION_MULTIPLIER,
    CFT_PER_M3,
    DEFAULT_FINISHING_RATE,
    FALLBACK_TIER_BUDGET,
    FINISHING_RATES,
    MORTAR_CEMENT_PARTS,
    MORTAR_SAND_PARTS,
    SAND_DENSITY_KG_M3,
    TIER_BUDGETS,
)
from app.services.wall_units import round_half_up


@dataclass(frozen=True)
class BudgetViolation:
    violated: bool = False
    difference: int = 0


@dataclass(frozen=True)
class CostSummary:
    load_bearing_cost: int = 0
    partition_cost: int = 0
    cement_cost: int = 0
    sand_cost: int = 0
    total_cost: int = 0
    sand_qty: float = 0.0
    sand_unit: str = "cft"
    mortar_mix: str = f"{MORTAR_CEMENT_PARTS}:{MORTAR_SAND_PARTS}"
    layers: Dict[str, int] = field(default_factory=dict)
    material_names: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def convert_sand_kg(sand_kg: float, unit: Optional[str]) -> tuple:
    """Express a sand mass in the sand material's selling unit → (qty, unit label)."""
    label = (unit or "cft").lower()
    if "ton" in label:
        return sand_kg / 1000.0, "Ton"
    if "kg" in label:
        return float(sand_kg), "kg"
    # cft, "cubic feet" and anything unrecognised
    return sand_kg / SAND_DENSITY_KG_M3 * CFT_PER_M3, "cft"


class WallCostingEngine:
    """Prices wall systems and checks selections against tier budgets."""

    def __init__(
        self,
        tier_budgets: Optional[Dict[str, Dict[str, float]]] = None,
        finishing_rates: Optional[Dict[str, float]] = None,
    ) -> None:
        self.tier_budgets: Dict[str, Dict[str, float]] = tier_budgets or TIER_BUDGETS
        self.finishing_rates: Dict[str, float] = finishing_rates or FINISHING_RATES

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def tier_budget(self, tier: str, role: str) -> float:
        """Nominal per-unit budget for a brick role; unknown tiers use Economy-like defaults."""
        return self.tier_budgets.get(tier, FALLBACK_TIER_BUDGET).get(role, FALLBACK_TIER_BUDGET[role])

    def budget_violation(self, material: Optional[Material], tier: str, role: str) -> BudgetViolation:
        """
        Compare the selected material's unit price (not its system cost)
        against 2 × the tier budget for the role.
        """
        if material is None:
            return BudgetViolation()
        budget = self.tier_budget(tier, role)
        price = material.price_per_unit
        return BudgetViolation(
            violated=price > budget * BUDGET_VIOLATION_MULTIPLIER,
            difference=round_half_up((price - budget) * BUDGET_DIFFERENCE_SCALE),
        )

    def budget_violations(self, selection: MaterialSelection, tier: str) -> Dict[str, BudgetViolation]:
        return {role: self.budget_violation(selection.get(role), tier, role) for role in BRICK_ROLES}

    # ------------------------------------------------------------------
    # System cost
    # ------------------------------------------------------------------

    def finishing_rate(self, material: Material) -> float:
        return self.finishing_rates.get(material.finish_roughness or "", DEFAULT_FINISHING_RATE)

    def evaluate(
        self,
        material: Optional[Material],
        face_area_sqft: float,
        role: str,
        wall_thickness_in: float,
        partition_thickness_in: float,
        joint_in: float,
        finish_preference: Optional[str] = None,
    ) -> int:
        """
        System cost for one wall role.

        cost = unit_price × brick_qty
             + finishing_rate × face_area   (Plastered finish, plaster-eligible material)
        """
        if material is None:
            return 0
        target = wall_thickness_in if role == "loadBearing" else partition_thickness_in
        qty = brick_quantity(material, face_area_sqft, target, joint_in)
        material_cost = material.price_per_unit * qty

        finishing_cost = 0.0
        plaster_eligible = material.requires_plastering is None or material.requires_plastering is True
        if finish_preference == "Plastered" and plaster_eligible and face_area_sqft > 0:
            finishing_cost = self.finishing_rate(material) * face_area_sqft

        return round_half_up(material_cost + finishing_cost)

    def system_costs(
        self,
        inputs: CalculationInputs,
        selection: MaterialSelection,
        composition: CompositionResolution,
        finish_preference: Optional[str] = None,
    ) -> Dict[str, int]:
        if inputs.height <= 0 or inputs.wall_thickness <= 0:
            return {role: 0 for role in BRICK_ROLES}
        areas = wall_areas(inputs, composition.main_ratio, composition.partition_ratio)
        face_areas = {"loadBearing": areas.load_bearing_sqft, "partition": areas.partition_sqft}
        return {
            role: self.evaluate(
                selection.get(role),
                face_areas[role],
                role,
                inputs.wall_thickness,
                inputs.partition_wall_thickness,
                inputs.joint_thickness,
                finish_preference,
            )
            for role in BRICK_ROLES
        }

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def build_cost_summary(
        self,
        inputs: CalculationInputs,
        selection: MaterialSelection,
        quantities: CalculationResult,
    ) -> CostSummary:
        """Price the computed quantities with the selected materials."""
        def price(material: Optional[Material]) -> float:
            return material.price_per_unit if material is not None else 0.0

        lb_cost = round_half_up(price(selection.load_bearing) * quantities.load_bearing_qty)
        pb_cost = round_half_up(price(selection.partition) * quantities.partition_qty)
        cement_cost = round_half_up(price(selection.cement) * quantities.cement_qty)

        sand_unit = selection.sand.unit if selection.sand is not None else None
        sand_qty, sand_label = convert_sand_kg(quantities.sand_qty, sand_unit)
        sand_cost = round_half_up(sand_qty * price(selection.sand))

        layers: Dict[str, int] = {}
        if selection.load_bearing is not None and inputs.wall_thickness > 0:
            layers["loadBearing"] = layers_for(selection.load_bearing, inputs.wall_thickness)
        if selection.partition is not None and inputs.partition_wall_thickness > 0:
            layers["partition"] = layers_for(selection.partition, inputs.partition_wall_thickness)

        names: Dict[str, str] = {
            role: (selection.get(role).name if selection.get(role) is not None else "Not Selected")
            for role in ("loadBearing", "partition", "cement", "sand")
        }

        return CostSummary(
            load_bearing_cost=lb_cost,
            partition_cost=pb_cost,
            cement_cost=cement_cost,
            sand_cost=sand_cost,
            total_cost=lb_cost + pb_cost + cement_cost + sand_cost,
            sand_qty=round(sand_qty, 2),
            sand_unit=sand_label,
            layers=layers,
            material_names=names,
        )
