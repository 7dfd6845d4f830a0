"""
WallEstimator — single owner of wall-estimation state.

All mutable state (dimensions, composition, selections, perspectives,
notifications) lives on one ``EstimatorState``. Results are never cached:
``recompute(state)`` derives quantities, costs and budget flags fresh from
the current state, and ``WallEstimator.estimate`` simply calls it.

The estimator is not thread-safe; callers serialise operations through a
single instance and must not start a second detection or perspective
request while one is pending (see ``is_detecting_composition`` and
``is_perspective_loading``).
"""
import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.wall_schema import CalculationInputs, Material, Perspective, Room, WallComposition
from app.services import composition_resolver
from app.services.composition_resolver import (
    SOURCE_UNRESOLVED,
    CompositionDetector,
    CompositionResolution,
)
from app.services.material_selector import MaterialSelection, select_defaults
from app.services.perspective_engine import (
    PerspectiveGenerator,
    SelectionDelta,
    SelectionState,
    apply_perspective,
    manual_select,
    record_defaults,
)
from app.services.quantity_engine import CalculationResult, compute_quantities
from app.services.wall_costing_engine import BudgetViolation, CostSummary, WallCostingEngine
from app.services.wall_constants import DEFAULT_HEIGHT_FT, DEFAULT_JOINT_IN, PARTITION_WALL_IN

logger = logging.getLogger("archlens-walls")


@dataclass(frozen=True)
class EstimatorState:
    inputs: CalculationInputs
    composition: CompositionResolution = field(default_factory=CompositionResolution)
    selection: SelectionState = field(default_factory=SelectionState)
    materials: Tuple[Material, ...] = ()
    perspectives: Tuple[Perspective, ...] = ()
    notifications: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WallEstimate:
    quantities: CalculationResult
    system_costs: Dict[str, int]
    budget_violations: Dict[str, BudgetViolation]
    summary: CostSummary
    composition: CompositionResolution

    def to_dict(self) -> dict:
        return asdict(self)


def effective_inputs(state: EstimatorState) -> CalculationInputs:
    """Inputs with the partition thickness chosen by the active selection."""
    return state.inputs.model_copy(
        update={"partition_wall_thickness": state.selection.selection.partition_wall_thickness}
    )


def recompute(state: EstimatorState, costing: Optional[WallCostingEngine] = None) -> WallEstimate:
    """Derive every output from current state. Pure; safe to call after any mutation."""
    costing = costing or WallCostingEngine()
    inputs = effective_inputs(state)
    selection = state.selection.selection

    quantities = compute_quantities(inputs, selection.load_bearing, selection.partition, state.composition)
    return WallEstimate(
        quantities=quantities,
        system_costs=costing.system_costs(
            inputs, selection, state.composition, state.selection.finish_preference
        ),
        budget_violations=costing.budget_violations(selection, inputs.tier),
        summary=costing.build_cost_summary(inputs, selection, quantities),
        composition=state.composition,
    )


class WallEstimator:
    """Stateful facade over the wall engines for one project."""

    def __init__(
        self,
        total_area: float = 0.0,
        rooms: Optional[Iterable[Room]] = None,
        tier: str = "Standard",
        detector: Optional[CompositionDetector] = None,
        perspective_generator: Optional[PerspectiveGenerator] = None,
        costing_engine: Optional[WallCostingEngine] = None,
        height: float = DEFAULT_HEIGHT_FT,
        joint_thickness: float = DEFAULT_JOINT_IN,
    ) -> None:
        self.detector = detector
        self.perspective_generator = perspective_generator
        self.costing = costing_engine or WallCostingEngine()
        self.is_detecting_composition = False
        self.is_perspective_loading = False

        inputs = CalculationInputs(
            total_area=total_area,
            rooms=list(rooms or []),
            tier=tier,
            height=height,
            joint_thickness=joint_thickness,
            partition_wall_thickness=PARTITION_WALL_IN,
        )
        self.state = EstimatorState(inputs=inputs)

    # ------------------------------------------------------------------
    # Derived output
    # ------------------------------------------------------------------

    @property
    def estimate(self) -> WallEstimate:
        return recompute(self.state, self.costing)

    @property
    def selection(self) -> MaterialSelection:
        return self.state.selection.selection

    @property
    def provenance(self) -> Dict[str, str]:
        return dict(self.state.selection.provenance)

    @property
    def selected_perspective_id(self) -> Optional[str]:
        return self.state.selection.selected_perspective_id

    @property
    def composition_detected(self) -> bool:
        return self.state.composition.detected

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_dimensions(self, **updates) -> None:
        """Update any of height, wall_thickness, joint_thickness, opening_deduction."""
        allowed = {"height", "wall_thickness", "joint_thickness", "opening_deduction"}
        unknown = set(updates) - allowed
        if unknown:
            raise ValueError(f"Unknown dimension fields: {sorted(unknown)}")
        merged = {**self.state.inputs.model_dump(), **updates}
        self.state = replace(self.state, inputs=CalculationInputs.model_validate(merged))

    def set_partition_wall_thickness(self, inches: float) -> None:
        selection_state = self.state.selection
        selection_state = replace(
            selection_state,
            selection=replace(selection_state.selection, partition_wall_thickness=float(inches)),
        )
        self.state = replace(self.state, selection=selection_state)

    def set_tier(self, tier: str) -> None:
        self.state = replace(self.state, inputs=self.state.inputs.model_copy(update={"tier": tier}))

    def set_finish_preference(self, finish: Optional[str]) -> None:
        self.state = replace(self.state, selection=replace(self.state.selection, finish_preference=finish))

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    async def resolve_composition(self, supplied: Optional[WallComposition] = None) -> CompositionResolution:
        """
        Resolve composition and seed wall thickness / opening deduction from it.

        A failed detection leaves the previous ratios in place and records a
        user-facing notification; calling again is the retry.
        """
        inputs = self.state.inputs
        self.is_detecting_composition = supplied is None and self.detector is not None
        try:
            resolution = await composition_resolver.resolve(
                supplied,
                inputs.rooms,
                inputs.total_area,
                detector=self.detector,
                previous=self.state.composition,
            )
        finally:
            self.is_detecting_composition = False

        if resolution.error:
            self.state = replace(
                self.state,
                composition=resolution,
                notifications=self.state.notifications + (resolution.error,),
            )
            return resolution

        updates = {}
        if resolution.source != SOURCE_UNRESOLVED:
            updates["opening_deduction"] = resolution.opening_percent
            if resolution.wall_thickness_estimate:
                updates["wall_thickness"] = round(resolution.wall_thickness_estimate, 2)
        self.state = replace(
            self.state,
            composition=resolution,
            inputs=inputs.model_copy(update=updates),
        )
        return resolution

    # ------------------------------------------------------------------
    # Catalog & selection
    # ------------------------------------------------------------------

    async def on_catalog_update(self, materials: Iterable[Material]) -> None:
        """
        Handle a (possibly repeated) catalog snapshot.

        Fills unset roles with tier defaults, then requests perspectives once
        when the catalog first becomes non-empty.
        """
        materials = tuple(materials)
        self.state = replace(self.state, materials=materials)
        if not materials:
            return

        defaults = select_defaults(materials, self.state.inputs.tier, self.selection)
        self.state = replace(self.state, selection=record_defaults(self.state.selection, defaults))

        if (
            self.perspective_generator is not None
            and not self.state.perspectives
            and not self.is_perspective_loading
        ):
            await self.load_perspectives()

    async def load_perspectives(self) -> List[Perspective]:
        """Request perspectives and apply the first one. Failures are logged, not raised."""
        if not self.state.materials or self.perspective_generator is None:
            return []
        self.is_perspective_loading = True
        try:
            perspectives = await self.perspective_generator.generate_perspectives(
                self.state.inputs.tier, self.state.inputs.total_area, list(self.state.materials)
            )
        except Exception as e:
            logger.error(f"Wall perspective generation failed: {e}", exc_info=True)
            return []
        finally:
            self.is_perspective_loading = False

        self.state = replace(self.state, perspectives=tuple(perspectives))
        if perspectives:
            self.apply_perspective(perspectives[0])
        return list(perspectives)

    def apply_perspective(self, perspective: Perspective) -> SelectionDelta:
        new_selection, delta = apply_perspective(perspective, self.state.materials, self.state.selection)
        self.state = replace(self.state, selection=new_selection)
        return delta

    def select_material(self, role: str, material: Optional[Material]) -> None:
        """Manual pick for one role."""
        self.state = replace(self.state, selection=manual_select(self.state.selection, role, material))
