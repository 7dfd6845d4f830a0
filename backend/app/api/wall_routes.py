"""Wall routes — estimate, defaults, role candidates, composition detection, perspectives."""
import logging
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from app.models.wall_schema import (
    CalculationInputs,
    CamelModel,
    FinishType,
    Material,
    Room,
    WallComposition,
)
from app.services import composition_resolver
from app.services.material_selector import (
    BRICK_ROLES,
    ROLES,
    MaterialSelection,
    candidates_for,
    filter_by_finish,
    select_defaults,
)
from app.services.wall_advisor import LLMWallAdvisor
from app.services.wall_estimator import WallEstimator, effective_inputs

router = APIRouter(prefix="/api/walls", tags=["Walls"])
logger = logging.getLogger("archlens-api")


def get_wall_advisor() -> LLMWallAdvisor:
    return LLMWallAdvisor()


# ─── Pydantic schemas ────────────────────────────────────────────────────────

class EstimateRequest(CalculationInputs):
    """
    Calculation inputs plus the catalog snapshot.

    ``wall_thickness`` and ``opening_deduction`` are seeded from the resolved
    composition unless sent explicitly. ``selection`` maps a role
    (loadBearing | partition | cement | sand) to a catalog id.
    """
    materials: List[Material] = Field(default_factory=list)
    composition: Optional[WallComposition] = None
    selection: Dict[str, str] = Field(default_factory=dict)
    finish_preference: Optional[FinishType] = None


class DefaultsRequest(CamelModel):
    materials: List[Material] = Field(default_factory=list)
    tier: str = "Standard"


class CandidatesRequest(CamelModel):
    materials: List[Material] = Field(default_factory=list)
    role: str = "loadBearing"
    finish_preference: Optional[FinishType] = None


class CompositionRequest(CamelModel):
    rooms: List[Room] = Field(default_factory=list)
    total_area: float = 0.0
    composition: Optional[WallComposition] = None


class PerspectivesRequest(CamelModel):
    tier: str = "Standard"
    total_area: float = 0.0
    materials: List[Material] = Field(default_factory=list)


def _selection_ids(selection: MaterialSelection) -> Dict[str, Optional[str]]:
    ids = {}
    for role in ROLES:
        material = selection.get(role)
        ids[role] = material.id if material is not None else None
    return ids


# ─── Routes ──────────────────────────────────────────────────────────────────

@router.post("/estimate")
async def estimate_walls(body: EstimateRequest):
    """Resolve composition, select materials and return quantities, costs and budget flags."""
    estimator = WallEstimator(
        total_area=body.total_area,
        rooms=body.rooms,
        tier=body.tier,
        height=body.height,
        joint_thickness=body.joint_thickness,
    )
    await estimator.resolve_composition(body.composition)

    overrides = {
        name: getattr(body, name)
        for name in ("wall_thickness", "opening_deduction")
        if name in body.model_fields_set
    }
    if overrides:
        estimator.set_dimensions(**overrides)

    await estimator.on_catalog_update(body.materials)

    by_id = {m.id: m for m in body.materials}
    for role, material_id in body.selection.items():
        if role not in ROLES:
            raise HTTPException(status_code=422, detail=f"Unknown wall role: {role}")
        material = by_id.get(material_id)
        if material is None:
            raise HTTPException(status_code=422, detail=f"Material {material_id} not in catalog")
        estimator.select_material(role, material)

    if "partition_wall_thickness" in body.model_fields_set:
        estimator.set_partition_wall_thickness(body.partition_wall_thickness)
    estimator.set_finish_preference(body.finish_preference)

    result = estimator.estimate

    logger.info(
        f"Wall estimate: {body.tier}, {len(body.rooms)} rooms, total {result.summary.total_cost}",
        extra={"tier": body.tier, "composition_source": result.composition.source},
    )
    return {
        **result.to_dict(),
        "inputs": effective_inputs(estimator.state).model_dump(by_alias=True, exclude={"rooms"}),
        "selection": _selection_ids(estimator.selection),
        "provenance": estimator.provenance,
        "notifications": list(estimator.state.notifications),
    }


@router.post("/defaults")
async def default_selection(body: DefaultsRequest):
    selection = select_defaults(body.materials, body.tier)
    return {
        "tier": body.tier,
        "selection": _selection_ids(selection),
        "partitionWallThickness": selection.partition_wall_thickness,
    }


@router.post("/composition")
async def detect_composition(
    body: CompositionRequest,
    advisor: LLMWallAdvisor = Depends(get_wall_advisor),
):
    """Supplied composition wins; otherwise the AI detector, then room metadata."""
    resolution = await composition_resolver.resolve(
        body.composition, body.rooms, body.total_area, detector=advisor,
    )
    if resolution.error:
        raise HTTPException(status_code=502, detail=resolution.error)
    return asdict(resolution)


@router.post("/perspectives")
async def wall_perspectives(
    body: PerspectivesRequest,
    advisor: LLMWallAdvisor = Depends(get_wall_advisor),
):
    if not body.materials:
        raise HTTPException(status_code=422, detail="Material catalog is empty")
    try:
        perspectives = await advisor.generate_perspectives(body.tier, body.total_area, body.materials)
    except Exception as e:
        logger.error(f"Wall perspective generation failed: {e}")
        raise HTTPException(status_code=502, detail=f"Perspective generation failed: {e}")
    return {"perspectives": [p.model_dump(by_alias=True) for p in perspectives]}


@router.post("/candidates")
async def role_candidates(body: CandidatesRequest):
    """Catalog materials eligible for one role; brick roles honour the finish preference."""
    if body.role not in ROLES:
        raise HTTPException(status_code=422, detail=f"Unknown wall role: {body.role}")
    options = candidates_for(body.materials, body.role)
    if body.role in BRICK_ROLES:
        options = filter_by_finish(options, body.finish_preference)
    return {
        "role": body.role,
        "materials": [m.model_dump(by_alias=True) for m in sorted(options, key=lambda m: m.price_per_unit)],
    }
