"""
Perspective Engine — applies AI-generated material bundles ("perspectives")
and tracks where each active selection came from.

Provenance per role:  unset → manual (default assignment) ⇄ ai (perspective)
A manual pick resets that role to "manual" and clears the active perspective.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Protocol

from app.models.wall_schema import Material, Perspective
from app.services.material_selector import ROLE_FIELDS, ROLES, MaterialSelection
from app.services.wall_constants import AAC_PARTITION_WALL_IN
from app.services.wall_units import is_three_inch_profile

logger = logging.getLogger("archlens-walls")

PROVENANCE_UNSET = "unset"
PROVENANCE_MANUAL = "manual"
PROVENANCE_AI = "ai"

# Perspective attribute holding the material id for each role
_PERSPECTIVE_IDS: Dict[str, str] = {
    "loadBearing": "load_bearing_brick_id",
    "partition": "partition_brick_id",
    "cement": "cement_id",
    "sand": "sand_id",
}


class PerspectiveGenerator(Protocol):
    async def generate_perspectives(
        self, tier: str, total_area: float, materials: List[Material]
    ) -> List[Perspective]:
        ...


def _initial_provenance() -> Dict[str, str]:
    return {role: PROVENANCE_UNSET for role in ROLES}


@dataclass(frozen=True)
class SelectionState:
    selection: MaterialSelection = field(default_factory=MaterialSelection)
    provenance: Dict[str, str] = field(default_factory=_initial_provenance)
    selected_perspective_id: Optional[str] = None
    finish_preference: Optional[str] = None
    ai_advice: str = ""
    ai_recommendations: Dict[str, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class SelectionDelta:
    """What a perspective actually changed."""
    perspective_id: str
    changed_roles: List[str] = field(default_factory=list)
    skipped_ids: List[str] = field(default_factory=list)
    partition_wall_thickness: Optional[float] = None
    finish_preference: Optional[str] = None


def record_defaults(state: SelectionState, selection: MaterialSelection) -> SelectionState:
    """Adopt a default selection; newly filled roles become manual."""
    provenance = dict(state.provenance)
    for role in ROLES:
        if selection.get(role) is not None and provenance.get(role, PROVENANCE_UNSET) == PROVENANCE_UNSET:
            provenance[role] = PROVENANCE_MANUAL
    return replace(state, selection=selection, provenance=provenance)


def apply_perspective(
    perspective: Perspective,
    catalog: Iterable[Material],
    state: SelectionState,
) -> tuple:
    """
    Switch the active selection to a perspective's materials.

    Ids missing from the catalog snapshot are skipped silently; composition
    is not touched. Returns (new_state, SelectionDelta).
    """
    by_id = {m.id: m for m in catalog}
    updates: Dict[str, object] = {}
    provenance = dict(state.provenance)
    changed: List[str] = []
    skipped: List[str] = []
    partition_thickness = None

    for role in ROLES:
        material_id = getattr(perspective, _PERSPECTIVE_IDS[role])
        if not material_id:
            continue
        material = by_id.get(material_id)
        if material is None:
            skipped.append(material_id)
            continue
        updates[ROLE_FIELDS[role]] = material
        provenance[role] = PROVENANCE_AI
        changed.append(role)
        if role == "partition" and is_three_inch_profile(material.dimensions):
            partition_thickness = AAC_PARTITION_WALL_IN
            updates["partition_wall_thickness"] = partition_thickness

    new_state = replace(
        state,
        selection=replace(state.selection, **updates),
        provenance=provenance,
        selected_perspective_id=perspective.id,
        finish_preference=perspective.finish_type,
        ai_advice=perspective.reasoning or "",
        ai_recommendations={
            role: getattr(perspective, _PERSPECTIVE_IDS[role]) for role in ROLES
        },
    )
    if skipped:
        logger.debug(f"Perspective {perspective.id}: ids not in catalog {skipped}")
    logger.info(f"Applied perspective {perspective.id} ({', '.join(changed) or 'no changes'})")

    return new_state, SelectionDelta(
        perspective_id=perspective.id,
        changed_roles=changed,
        skipped_ids=skipped,
        partition_wall_thickness=partition_thickness,
        finish_preference=perspective.finish_type,
    )


def manual_select(state: SelectionState, role: str, material: Optional[Material]) -> SelectionState:
    """An explicit user pick: provenance for that role only becomes manual."""
    if role not in ROLE_FIELDS:
        raise ValueError(f"Unknown wall role: {role}")
    provenance = dict(state.provenance)
    provenance[role] = PROVENANCE_MANUAL
    return replace(
        state,
        selection=replace(state.selection, **{ROLE_FIELDS[role]: material}),
        provenance=provenance,
        selected_perspective_id=None,
    )
