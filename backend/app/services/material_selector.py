"""
MaterialSelector — picks a default catalog material for each wall role.

Ranking policy per tier:
  - Economy:           cheapest candidate wins
  - Standard / Luxury: most expensive candidate wins (presumed higher quality)

Economy partitions prefer a 3-inch AAC block, which also switches the
partition wall thickness to 3 inches.
"""
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional

from app.models.wall_schema import Material
from app.services.wall_constants import AAC_PARTITION_WALL_IN, PARTITION_WALL_IN
from app.services.wall_units import is_three_inch_profile

logger = logging.getLogger("archlens-walls")

ROLES = ("loadBearing", "partition", "cement", "sand")
BRICK_ROLES = ("loadBearing", "partition")

_LOAD_BEARING_SUBCATS = {"loadbearing"}
_PARTITION_SUBCATS = {"partition", "partitionwall", "nonloadbearing"}


def _normalise(label: Optional[str]) -> str:
    return "".join(ch for ch in (label or "").lower() if ch.isalnum())


def _is_wall(m: Material) -> bool:
    return _normalise(m.category) == "wall"


ROLE_FILTERS: Dict[str, Callable[[Material], bool]] = {
    "loadBearing": lambda m: _is_wall(m) and _normalise(m.sub_category) in _LOAD_BEARING_SUBCATS,
    "partition":   lambda m: _is_wall(m) and _normalise(m.sub_category) in _PARTITION_SUBCATS,
    "cement":      lambda m: _normalise(m.type) == "cement",
    "sand":        lambda m: _normalise(m.type) == "sand",
}

# Field name on MaterialSelection for each role
ROLE_FIELDS: Dict[str, str] = {
    "loadBearing": "load_bearing",
    "partition": "partition",
    "cement": "cement",
    "sand": "sand",
}


@dataclass(frozen=True)
class MaterialSelection:
    load_bearing: Optional[Material] = None
    partition: Optional[Material] = None
    cement: Optional[Material] = None
    sand: Optional[Material] = None
    partition_wall_thickness: float = PARTITION_WALL_IN

    def get(self, role: str) -> Optional[Material]:
        return getattr(self, ROLE_FIELDS[role])


def candidates_for(materials: Iterable[Material], role: str) -> List[Material]:
    predicate = ROLE_FILTERS[role]
    return [m for m in materials if predicate(m)]


def pick_by_tier(candidates: List[Material], tier: str) -> Optional[Material]:
    """Deterministic tie-break; stable sort keeps catalog order for equal prices."""
    if not candidates:
        return None
    ranked = sorted(
        candidates,
        key=lambda m: m.price_per_unit,
        reverse=(tier != "Economy"),
    )
    return ranked[0]


def _economy_aac_partition(candidates: List[Material]) -> Optional[Material]:
    aac = [
        m for m in candidates
        if is_three_inch_profile(m.dimensions) and "aac" in (m.name or "").lower()
    ]
    if not aac:
        return None
    return min(aac, key=lambda m: m.price_per_unit)


def select_defaults(
    materials: Iterable[Material],
    tier: str,
    current: Optional[MaterialSelection] = None,
) -> MaterialSelection:
    """
    Fill every unset role with the tier default.

    Roles already chosen in ``current`` are left untouched, so repeated calls
    on a live catalog feed are idempotent.
    """
    materials = list(materials)
    selection = current or MaterialSelection()
    updates = {}

    if selection.load_bearing is None:
        pick = pick_by_tier(candidates_for(materials, "loadBearing"), tier)
        if pick is not None:
            updates["load_bearing"] = pick

    if selection.partition is None:
        options = candidates_for(materials, "partition")
        pick = _economy_aac_partition(options) if tier == "Economy" else None
        if pick is not None:
            updates["partition"] = pick
            updates["partition_wall_thickness"] = AAC_PARTITION_WALL_IN
        else:
            pick = pick_by_tier(options, tier)
            if pick is not None:
                updates["partition"] = pick

    for role in ("cement", "sand"):
        field_name = ROLE_FIELDS[role]
        if getattr(selection, field_name) is None:
            pick = pick_by_tier(candidates_for(materials, role), tier)
            if pick is not None:
                updates[field_name] = pick

    if updates:
        logger.info(
            f"{tier} defaults selected: "
            + ", ".join(f"{k}={getattr(v, 'name', v)}" for k, v in updates.items())
        )
    return replace(selection, **updates)


def filter_by_finish(materials: Iterable[Material], finish_preference: Optional[str]) -> List[Material]:
    """Restrict to materials that can stay unplastered when an Exposed finish is wanted."""
    materials = list(materials)
    if not finish_preference or finish_preference == "Plastered":
        return materials
    keywords = ("exposed", "wire-cut", "pressed")
    return [
        m for m in materials
        if m.requires_plastering is False or any(k in (m.name or "").lower() for k in keywords)
    ]
