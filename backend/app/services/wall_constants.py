"""
Wall engineering constants — single source of truth for masonry quantity,
mortar and budget calculations.

Import from here in the quantity, costing and selection engines rather than
hardcoding values.
"""
from typing import Dict


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------
IN_TO_FT: float = 1.0 / 12.0
CFT_PER_M3: float = 35.3147          # cubic feet in one cubic metre

# ---------------------------------------------------------------------------
# Mortar
# ---------------------------------------------------------------------------
CEMENT_BAGS_PER_M3: float = 28.8     # 50 kg bags per m³ of cement
DRY_VOL_MULTIPLIER: float = 1.33     # wet → dry mortar volume
MORTAR_WASTAGE_FACTOR: float = 1.15  # 15 % spillage & brick frogs
SAND_DENSITY_KG_M3: float = 1600.0
MORTAR_CEMENT_PARTS: int = 1
MORTAR_SAND_PARTS: int = 6
DEFAULT_JOINT_IN: float = 0.375      # used for mortar when no joint is given

# ---------------------------------------------------------------------------
# Bricks
# ---------------------------------------------------------------------------
BRICK_BREAKAGE_FACTOR: float = 1.05  # 5 % breakage / cutting
DEFAULT_BRICK_DIMS_IN = (9.0, 4.0, 3.0)

# Nominal wall thickness (inches) used to estimate average wall thickness
LOAD_BEARING_WALL_IN: float = 9.0
PARTITION_WALL_IN: float = 4.5
AAC_PARTITION_WALL_IN: float = 3.0

# Running-length heuristic when no rooms are supplied
MIN_RUNNING_LENGTH_FT: float = 200.0
FALLBACK_TOTAL_AREA_SQFT: float = 1000.0

# ---------------------------------------------------------------------------
# Finishing surcharge (currency / sq ft) keyed by finish roughness
# ---------------------------------------------------------------------------
FINISHING_RATES: Dict[str, float] = {
    "high": 45.0,
    "medium": 30.0,
}
DEFAULT_FINISHING_RATE: float = 20.0

# ---------------------------------------------------------------------------
# Tier budgets (currency per unit) and budget-violation rule
# ---------------------------------------------------------------------------
TIER_BUDGETS: Dict[str, Dict[str, float]] = {
    "Economy":  {"loadBearing": 10.0, "partition": 8.0},
    "Standard": {"loadBearing": 18.0, "partition": 12.0},
    "Luxury":   {"loadBearing": 35.0, "partition": 25.0},
}
FALLBACK_TIER_BUDGET: Dict[str, float] = {"loadBearing": 10.0, "partition": 8.0}

BUDGET_VIOLATION_MULTIPLIER: float = 2.0   # flag when price > 2 × budget
BUDGET_DIFFERENCE_SCALE: float = 1000.0

# ---------------------------------------------------------------------------
# Engine defaults
# ---------------------------------------------------------------------------
DEFAULT_HEIGHT_FT: float = 10.5
