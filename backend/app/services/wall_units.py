"""Dimension parsing and small numeric helpers shared by the wall engines."""
import logging
import math
import re
from typing import Any, Optional, Tuple

from app.services.wall_constants import DEFAULT_BRICK_DIMS_IN

logger = logging.getLogger("archlens-walls")

_DIM_SEPARATOR = re.compile(r"\s*[x×*]\s*", re.IGNORECASE)
_UNIT_SUFFIX = re.compile(r"(inches|inch|in|\"|'')$", re.IGNORECASE)


def to_float(value: Any, default: float = 0.0) -> float:
    """Lenient numeric coercion: None, blanks and garbage become ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def parse_dimensions(dimensions: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """
    Parse an "L x W x H" inch string into three positive floats.

    Returns None when the string is absent or does not hold exactly three
    positive numbers.
    """
    if not dimensions or not isinstance(dimensions, str):
        return None
    parts = _DIM_SEPARATOR.split(dimensions.strip())
    if len(parts) != 3:
        return None
    values = []
    for part in parts:
        cleaned = _UNIT_SUFFIX.sub("", part.strip()).strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
        if not math.isfinite(number) or number <= 0:
            return None
        values.append(number)
    return values[0], values[1], values[2]


def brick_dimensions(dimensions: Optional[str]) -> Tuple[float, float, float]:
    """Parsed (length, width, height) in inches, or the 9×4×3 default brick."""
    parsed = parse_dimensions(dimensions)
    if parsed is None:
        if dimensions:
            logger.debug(f"Malformed dimensions {dimensions!r}; using default brick")
        return DEFAULT_BRICK_DIMS_IN
    return parsed


def is_three_inch_profile(dimensions: Optional[str]) -> bool:
    """True when the material's thickness (second component) is 3 inches."""
    parsed = parse_dimensions(dimensions)
    return parsed is not None and parsed[1] == 3.0
