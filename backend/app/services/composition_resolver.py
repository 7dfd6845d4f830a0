"""
CompositionResolver — decides how a building's wall footprint splits into
load-bearing, partition and opening area.

Precedence (strict):
  1. A supplied composition (e.g. from floor-plan analysis) is used as-is.
  2. Otherwise one call to the external composition detector.
  3. Otherwise an average over per-room wall metadata.
  4. Otherwise the previous ratios are kept.

Detector failures never propagate: they are logged and reported back in
``CompositionResolution.error`` so the caller can show a retryable message.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Protocol, Sequence

from app.models.wall_schema import Room, WallComposition
from app.services.wall_constants import LOAD_BEARING_WALL_IN, PARTITION_WALL_IN
from app.services.wall_units import round_half_up

logger = logging.getLogger("archlens-walls")

SOURCE_SUPPLIED = "supplied"
SOURCE_DETECTED = "detected"
SOURCE_ROOM_AVERAGE = "room_average"
SOURCE_UNRESOLVED = "unresolved"


class WallEstimationError(ValueError):
    """Base class for wall-estimation input errors."""


class InvalidCompositionData(WallEstimationError):
    """The detector returned NaN, negative, out-of-range or all-zero percentages."""


class CompositionDetector(Protocol):
    async def detect(self, rooms: List[Room], total_area: float) -> WallComposition:
        ...


@dataclass(frozen=True)
class CompositionResolution:
    main_ratio: float = 0.0
    partition_ratio: float = 0.0
    opening_percent: float = 0.0
    wall_thickness_estimate: Optional[float] = None
    detected: bool = False
    source: str = SOURCE_UNRESOLVED
    error: Optional[str] = None


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _weighted_thickness(main_ratio: float, partition_ratio: float) -> float:
    return main_ratio * LOAD_BEARING_WALL_IN + partition_ratio * PARTITION_WALL_IN


def from_supplied(composition: WallComposition) -> Optional[CompositionResolution]:
    """Use a supplied composition verbatim; None when its percentages are unusable."""
    lb = composition.load_bearing_percentage
    pt = composition.partition_percentage
    op = composition.opening_percentage
    if not (_finite(lb) and _finite(pt) and _finite(op)):
        return None
    if lb < 0 or pt < 0 or op < 0:
        return None

    main_ratio = lb / 100.0
    partition_ratio = pt / 100.0
    thickness = composition.average_wall_thickness
    if not (_finite(thickness) and thickness > 0):
        thickness = _weighted_thickness(main_ratio, partition_ratio)

    return CompositionResolution(
        main_ratio=main_ratio,
        partition_ratio=partition_ratio,
        opening_percent=op,
        wall_thickness_estimate=thickness,
        detected=True,
        source=SOURCE_SUPPLIED,
    )


def validate_detected(composition: WallComposition) -> CompositionResolution:
    """
    Validate a detector result.

    Percentages are rounded half-up to whole numbers before the range check,
    so 100.4 is accepted as 100.

    Raises:
        InvalidCompositionData: on NaN, a value outside [0, 100], or a zero
            load-bearing + partition total.
    """
    raw = (
        composition.load_bearing_percentage,
        composition.partition_percentage,
        composition.opening_percentage,
    )
    if not all(_finite(value) for value in raw):
        raise InvalidCompositionData("AI returned invalid numeric values")
    lb, pt, op = (round_half_up(value) for value in raw)
    for value in (lb, pt, op):
        if value < 0 or value > 100:
            raise InvalidCompositionData("AI returned out-of-range percentages")
    if lb + pt <= 0:
        raise InvalidCompositionData("AI returned zero total wall percentage")

    main_ratio = lb / 100.0
    return CompositionResolution(
        main_ratio=main_ratio,
        partition_ratio=pt / 100.0,
        opening_percent=float(op),
        wall_thickness_estimate=(
            main_ratio * LOAD_BEARING_WALL_IN + (100.0 - lb) / 100.0 * PARTITION_WALL_IN
        ),
        detected=True,
        source=SOURCE_DETECTED,
    )


def average_room_metadata(rooms: Sequence[Room]) -> Optional[CompositionResolution]:
    """
    Average per-room wall metadata.

    Ratios are averaged over rooms that carry metadata, the opening
    percentage over all rooms.
    """
    with_meta = [r for r in rooms if r.wall_metadata is not None]
    if not with_meta:
        return None

    avg_main = sum(r.wall_metadata.main_wall_ratio for r in with_meta) / len(with_meta)
    avg_partition = sum(r.wall_metadata.partition_wall_ratio for r in with_meta) / len(with_meta)
    total_opening = sum(r.opening_percentage or 0.0 for r in rooms)
    avg_opening = round_half_up(total_opening / len(rooms))

    return CompositionResolution(
        main_ratio=avg_main,
        partition_ratio=avg_partition,
        opening_percent=float(avg_opening),
        wall_thickness_estimate=_weighted_thickness(avg_main, avg_partition),
        detected=False,
        source=SOURCE_ROOM_AVERAGE,
    )


async def resolve(
    supplied: Optional[WallComposition],
    rooms: Sequence[Room],
    total_area: float,
    detector: Optional[CompositionDetector] = None,
    previous: Optional[CompositionResolution] = None,
) -> CompositionResolution:
    """Resolve the wall composition following the strict precedence order."""
    previous = previous or CompositionResolution()
    rooms = list(rooms or [])

    if supplied is not None:
        resolution = from_supplied(supplied)
        if resolution is not None:
            logger.info(
                f"Using supplied wall composition: LB {resolution.main_ratio:.0%}, "
                f"P {resolution.partition_ratio:.0%}, openings {resolution.opening_percent:.0f}%"
            )
            return resolution
        logger.info("Supplied wall composition unusable; keeping previous ratios")
        return replace(previous, error=None)

    if rooms and total_area > 0 and detector is not None:
        try:
            composition = await detector.detect(rooms, total_area)
            resolution = validate_detected(composition)
        except Exception as e:
            logger.warning(f"Wall composition detection failed: {e}")
            return replace(
                previous,
                detected=False,
                error=f"Wall composition detection failed: {str(e) or 'Unknown error'}. Please try again.",
            )
        logger.info(
            f"Detected wall composition for {len(rooms)} rooms: "
            f"LB {resolution.main_ratio:.0%}, P {resolution.partition_ratio:.0%}"
        )
        return resolution

    averaged = average_room_metadata(rooms)
    if averaged is not None:
        logger.info(f"Averaged wall metadata across {len(rooms)} rooms")
        return averaged

    return replace(previous, error=None)
