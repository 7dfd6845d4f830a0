"""
Wall estimation domain schemas.

Catalog records, rooms and compositions arrive from external collaborators
(catalog store, floor-plan analysis, AI detector) with camelCase keys and
loosely typed numbers ("12.5", "", None). These models accept both camelCase
and snake_case and coerce numerics leniently so a partial record never breaks
downstream arithmetic.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.services.wall_constants import DEFAULT_HEIGHT_FT, DEFAULT_JOINT_IN, PARTITION_WALL_IN
from app.services.wall_units import to_float

FinishType = Literal["Plastered", "Exposed"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Material(CamelModel):
    """A catalog entry. Read-only to the engine."""
    id: str
    name: str = ""
    category: str = Field("", description="e.g. Wall")
    sub_category: Optional[str] = Field(None, description="LoadBearing | Partition | NonLoadBearing")
    type: Optional[str] = Field(None, description="Brick | Block | Stone | Cement | Sand")
    dimensions: Optional[str] = Field(None, description="'L x W x H' in inches")
    price_per_unit: float = 0.0
    unit: str = ""
    requires_plastering: Optional[bool] = None
    finish_roughness: Optional[str] = Field(None, description="low | medium | high")

    @field_validator("price_per_unit", mode="before")
    @classmethod
    def _coerce_price(cls, value):
        return to_float(value)


class WallMetadata(CamelModel):
    main_wall_ratio: float = 0.0
    partition_wall_ratio: float = 0.0

    @field_validator("main_wall_ratio", "partition_wall_ratio", mode="before")
    @classmethod
    def _coerce_ratio(cls, value):
        return to_float(value)


class Room(CamelModel):
    """A room record from floor-plan analysis; dimensions in feet."""
    length: float = 0.0
    width: float = 0.0
    wall_metadata: Optional[WallMetadata] = None
    opening_percentage: Optional[float] = None
    name: Optional[str] = None
    room_type: Optional[str] = None
    area: Optional[float] = None

    @field_validator("length", "width", mode="before")
    @classmethod
    def _coerce_dimension(cls, value):
        return to_float(value)

    @field_validator("opening_percentage", "area", mode="before")
    @classmethod
    def _coerce_optional(cls, value):
        if value is None or value == "":
            return None
        return to_float(value)


class WallComposition(CamelModel):
    """
    Fractional split of wall footprint (percentages 0–100).

    Values are kept raw (possibly NaN or out of range) so the resolver can
    decide whether to trust them.
    """
    load_bearing_percentage: Optional[float] = None
    partition_percentage: Optional[float] = None
    opening_percentage: Optional[float] = None
    average_wall_thickness: Optional[float] = None

    @field_validator(
        "load_bearing_percentage", "partition_percentage",
        "opening_percentage", "average_wall_thickness",
        mode="before",
    )
    @classmethod
    def _coerce_percentage(cls, value):
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return float("nan")


class Perspective(CamelModel):
    """An externally generated alternative material bundle."""
    id: str
    load_bearing_brick_id: Optional[str] = None
    partition_brick_id: Optional[str] = None
    cement_id: Optional[str] = None
    sand_id: Optional[str] = None
    finish_type: Optional[FinishType] = None
    reasoning: str = ""
    title: str = ""
    subtitle: str = ""
    description: str = ""
    tags: List[str] = Field(default_factory=list)


class CalculationInputs(CamelModel):
    total_area: float = 0.0
    rooms: List[Room] = Field(default_factory=list)
    tier: str = "Standard"
    height: float = DEFAULT_HEIGHT_FT
    wall_thickness: float = 0.0
    joint_thickness: float = DEFAULT_JOINT_IN
    opening_deduction: float = 0.0
    partition_wall_thickness: float = PARTITION_WALL_IN

    @field_validator(
        "total_area", "height", "wall_thickness", "joint_thickness",
        "opening_deduction", "partition_wall_thickness",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value):
        return to_float(value)
