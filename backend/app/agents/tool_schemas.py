"""
Structured output schemas for the wall estimator's LLM calls.

Each tool class documents one AI task; its nested ``Output`` model validates
the JSON the model returns.

Usage:
    from app.agents.tool_schemas import parse_tool_output

    output = parse_tool_output("detect_wall_composition", llm_json)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.wall_schema import CamelModel, Perspective


# ── Tool 1: Detect Wall Composition ───────────────────────────────────────────

class DetectWallCompositionTool(BaseModel):
    """
    Classify a floor plan's walls into load-bearing (9") and partition (4.5")
    shares and estimate the door/window opening percentage.
    """

    class Output(CamelModel):
        # Range checks happen in the composition resolver
        load_bearing_percentage: float = Field(..., description="Share of wall area that is load-bearing, 0-100")
        partition_percentage: float = Field(..., description="Share of wall area that is partition, 0-100")
        opening_percentage: float = Field(..., description="Door/window openings as % of wall area, 0-100")
        average_wall_thickness: Optional[float] = Field(None, description="Average wall thickness in inches")
        confidence: Optional[float] = Field(None, description="0-1 or 0-100; informational only")
        analysis: str = Field("", description="Brief reasoning (1-2 sentences)")

        @field_validator("confidence", mode="before")
        @classmethod
        def _lenient_confidence(cls, value):
            try:
                return float(value)
            except (TypeError, ValueError):
                return None


# ── Tool 2: Generate Wall Perspectives ────────────────────────────────────────

class GenerateWallPerspectivesTool(BaseModel):
    """
    Propose 2-3 distinct wall material bundles for a tier, using only ids
    from the supplied catalog.
    """

    class Output(CamelModel):
        perspectives: List[Perspective] = Field(default_factory=list)


# ── Tool registry: maps tool names to schema classes ─────────────────────────

TOOL_REGISTRY: dict[str, type] = {
    "detect_wall_composition": DetectWallCompositionTool,
    "generate_wall_perspectives": GenerateWallPerspectivesTool,
}


def parse_tool_output(tool_name: str, raw_json: str | dict) -> BaseModel:
    """
    Parse and validate LLM tool output against the Output schema.

    Args:
        tool_name: Key in TOOL_REGISTRY
        raw_json:  JSON string or dict from the LLM response

    Returns:
        Validated Output Pydantic model

    Raises:
        KeyError: If tool_name not in registry
        ValidationError: If LLM output does not match Output schema
    """
    import json as _json

    schema_class = TOOL_REGISTRY[tool_name]
    output_cls = getattr(schema_class, "Output", None)
    if output_cls is None:
        raise ValueError(f"Tool '{tool_name}' has no Output schema defined")

    if isinstance(raw_json, str):
        data = _json.loads(raw_json)
    else:
        data = raw_json

    return output_cls.model_validate(data)
