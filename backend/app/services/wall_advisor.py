"""
LLMWallAdvisor — AI collaborator for the wall estimator.

Implements both injected capabilities through the shared LLM client:
  - ``detect(rooms, total_area)``              → WallComposition
  - ``generate_perspectives(tier, area, mats)`` → list[Perspective]

Model output is never trusted as-is: code fences are stripped, the JSON
object is extracted and validated with the schemas in
``app.agents.tool_schemas``. Range checks on detected percentages happen
later in the composition resolver.
"""
import json
import logging
import re
from typing import Iterable, List, Optional

from app.agents.tool_schemas import parse_tool_output
from app.models.wall_schema import Material, Perspective, Room, WallComposition
from app.services import llm_client
from app.services.material_selector import candidates_for

logger = logging.getLogger("archlens-llm")

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

TIER_GUIDANCE = {
    "Economy": (
        "Generate 3 perspectives that are genuinely different within the Economy budget:\n"
        '- Option A "Lowest Cost Functional": prioritise minimum cost per sqft. '
        "Use traditional clay bricks or CHB. Plastered finish.\n"
        '- Option B "Economy Aesthetic": use AAC blocks for partition (fewer joints, less mortar, '
        "better surface). Exposed or Plastered finish that looks better.\n"
        '- Option C "Fast Build Economy": fly ash bricks (load-bearing) + thin-set AAC (partition). '
        "Faster labour, still economical."
    ),
    "Standard": (
        "Generate 3 perspectives within Standard budget:\n"
        '- Option A "Balanced Value": fly ash bricks + AAC partition, plaster finish.\n'
        '- Option B "Structural Focus": high-strength bricks for load-bearing, AAC partition, plaster.\n'
        '- Option C "Modern Aesthetic": AAC throughout, clean finish, exposed feature option.'
    ),
    "Luxury": (
        "Generate 3 perspectives within Luxury budget:\n"
        '- Option A "Premium Traditional": top-grade clay or facing bricks, premium plaster.\n'
        '- Option B "Modern Luxury": AAC blocks + stone accent panels, exposed finish.\n'
        '- Option C "Sustainable Luxury": eco-friendly blocks, minimal mortar joints, exposed finish.'
    ),
}


def extract_json_object(text: str) -> dict:
    """Pull the first JSON object out of an LLM response (fenced or not)."""
    if not text:
        raise ValueError("Empty LLM response")
    cleaned = _CODE_FENCE.sub("", text.strip())
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise ValueError("No JSON object in LLM response")
    return json.loads(match.group())


def summarize_rooms(rooms: Iterable[Room]) -> str:
    lines = []
    for i, r in enumerate(rooms):
        name = r.name or f"Room {i + 1}"
        room_type = r.room_type or "standard"
        area = r.area if r.area is not None else r.length * r.width
        openings = f"{r.opening_percentage:g}%" if r.opening_percentage else "unknown"
        meta = ""
        if r.wall_metadata is not None:
            meta = (
                f" (LB: {r.wall_metadata.main_wall_ratio * 100:.0f}%, "
                f"P: {r.wall_metadata.partition_wall_ratio * 100:.0f}%)"
            )
        lines.append(
            f"{name} [{room_type}]: {area:.1f} sqft ({r.length:.1f}' x {r.width:.1f}'), "
            f"Openings: {openings}{meta}"
        )
    return "\n".join(lines)


def summarize_materials(materials: Iterable[Material], with_details: bool = False) -> str:
    lines = []
    for m in materials:
        line = f"ID:{m.id} | {m.name} | {m.price_per_unit:g}/{m.unit}"
        if with_details:
            line += f" | SubCat:{m.sub_category or 'N/A'} | Dim:{m.dimensions or 'N/A'}"
        lines.append(line)
    return "\n".join(lines)


class LLMWallAdvisor:
    """Composition detector and perspective generator backed by ``llm_client.complete``."""

    def __init__(self, temperature: float = 0.1, max_tokens: int = 4096):
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _ask(self, role: str, prompt: str) -> dict:
        messages = [
            {"role": "system", "content": llm_client.get_system_prompt(role)},
            {"role": "user", "content": prompt},
        ]
        raw = await llm_client.complete(
            messages,
            temperature=self.temperature,
            json_mode=True,
            max_tokens=self.max_tokens,
        )
        return extract_json_object(raw)

    # ------------------------------------------------------------------
    # Composition detection
    # ------------------------------------------------------------------

    def detection_prompt(self, rooms: List[Room], total_area: float) -> str:
        return f"""FLOOR PLAN DATA:
{summarize_rooms(rooms)}
Total Built-up Area: {total_area} sq.ft
Number of Rooms: {len(rooms)}

TASK: Determine the overall wall composition percentages for construction cost estimation.

GUIDELINES:
1. Load-Bearing Walls (9" thick): all exterior perimeter walls, walls separating major
   living spaces, walls perpendicular to beams. Typical range 50-70% of wall area.
2. Partition Walls (4.5" thick): closet dividers, bathroom partitions, non-structural
   dividers. Typical range 30-50% of wall area.
3. Door/Window Openings: bedrooms 20-30%, living areas 25-35%, bathrooms 10-20%,
   corridors 10-15%. Use a weighted average when room opening data exists.

loadBearingPercentage + partitionPercentage must equal 100.

Return ONLY valid JSON:
{{
  "loadBearingPercentage": number,
  "partitionPercentage": number,
  "openingPercentage": number,
  "confidence": number,
  "analysis": "Brief reasoning (1-2 sentences)"
}}"""

    async def detect(self, rooms: List[Room], total_area: float) -> WallComposition:
        logger.info(f"Detecting wall composition for {len(rooms)} rooms, {total_area} sqft")
        data = await self._ask("structural_engineer", self.detection_prompt(rooms, total_area))
        output = parse_tool_output("detect_wall_composition", data)
        logger.debug(f"Wall composition analysis: {output.analysis}")
        return WallComposition(
            load_bearing_percentage=output.load_bearing_percentage,
            partition_percentage=output.partition_percentage,
            opening_percentage=output.opening_percentage,
            average_wall_thickness=output.average_wall_thickness,
        )

    # ------------------------------------------------------------------
    # Perspectives
    # ------------------------------------------------------------------

    def perspectives_prompt(self, tier: str, total_area: float, materials: List[Material]) -> str:
        walls = candidates_for(materials, "loadBearing") + candidates_for(materials, "partition")
        return f"""For a {tier} tier project ({total_area} sq ft), generate 3 distinct wall construction
perspectives. Each perspective is a DIFFERENT approach within the same tier budget.

{TIER_GUIDANCE.get(tier, TIER_GUIDANCE["Standard"])}

=== WALL (load-bearing subCategory "Load Bearing", partition "Partition Wall"/"Partition"/"Non-Load Bearing") ===
{summarize_materials(walls, with_details=True)}

=== CEMENT (use only these IDs for cementId) ===
{summarize_materials(candidates_for(materials, "cement"))}

=== SAND (use only these IDs for sandId) ===
{summarize_materials(candidates_for(materials, "sand"))}

RULES:
1. Every ID MUST be an actual ID from the lists above.
2. loadBearingBrickId must be a load-bearing material; partitionBrickId a partition material.
3. title at most 4 words, subtitle at most 8 words, description 1-2 sentences, 2-3 tags.
4. finishType must be exactly "Plastered" or "Exposed".
5. reasoning = 1 sentence of engineering justification.

Return ONLY valid JSON:
{{
  "perspectives": [
    {{
      "id": "A", "title": "...", "subtitle": "...", "description": "...",
      "tags": ["..."], "finishType": "Plastered",
      "loadBearingBrickId": "...", "partitionBrickId": "...",
      "cementId": "...", "sandId": "...", "reasoning": "..."
    }}
  ]
}}"""

    async def generate_perspectives(
        self, tier: str, total_area: float, materials: List[Material]
    ) -> List[Perspective]:
        materials = list(materials)
        data = await self._ask("civil_engineer", self.perspectives_prompt(tier, total_area, materials))
        output = parse_tool_output("generate_wall_perspectives", data)

        known = {m.id for m in materials}
        valid = [p for p in output.perspectives if _references_known_ids(p, known)]
        dropped = len(output.perspectives) - len(valid)
        if dropped:
            logger.warning(f"Dropped {dropped} wall perspectives with unknown material ids")
        if not valid:
            raise RuntimeError("AI returned no valid perspectives with real material IDs")

        logger.info(f"Generated {len(valid)} wall perspectives for {tier} tier")
        return valid


def _references_known_ids(perspective: Perspective, known: set) -> bool:
    ids: List[Optional[str]] = [
        perspective.load_bearing_brick_id,
        perspective.partition_brick_id,
        perspective.cement_id,
        perspective.sand_id,
    ]
    return all(i in known for i in ids)
