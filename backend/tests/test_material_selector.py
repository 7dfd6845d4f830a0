"""
test_material_selector.py — tier-based default material selection.

Tests cover:
  - Role filters (subcategory spelling variants, cement/sand by type)
  - Economy → cheapest, Standard / Luxury → most expensive
  - Economy AAC partition preference and the 3-inch partition thickness
  - Idempotence and preservation of existing picks
  - Exposed-finish filtering
"""

import pytest

from conftest import make_material

from app.services.material_selector import (
    MaterialSelection,
    candidates_for,
    filter_by_finish,
    pick_by_tier,
    select_defaults,
)

_PARTITION_WALL_IN = 4.5
_AAC_PARTITION_WALL_IN = 3.0


def _brick(id, price, sub="Load Bearing", dims="9x4x3", name=None):
    return make_material(id=id, name=name or id, category="Wall", subCategory=sub,
                         type="Brick", dimensions=dims, pricePerUnit=price, unit="nos")


class TestRoleFilters:

    @pytest.mark.parametrize("sub", ["LoadBearing", "Load Bearing", "load-bearing"])
    def test_load_bearing_variants(self, sub):
        assert len(candidates_for([_brick("a", 5, sub=sub)], "loadBearing")) == 1

    @pytest.mark.parametrize("sub", ["Partition", "Partition Wall", "NonLoadBearing", "Non-Load Bearing"])
    def test_partition_variants(self, sub):
        assert len(candidates_for([_brick("a", 5, sub=sub)], "partition")) == 1

    def test_non_wall_category_excluded(self):
        stone = make_material(id="s", category="Flooring", subCategory="Load Bearing", pricePerUnit=5)
        assert candidates_for([stone], "loadBearing") == []

    def test_cement_and_sand_by_type(self, catalog):
        assert {m.id for m in candidates_for(catalog, "cement")} == {"cem-380", "cem-420"}
        assert {m.id for m in candidates_for(catalog, "sand")} == {"sand-ton", "sand-cft"}


class TestTierRanking:

    @pytest.fixture
    def bricks(self):
        return [_brick("p10", 10), _brick("p5", 5), _brick("p15", 15)]

    def test_economy_picks_cheapest(self, bricks):
        assert pick_by_tier(bricks, "Economy").price_per_unit == 5

    @pytest.mark.parametrize("tier", ["Standard", "Luxury"])
    def test_higher_tiers_pick_most_expensive(self, bricks, tier):
        assert pick_by_tier(bricks, tier).price_per_unit == 15

    def test_empty_candidates(self):
        assert pick_by_tier([], "Economy") is None

    def test_equal_prices_keep_catalog_order(self):
        tied = [_brick("first", 8), _brick("second", 8)]
        assert pick_by_tier(tied, "Economy").id == "first"
        assert pick_by_tier(tied, "Luxury").id == "first"


class TestSelectDefaults:

    def test_standard_defaults(self, catalog):
        selection = select_defaults(catalog, "Standard")
        assert selection.load_bearing.id == "lb-15"
        assert selection.partition.id == "pt-hollow"
        assert selection.cement.id == "cem-420"
        assert selection.sand.id == "sand-ton"
        assert selection.partition_wall_thickness == _PARTITION_WALL_IN

    def test_economy_prefers_aac_partition(self, catalog):
        selection = select_defaults(catalog, "Economy")
        assert selection.load_bearing.id == "lb-5"
        assert selection.partition.id == "pt-aac"
        assert selection.partition_wall_thickness == _AAC_PARTITION_WALL_IN

    def test_economy_without_aac_falls_back_to_cheapest(self, catalog):
        no_aac = [m for m in catalog if m.id != "pt-aac"]
        selection = select_defaults(no_aac, "Economy")
        assert selection.partition.id == "pt-hollow"
        assert selection.partition_wall_thickness == _PARTITION_WALL_IN

    def test_idempotent(self, catalog):
        first = select_defaults(catalog, "Luxury")
        assert select_defaults(catalog, "Luxury", first) == first

    def test_existing_picks_preserved(self, catalog):
        current = MaterialSelection(load_bearing=catalog[0])
        selection = select_defaults(catalog, "Luxury", current)
        assert selection.load_bearing.id == "lb-5"
        assert selection.cement.id == "cem-420"

    def test_empty_catalog_leaves_roles_unset(self):
        selection = select_defaults([], "Standard")
        assert selection == MaterialSelection()


class TestFinishFilter:

    def test_plastered_keeps_everything(self, catalog):
        assert filter_by_finish(catalog, "Plastered") == catalog

    def test_exposed_keeps_unplastered_and_facing(self, catalog):
        ids = {m.id for m in filter_by_finish(catalog, "Exposed")}
        assert ids == {"lb-15"}
