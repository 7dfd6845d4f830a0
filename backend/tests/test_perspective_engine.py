"""
test_perspective_engine.py — perspective application and selection provenance.

Tests cover:
  - Defaults recorded as manual provenance
  - Applying a perspective: AI provenance, finish, advice, 3-inch partition
  - Unknown material ids skipped without touching other roles
  - Manual override after a perspective
"""

import pytest

from app.models.wall_schema import Perspective
from app.services.material_selector import MaterialSelection, select_defaults
from app.services.perspective_engine import (
    PROVENANCE_AI,
    PROVENANCE_MANUAL,
    PROVENANCE_UNSET,
    SelectionState,
    apply_perspective,
    manual_select,
    record_defaults,
)

_AAC_PARTITION_WALL_IN = 3.0


@pytest.fixture
def by_id(catalog):
    return {m.id: m for m in catalog}


@pytest.fixture
def defaults_state(catalog):
    return record_defaults(SelectionState(), select_defaults(catalog, "Standard"))


class TestRecordDefaults:

    def test_initial_provenance_unset(self):
        assert set(SelectionState().provenance.values()) == {PROVENANCE_UNSET}

    def test_filled_roles_become_manual(self, defaults_state):
        assert set(defaults_state.provenance.values()) == {PROVENANCE_MANUAL}

    def test_unfilled_roles_stay_unset(self, red_brick):
        state = record_defaults(SelectionState(), MaterialSelection(load_bearing=red_brick))
        assert state.provenance["loadBearing"] == PROVENANCE_MANUAL
        assert state.provenance["cement"] == PROVENANCE_UNSET


class TestApplyPerspective:

    def test_all_roles_switch_to_ai(self, defaults_state, catalog, perspective):
        state, delta = apply_perspective(perspective, catalog, defaults_state)

        assert state.selection.load_bearing.id == "lb-15"
        assert state.selection.partition.id == "pt-aac"
        assert state.selection.cement.id == "cem-420"
        assert state.selection.sand.id == "sand-cft"
        assert set(state.provenance.values()) == {PROVENANCE_AI}
        assert state.selected_perspective_id == "B"
        assert sorted(delta.changed_roles) == ["cement", "loadBearing", "partition", "sand"]

    def test_finish_and_advice_copied(self, defaults_state, catalog, perspective):
        state, delta = apply_perspective(perspective, catalog, defaults_state)
        assert state.finish_preference == "Exposed"
        assert delta.finish_preference == "Exposed"
        assert state.ai_advice == "AAC partitions need far less mortar."
        assert state.ai_recommendations["partition"] == "pt-aac"

    def test_three_inch_partition_sets_thickness(self, defaults_state, catalog, perspective):
        state, delta = apply_perspective(perspective, catalog, defaults_state)
        assert state.selection.partition_wall_thickness == _AAC_PARTITION_WALL_IN
        assert delta.partition_wall_thickness == _AAC_PARTITION_WALL_IN

    def test_regular_partition_keeps_thickness(self, defaults_state, catalog):
        p = Perspective(id="A", partition_brick_id="pt-hollow")
        state, delta = apply_perspective(p, catalog, defaults_state)
        assert state.selection.partition_wall_thickness == 4.5
        assert delta.partition_wall_thickness is None

    def test_unknown_ids_skipped(self, defaults_state, catalog):
        p = Perspective(id="C", load_bearing_brick_id="ghost", cement_id="cem-380")
        state, delta = apply_perspective(p, catalog, defaults_state)

        assert delta.skipped_ids == ["ghost"]
        assert delta.changed_roles == ["cement"]
        assert state.selection.load_bearing == defaults_state.selection.load_bearing
        assert state.provenance["loadBearing"] == PROVENANCE_MANUAL
        assert state.provenance["cement"] == PROVENANCE_AI

    def test_does_not_mutate_input_state(self, defaults_state, catalog, perspective):
        before = defaults_state.selection
        apply_perspective(perspective, catalog, defaults_state)
        assert defaults_state.selection is before
        assert defaults_state.selected_perspective_id is None


class TestManualSelect:

    def test_manual_after_perspective(self, defaults_state, catalog, perspective, by_id):
        state, _ = apply_perspective(perspective, catalog, defaults_state)
        state = manual_select(state, "loadBearing", by_id["lb-5"])

        assert state.selection.load_bearing.id == "lb-5"
        assert state.provenance["loadBearing"] == PROVENANCE_MANUAL
        assert state.provenance["partition"] == PROVENANCE_AI
        assert state.selected_perspective_id is None

    def test_unknown_role_rejected(self, defaults_state, red_brick):
        with pytest.raises(ValueError):
            manual_select(defaults_state, "roof", red_brick)
