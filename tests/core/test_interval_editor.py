"""
Tests for core.interval_editor.

Covers every tap transition (empty, toggle on above/below the root,
toggle off root/non-root/last note), octave re-anchoring and the
selection invariants over random tap sequences.
"""
import random

import pytest

from core.constants import name_to_midi_note
from core.interval_editor import (
    apply_tap,
    change_octaves,
    clear,
    highlight_map,
    interval_label,
)
from core.models import IntervalSelectionState


def n(name: str) -> int:
    return name_to_midi_note(name)


def state(root, intervals, octaves, prefer_flats=False) -> IntervalSelectionState:
    return IntervalSelectionState(root, frozenset(intervals), frozenset(octaves), prefer_flats)


def tap_all(*names, start=None) -> IntervalSelectionState:
    s = start if start is not None else IntervalSelectionState()
    for name in names:
        s = apply_tap(s, n(name))
    return s


# ---------------------------------------------------------------------------
# Tap transitions
# ---------------------------------------------------------------------------


class TestApplyTap:

    def test_empty_tap_sets_root(self):
        s = apply_tap(IntervalSelectionState(), n("C4"))
        assert s == state("C", {0}, {4})

    def test_add_above_root(self):
        s = tap_all("C4", "E4")
        assert s == state("C", {0, 4}, {4})

    def test_add_in_higher_octave_extends_octaves(self):
        s = tap_all("C4", "D5")
        assert s == state("C", {0, 14}, {4, 5})

    def test_removing_root_with_single_note_left_promotes_it(self):
        s = tap_all("C4", "E4", "C4")
        assert s == state("E", {0}, {4})

    def test_add_below_root_lowers_reference_octave(self):
        s = tap_all("C4", "A3")
        assert s == state("C", {9, 12}, {3, 4})
        assert s.reference_octave == 3
        assert s.absolute_pitches() == (n("A3"), n("C4"))

    def test_add_two_octaves_below(self):
        s = tap_all("C4", "B2")
        # -13 semitones needs two octaves down
        assert s.selected_octaves == {2, 3, 4}
        assert s.selected_intervals == {11, 24}
        assert s.absolute_pitches() == (n("B2"), n("C4"))

    def test_add_exactly_one_octave_below(self):
        s = tap_all("C4", "C3")
        assert s == state("C", {0, 12}, {3, 4})

    def test_remove_non_root_keeps_root(self):
        s = tap_all("C4", "E4", "G4", "E4")
        assert s == state("C", {0, 7}, {4})

    def test_remove_last_note_empties_selection(self):
        s = tap_all("C4", "C4")
        assert s.is_empty
        assert s.root is None
        assert s.selected_octaves == frozenset()

    def test_tap_after_emptying_sets_new_root(self):
        s = tap_all("C4", "C4", "G3")
        assert s == state("G", {0}, {3})

    def test_remove_root_picks_lowest_remaining(self):
        s = tap_all("C4", "E4", "G4", "C4")
        assert s == state("E", {0, 3}, {4})

    def test_remove_root_rebuilds_octaves(self):
        s = tap_all("C4", "A4", "E5", "C4")
        assert s.root == "A"
        assert s.selected_intervals == {0, 7}
        assert s.selected_octaves == {4, 5}

    def test_removed_root_replacement_uses_flats_when_preferred(self):
        s = tap_all("C4", "B♭4", "C4", start=IntervalSelectionState.empty(prefer_flats=True))
        assert s.root == "B♭"

    def test_empty_tap_uses_sharp_names_by_default(self):
        s = apply_tap(IntervalSelectionState(), n("F#3"))
        assert s.root == "F♯"

    def test_below_root_then_remove_lowest(self):
        s = tap_all("C4", "A3", "A3")
        # Only C4 left, it is promoted back to a plain root
        assert s == state("C", {0}, {4})

    def test_removing_shifted_root_does_not_reassign(self):
        # C4 sits at interval 12 after extending down; removing it is a
        # plain removal because interval 0 (C3) was never selected
        s = tap_all("C4", "A3", "E4", "C4")
        assert s.root == "C"
        assert s.selected_intervals == {9, 16}
        assert s.absolute_pitches() == (n("A3"), n("E4"))

    def test_default_octave_survives_every_transition(self):
        s = IntervalSelectionState.empty(default_octave=5)
        assert s.reference_octave == 5
        for name in ("C4", "E4", "A3", "C4", "E4", "A3"):
            s = apply_tap(s, n(name))
            assert s.default_octave == 5
        assert s.is_empty
        assert s.reference_octave == 5

    def test_clear_keeps_spelling_and_default_octave(self):
        s = clear(prefer_flats=True, default_octave=2)
        assert s.is_empty
        assert s.prefer_flats
        assert s.reference_octave == 2

    def test_does_not_mutate_input(self):
        before = tap_all("C4", "E4")
        snapshot = before.to_dict()
        apply_tap(before, n("G4"))
        assert before.to_dict() == snapshot

    def test_root_removed_with_negative_lowest_interval(self):
        # Negative intervals appear when the reference octave was raised
        # above some selected notes
        s = state("C", {-5, 0, 4}, {4})
        s = apply_tap(s, n("C4"))
        assert s.root == "G"
        assert s.selected_intervals == {0, 9}
        assert s.reference_octave == 3
        assert s.absolute_pitches() == (n("G3"), n("E4"))


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


def _octave(pitch: int) -> int:
    return pitch // 12 - 1


class TestInvariants:

    @pytest.mark.parametrize("seed", range(20))
    def test_octave_coverage_over_random_taps(self, seed):
        rng = random.Random(seed)
        s = IntervalSelectionState()
        for _ in range(60):
            s = apply_tap(s, rng.randint(36, 84))
            for pitch in s.absolute_pitches():
                assert _octave(pitch) in s.selected_octaves
            if not s.is_empty:
                assert s.reference_octave == min(s.selected_octaves)
                assert min(s.selected_intervals) >= 0

    @pytest.mark.parametrize("seed", range(20))
    def test_toggle_pair_restores_note_set(self, seed):
        rng = random.Random(seed)
        s = IntervalSelectionState()
        for _ in range(30):
            s = apply_tap(s, rng.randint(40, 80))
            pitch = rng.randint(40, 80)
            twice = apply_tap(apply_tap(s, pitch), pitch)
            assert twice.absolute_pitches() == s.absolute_pitches()

    @pytest.mark.parametrize("seed", range(20))
    def test_root_is_selected_when_tapping_at_or_above_root(self, seed):
        rng = random.Random(seed)
        s = IntervalSelectionState()
        for _ in range(40):
            low = 48 if s.is_empty else s.reference_pitch
            s = apply_tap(s, rng.randint(low, 84))
            if not s.is_empty:
                assert 0 in s.selected_intervals

    def test_selected_notes_are_exactly_the_toggled_set(self):
        rng = random.Random(7)
        s = IntervalSelectionState()
        expected = set()
        for _ in range(200):
            pitch = rng.randint(40, 76)
            s = apply_tap(s, pitch)
            expected ^= {pitch}
            assert set(s.absolute_pitches()) == expected


# ---------------------------------------------------------------------------
# Octave changes
# ---------------------------------------------------------------------------


class TestChangeOctaves:

    def test_lowering_reference_preserves_pitches(self):
        s = change_octaves(state("C", {0, 4, 7}, {4}), {3, 4})
        assert s.selected_intervals == {12, 16, 19}
        assert s.selected_octaves == {3, 4}
        assert s.absolute_pitches() == (60, 64, 67)

    def test_same_reference_only_replaces_octaves(self):
        before = state("A", {0, -12, 7}, {3, 4})
        s = change_octaves(before, {3, 4, 5})
        assert s.selected_intervals == before.selected_intervals
        assert s.selected_octaves == {3, 4, 5}

    def test_raising_reference_gives_negative_intervals(self):
        s = change_octaves(state("C", {0, 16}, {3, 4}), {4})
        assert s.selected_intervals == {-12, 4}
        assert s.absolute_pitches() == (48, 64)

    def test_empty_selection_only_replaces_octaves(self):
        s = change_octaves(IntervalSelectionState(), {2, 5})
        assert s.is_empty
        assert s.selected_octaves == {2, 5}

    def test_empty_octave_set_falls_back_to_default_reference(self):
        s = change_octaves(state("C", {0}, {4}), set())
        assert s.reference_octave == 3
        assert s.absolute_pitches() == (60,)

    def test_empty_octave_set_keeps_notes_covered(self):
        s = change_octaves(state("C", {0, 4}, {3}), set())
        assert s.selected_octaves == {3}
        for pitch in s.absolute_pitches():
            assert _octave(pitch) in s.selected_octaves
        assert highlight_map(s) == {48: 0, 52: 4}

    def test_empty_octave_set_uses_state_default_octave(self):
        start = IntervalSelectionState("C", {0}, {4}, default_octave=5)
        s = change_octaves(start, [])
        assert s.selected_octaves == {5}
        assert s.selected_intervals == {-12}
        assert s.absolute_pitches() == (60,)


# ---------------------------------------------------------------------------
# Highlighting and labels
# ---------------------------------------------------------------------------


class TestHighlights:

    def test_highlight_map(self):
        s = tap_all("C4", "E4", "G4")
        assert highlight_map(s) == {60: 0, 64: 4, 67: 7}

    def test_highlight_map_skips_unselected_octaves(self):
        s = change_octaves(tap_all("C4", "E4", "D5"), {4})
        assert highlight_map(s) == {60: 0, 64: 4}

    def test_highlight_map_empty(self):
        assert highlight_map(clear()) == {}

    @pytest.mark.parametrize("semitones,label", [
        (0, "R"), (3, "♭3"), (7, "5"), (10, "♭7"),
        (12, "O1"), (14, "9"), (17, "11"), (20, "♭13"), (24, "O2"),
    ])
    def test_interval_label(self, semitones, label):
        assert interval_label(semitones) == label
